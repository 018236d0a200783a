"""
Logging setup shared by the compiler, transport and API layers.

Every module asks for its logger through ``get_logger(__name__)``; the
first call for a name attaches one stdout handler, later calls reuse it.
"""
from __future__ import annotations

import logging
import sys

from neo_datasource.core.config import get_settings

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _level_from_name(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    settings = get_settings()
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(_level_from_name(settings.log_level))
    return logger

