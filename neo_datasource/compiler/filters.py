"""
Filter compiler -- turns the editor's filter rows into an AND-chain.

Each contributing clause yields one fragment with its own leading and
trailing space, e.g. `` AND NAME='temp' ``.  Fragments are concatenated in
clause order so the compiled text is reproducible.
"""
from __future__ import annotations

from typing import Iterable

from neo_datasource.catalog.column_types import is_numeric
from neo_datasource.compiler.expressions import is_quoted, quote_literal
from neo_datasource.compiler.spec import FilterClause


def _type_code(raw: str) -> int | None:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _in_list(value: str) -> str:
    items = [quote_literal(item.strip()) for item in value.split(",")]
    return "(" + ",".join(items) + ")"


def _comparison_value(clause: FilterClause) -> str:
    code = _type_code(clause.column_type_code)
    numeric = code is not None and is_numeric(code)
    if not numeric and not is_quoted(clause.value):
        return f"'{clause.value}'"
    return clause.value


def compile_clause(clause: FilterClause) -> str:
    """Compile one clause; placeholders compile to an empty string."""
    if clause.is_placeholder:
        return ""
    if clause.is_raw:
        return f" AND {clause.raw_condition} "
    if clause.operator == "in":
        return f" AND {clause.column_key} in {_in_list(clause.value)} "
    return f" AND {clause.column_key}{clause.operator}{_comparison_value(clause)} "


def compile_filters(clauses: Iterable[FilterClause] | None) -> str:
    """Compile an ordered sequence of clauses into one AND-chain (possibly empty)."""
    if not clauses:
        return ""
    return "".join(compile_clause(c) for c in clauses)
