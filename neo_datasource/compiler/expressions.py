"""
Helpers that inspect value expressions and literals.
"""
from __future__ import annotations


def looks_like_call_expression(expr: str | None) -> bool:
    """True when *expr* contains both ``(`` and ``)``, anywhere.

    No balancing is attempted: ``sum(a) + b`` and ``)x(`` both count.
    """
    if not expr:
        return False
    return "(" in expr and ")" in expr


def is_quoted(value: str) -> bool:
    return value.startswith("'")


def quote_literal(value: str) -> str:
    """Single-quote *value* unless the user already quoted it."""
    return value if is_quoted(value) else f"'{value}'"
