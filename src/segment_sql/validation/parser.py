"""SQL parsing helpers backed by SQLGlot."""

from __future__ import annotations

from sqlglot import exp, parse_one
from sqlglot.errors import ParseError, TokenError


class SQLParseError(RuntimeError):
    """Raised when SQL cannot be parsed."""


def parse_sql(sql: str, dialect: str = "postgres") -> exp.Expression:
    """Parse one SQL statement using the given dialect's semantics."""
    normalized = sql.strip().rstrip(";").strip()
    if not normalized:
        raise SQLParseError("SQL cannot be empty.")

    try:
        return parse_one(normalized, read=dialect)
    except (ParseError, TokenError) as exc:
        raise SQLParseError(f"Invalid SQL: {exc}") from exc
