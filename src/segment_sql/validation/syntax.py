"""Static, schema-agnostic lexical checks on candidate SQL."""

from __future__ import annotations

import re

from segment_sql.models.validation import ValidationVerdict

DENIED_KEYWORDS = (
    "DROP",
    "DELETE",
    "UPDATE",
    "INSERT",
    "TRUNCATE",
    "ALTER",
    "CREATE",
    "EXEC",
)


def _keyword(word: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![A-Za-z0-9_]){word}(?![A-Za-z0-9_])", re.IGNORECASE)


_FROM = _keyword("FROM")
_DISTINCT = _keyword("DISTINCT")


def validate_syntax(sql: str) -> ValidationVerdict:
    """Check statement shape, mutation keywords and parenthesis balance.

    Deny-listed keywords match anywhere in the statement, so EXECUTE trips
    EXEC and an identifier such as LAST_UPDATED trips UPDATE.
    """
    if not sql or not sql.strip():
        return ValidationVerdict.failure("SQL query cannot be empty")

    errors: list[str] = []
    warnings: list[str] = []
    upper_sql = sql.upper()

    if not upper_sql.strip().startswith("SELECT"):
        errors.append("Query must start with SELECT")

    if not _FROM.search(sql):
        errors.append("Query must include FROM clause")

    for keyword in DENIED_KEYWORDS:
        if keyword in upper_sql:
            errors.append(
                f"Dangerous keyword detected: {keyword}. Only SELECT queries are allowed."
            )

    if sql.count("(") != sql.count(")"):
        errors.append("Unbalanced parentheses in query")

    if not _DISTINCT.search(sql):
        warnings.append("Consider using DISTINCT to avoid duplicate records")

    return ValidationVerdict.from_findings(errors, warnings)
