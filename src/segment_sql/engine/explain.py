"""Heuristic analysis of EXPLAIN output.

Plan text is matched against row-count hints and a fixed vocabulary of
operation names. Both engine-neutral names (``TableScan``, ``GroupBy``) and
PostgreSQL node names (``Seq Scan``, ``Hash Join``, ``Unique``) are
recognised. Analysis is a pure function of the plan rows and never raises.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from segment_sql.errors import PlanParsingError
from segment_sql.models.validation import Complexity, ExplainAnalysis

logger = logging.getLogger(__name__)

HIGH_ROW_THRESHOLD = 1_000_000
MEDIUM_ROW_THRESHOLD = 100_000

_PLAN_KEYS = ("QUERY PLAN", "step", "plan", "PLAN")

_ROW_HINTS = (
    re.compile(r"rows[=:]\s*(\d+)", re.IGNORECASE),
    re.compile(r"cardinality[=:]\s*(\d+)", re.IGNORECASE),
    re.compile(r"output[=:]\s*(\d+)", re.IGNORECASE),
)

_OPERATIONS = (
    ("TableScan", re.compile(r"TableScan|Table Scan|Seq Scan|Index Scan|Index Only Scan|Bitmap Heap Scan")),
    ("Filter", re.compile(r"Filter")),
    ("Join", re.compile(r"Join|Nested Loop")),
    ("Aggregate", re.compile(r"Aggregate")),
    ("Sort", re.compile(r"Sort")),
    ("Limit", re.compile(r"Limit")),
    ("Distinct", re.compile(r"Distinct|Unique")),
    ("Project", re.compile(r"Project")),
    ("GroupBy", re.compile(r"GroupBy|Group By|Group Key")),
)

UNAVAILABLE_SUMMARY = "Unable to analyze query plan"


def _row_text(row: Any) -> str:
    if isinstance(row, str):
        return row
    if isinstance(row, Mapping):
        for key in _PLAN_KEYS:
            value = row.get(key)
            if value:
                return str(value)
        return json.dumps(row, default=str)
    if isinstance(row, (tuple, list)):
        return " ".join(str(value) for value in row)
    raise PlanParsingError(f"Unsupported plan row type: {type(row).__name__}")


def plan_text(rows: Iterable[Any]) -> str:
    return "\n".join(_row_text(row) for row in rows)


def extract_row_estimates(text: str) -> list[int]:
    return [
        int(match.group(1))
        for pattern in _ROW_HINTS
        for match in pattern.finditer(text)
    ]


def extract_operations(text: str) -> list[str]:
    return [name for name, pattern in _OPERATIONS if pattern.search(text)]


def classify_complexity(operations: list[str], estimated_rows: int) -> Complexity:
    if estimated_rows > HIGH_ROW_THRESHOLD:
        return "high"
    if "Join" in operations and "Aggregate" in operations:
        return "high"
    if estimated_rows > MEDIUM_ROW_THRESHOLD:
        return "medium"
    if "Join" in operations or "Aggregate" in operations:
        return "medium"
    return "low"


def parse_explain_output(rows: Iterable[Any]) -> ExplainAnalysis:
    """Estimate row count, operations and complexity from EXPLAIN rows."""
    try:
        text = plan_text(rows)
        estimated_rows = max(extract_row_estimates(text), default=0)
        operations = extract_operations(text)
        return ExplainAnalysis(
            estimated_rows=estimated_rows,
            summary=(
                f"Query will process approximately {estimated_rows:,} rows "
                f"using {len(operations)} operations"
            ),
            operations=operations,
            complexity=classify_complexity(operations, estimated_rows),
        )
    except Exception as exc:
        logger.warning("Error parsing EXPLAIN output: %s", exc)
        return ExplainAnalysis(
            estimated_rows=0,
            summary=UNAVAILABLE_SUMMARY,
            operations=[],
            complexity="medium",
        )
