"""Read-only query engine access."""

from segment_sql.engine.connection import (
    HealthcheckResult,
    check_engine_health,
    connect_readonly,
)
from segment_sql.engine.executor import (
    apply_row_limit,
    clamp_max_rows,
    count_statement,
    get_query_count,
    preview_query,
    run_query,
    validate_with_engine,
)
from segment_sql.engine.explain import classify_complexity, parse_explain_output

__all__ = [
    "HealthcheckResult",
    "apply_row_limit",
    "check_engine_health",
    "clamp_max_rows",
    "classify_complexity",
    "connect_readonly",
    "count_statement",
    "get_query_count",
    "parse_explain_output",
    "preview_query",
    "run_query",
    "validate_with_engine",
]
