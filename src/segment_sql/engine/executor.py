"""Read-only query execution: engine validation, preview and counting."""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any

import psycopg
from psycopg import postgres

from segment_sql.engine.connection import connect_readonly
from segment_sql.engine.explain import parse_explain_output
from segment_sql.errors import QueryEngineError, QueryEngineTimeoutError
from segment_sql.models.execution import ColumnMeta, CountResult, PreviewResult, QueryResult
from segment_sql.models.validation import ValidationReport
from segment_sql.validation.parser import SQLParseError, parse_sql

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_ROWS = 100
MAX_PREVIEW_ROWS = 1000

_LIMIT_CLAUSE = re.compile(r"\bLIMIT\b", re.IGNORECASE)
_PREPARED_NAME = "segment_candidate"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 3)


def _strip_statement(sql: str) -> str:
    return sql.strip().rstrip(";").rstrip()


def _type_name(type_code: int) -> str:
    info = postgres.types.get(type_code)
    return info.name if info is not None else str(type_code)


def run_query(sql: str, *, dsn: str, timeout_seconds: int = 30) -> QueryResult:
    """Execute a statement on a dedicated read-only connection."""
    query_id = str(uuid.uuid4())
    started = time.perf_counter()
    with connect_readonly(dsn, timeout_seconds) as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(sql)
                description = cur.description or []
                rows = cur.fetchall() if description else []
        except psycopg.errors.QueryCanceled as exc:
            raise QueryEngineTimeoutError(
                f"Query exceeded the {timeout_seconds}s timeout: {exc}"
            ) from exc
        except psycopg.Error as exc:
            raise QueryEngineError(f"Query execution failed: {exc}") from exc

    result = QueryResult(
        rows=[dict(row) for row in rows],
        columns=[ColumnMeta(name=col.name, type=_type_name(col.type_code)) for col in description],
        row_count=len(rows),
        execution_time=_elapsed_ms(started),
        query_id=query_id,
    )
    logger.info(
        "Query %s returned %d rows in %.1f ms", query_id, result.row_count, result.execution_time
    )
    return result


def _has_outer_limit(sql: str, dialect: str) -> bool:
    try:
        tree = parse_sql(sql, dialect=dialect)
    except SQLParseError:
        return _LIMIT_CLAUSE.search(sql) is not None
    return tree.args.get("limit") is not None


def apply_row_limit(sql: str, max_rows: int, dialect: str = "postgres") -> tuple[str, bool]:
    """Append a LIMIT clause unless the outermost statement already carries one.

    The clause goes on its own line so a trailing ``--`` comment cannot swallow it.
    """
    if _has_outer_limit(sql, dialect):
        return sql, False
    return f"{_strip_statement(sql)}\nLIMIT {max_rows}", True


def clamp_max_rows(max_rows: int | None, upper_bound: int = MAX_PREVIEW_ROWS) -> int:
    if max_rows is None:
        return min(DEFAULT_PREVIEW_ROWS, upper_bound)
    return max(1, min(max_rows, upper_bound))


def count_statement(sql: str) -> str:
    return (
        f"WITH base_query AS (\n{_strip_statement(sql)}\n)\n"
        "SELECT COUNT(*) AS total_count FROM base_query"
    )


def get_query_count(sql: str, *, dsn: str, timeout_seconds: int = 30) -> CountResult:
    """Count the rows a statement would return; failures are reported as a zero count."""
    started = time.perf_counter()
    try:
        result = run_query(count_statement(sql), dsn=dsn, timeout_seconds=timeout_seconds)
    except QueryEngineError as exc:
        logger.warning("Row count query failed: %s", exc)
        return CountResult(count=0, execution_time=0, query_id="error")

    row: dict[str, Any] = result.rows[0] if result.rows else {}
    value = row.get("total_count", row.get("TOTAL_COUNT", 0))
    return CountResult(
        count=int(value or 0),
        execution_time=_elapsed_ms(started),
        query_id=result.query_id,
    )


def preview_query(
    sql: str,
    max_rows: int | None = None,
    *,
    dsn: str,
    timeout_seconds: int = 30,
    max_rows_limit: int = MAX_PREVIEW_ROWS,
    dialect: str = "postgres",
) -> PreviewResult:
    """Return a row-limited sample plus the unrestricted count of the statement."""
    limit = clamp_max_rows(max_rows, max_rows_limit)
    limited_sql, limit_applied = apply_row_limit(sql, limit, dialect)
    logger.info("Previewing query with limit %d (limit added: %s)", limit, limit_applied)

    started = time.perf_counter()
    sample = run_query(limited_sql, dsn=dsn, timeout_seconds=timeout_seconds)
    count = get_query_count(sql, dsn=dsn, timeout_seconds=timeout_seconds)

    return PreviewResult(
        rows=sample.rows,
        columns=sample.columns,
        row_count=sample.row_count,
        total_estimate=count.count,
        execution_time=_elapsed_ms(started),
        query_id=sample.query_id,
        limit_applied=limit_applied,
    )


def validate_with_engine(sql: str, *, dsn: str, timeout_seconds: int = 30) -> ValidationReport:
    """Ask the engine to compile the statement, then analyse its EXPLAIN plan.

    The statement is prepared and deallocated without executing it. An engine
    rejection becomes a failed report; an unreachable engine raises.
    """
    statement = _strip_statement(sql)
    with connect_readonly(dsn, timeout_seconds) as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(f"PREPARE {_PREPARED_NAME} AS {statement}")
                cur.execute(f"DEALLOCATE {_PREPARED_NAME}")
        except psycopg.Error as exc:
            logger.info("Query engine rejected statement: %s", exc)
            return ValidationReport(is_valid=False, errors=[str(exc).strip()], warnings=[])

        try:
            with conn.cursor() as cur:
                cur.execute(f"EXPLAIN {statement}")
                plan_rows = cur.fetchall()
        except psycopg.Error as exc:
            logger.warning("EXPLAIN failed after statement was accepted: %s", exc)
            return ValidationReport(
                is_valid=False, errors=[f"EXPLAIN failed: {str(exc).strip()}"], warnings=[]
            )

    analysis = parse_explain_output(plan_rows)
    return ValidationReport(
        is_valid=True,
        errors=[],
        warnings=[],
        estimated_row_count=analysis.estimated_rows,
        execution_plan=analysis.summary,
        complexity=analysis.complexity,
    )
