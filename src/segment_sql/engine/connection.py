"""Query engine connection and health check utilities."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import psycopg
from psycopg.rows import dict_row

from segment_sql.errors import QueryEngineError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthcheckResult:
    """Information returned by a successful query engine health check."""

    current_database: str
    current_user: str
    server_version: str
    transaction_read_only: bool


def _session_options(timeout_seconds: int) -> str:
    return (
        "-c default_transaction_read_only=on "
        f"-c statement_timeout={timeout_seconds * 1000}"
    )


@contextmanager
def connect_readonly(
    dsn: str, timeout_seconds: int = 30
) -> Iterator[psycopg.Connection]:
    """Open a dedicated read-only connection and close it on every exit path."""
    try:
        conn = psycopg.connect(
            dsn,
            connect_timeout=timeout_seconds,
            options=_session_options(timeout_seconds),
            row_factory=dict_row,
            autocommit=True,
        )
    except psycopg.Error as exc:
        raise QueryEngineError(
            f"Could not connect to the query engine with provided DSN: {exc}"
        ) from exc

    logger.debug("Opened query engine connection")
    try:
        yield conn
    finally:
        conn.close()
        logger.debug("Closed query engine connection")


def check_engine_health(dsn: str, timeout_seconds: int = 30) -> HealthcheckResult:
    """Run a lightweight query engine health check and verify read-only mode."""
    with connect_readonly(dsn, timeout_seconds) as conn:
        try:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT
                      current_database() AS current_database,
                      current_user AS current_user,
                      current_setting('server_version') AS server_version,
                      current_setting('transaction_read_only') AS transaction_read_only
                    """
                )
                row = cur.fetchone()
        except psycopg.Error as exc:
            raise QueryEngineError(f"Query engine health check failed: {exc}") from exc

    if row is None:
        raise QueryEngineError("Query engine health check returned no data.")

    transaction_read_only = row["transaction_read_only"] == "on"
    if not transaction_read_only:
        raise QueryEngineError("Connected successfully but session is not read-only.")

    return HealthcheckResult(
        current_database=row["current_database"],
        current_user=row["current_user"],
        server_version=row["server_version"],
        transaction_read_only=transaction_read_only,
    )
