"""Static validators and verdict merging."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from segment_sql.models.validation import ValidationVerdict
from segment_sql.schema.registry import SchemaRegistry
from segment_sql.validation.parser import SQLParseError, parse_sql
from segment_sql.validation.schema_conformance import (
    ParserReferenceExtractor,
    ReferenceExtractor,
    RegexReferenceExtractor,
    SchemaReferences,
    check_schema_conformance,
    create_extractor,
    validate_against_schema,
)
from segment_sql.validation.syntax import DENIED_KEYWORDS, validate_syntax


def run_static_validators(
    sql: str,
    schema_id: str,
    registry: SchemaRegistry,
    *,
    strategy: str = "regex",
    dialect: str = "postgres",
    parallel: bool = False,
) -> ValidationVerdict:
    """Run syntax then schema conformance checks and merge their findings."""
    if not parallel:
        return ValidationVerdict.merge(
            validate_syntax(sql),
            validate_against_schema(
                sql, schema_id, registry, strategy=strategy, dialect=dialect
            ),
        )

    with ThreadPoolExecutor(max_workers=2) as pool:
        syntax = pool.submit(validate_syntax, sql)
        conformance = pool.submit(
            validate_against_schema,
            sql,
            schema_id,
            registry,
            strategy=strategy,
            dialect=dialect,
        )
        return ValidationVerdict.merge(syntax.result(), conformance.result())


__all__ = [
    "DENIED_KEYWORDS",
    "ParserReferenceExtractor",
    "ReferenceExtractor",
    "RegexReferenceExtractor",
    "SQLParseError",
    "SchemaReferences",
    "check_schema_conformance",
    "create_extractor",
    "parse_sql",
    "run_static_validators",
    "validate_against_schema",
    "validate_syntax",
]
