"""Cross-check tables and fields referenced by SQL against a semantic schema.

Two extraction strategies share one verdict contract:

- ``regex`` scans for identifiers after FROM/JOIN and for ``table.field``
  tokens. It is fast and lossy: it cannot see through aliases, subqueries
  or CTEs, and it may pick up dotted text that is not a field reference.
- ``parser`` walks a SQLGlot syntax tree, skips CTE names and resolves
  column qualifiers through table aliases.

Unknown tables are errors. Unknown fields on known tables are only warnings,
because field extraction cannot tell real references from look-alike text.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from sqlglot import exp

from segment_sql.models.validation import ValidationVerdict
from segment_sql.schema.models import SchemaDefinition
from segment_sql.schema.registry import SchemaRegistry
from segment_sql.validation.parser import parse_sql

logger = logging.getLogger(__name__)

_TABLE_REFERENCE = re.compile(
    r"\b(?:FROM|JOIN)\s+([A-Za-z_][A-Za-z0-9_]*)", re.IGNORECASE
)
_FIELD_REFERENCE = re.compile(r"\b([A-Za-z_][A-Za-z0-9_]*)\.([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class SchemaReferences:
    """Upper-cased table names and (table, field) pairs found in a query."""

    tables: tuple[str, ...] = ()
    fields: tuple[tuple[str, str], ...] = ()


def _unique(items):
    seen = set()
    ordered = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return tuple(ordered)


class ReferenceExtractor(ABC):
    @abstractmethod
    def extract(self, sql: str) -> SchemaReferences:
        """Return the schema objects a query appears to reference."""


class RegexReferenceExtractor(ReferenceExtractor):
    def extract(self, sql: str) -> SchemaReferences:
        tables = _unique(match.group(1).upper() for match in _TABLE_REFERENCE.finditer(sql))
        fields = _unique(
            (match.group(1).upper(), match.group(2).upper())
            for match in _FIELD_REFERENCE.finditer(sql)
        )
        return SchemaReferences(tables=tables, fields=fields)


class ParserReferenceExtractor(ReferenceExtractor):
    def __init__(self, dialect: str = "postgres") -> None:
        self.dialect = dialect

    def extract(self, sql: str) -> SchemaReferences:
        expression = parse_sql(sql, self.dialect)

        cte_names = {
            cte.alias_or_name.upper()
            for cte in expression.find_all(exp.CTE)
            if cte.alias_or_name
        }

        tables: list[str] = []
        aliases: dict[str, str] = {}
        for table in expression.find_all(exp.Table):
            if not table.name:
                continue
            name = table.name.upper()
            if name in cte_names and not table.db:
                continue
            tables.append(name)
            aliases[table.alias_or_name.upper()] = name

        fields: list[tuple[str, str]] = []
        for column in expression.find_all(exp.Column):
            if not column.table or not column.name:
                continue
            # Qualifiers that are not table aliases belong to subqueries or CTEs.
            resolved = aliases.get(column.table.upper())
            if resolved is not None:
                fields.append((resolved, column.name.upper()))

        return SchemaReferences(tables=_unique(tables), fields=_unique(fields))


def create_extractor(strategy: str = "regex", dialect: str = "postgres") -> ReferenceExtractor:
    if strategy == "regex":
        return RegexReferenceExtractor()
    if strategy == "parser":
        return ParserReferenceExtractor(dialect)
    raise ValueError(f"Unknown reference extraction strategy: {strategy!r}")


def check_schema_conformance(
    sql: str,
    schema: SchemaDefinition,
    extractor: ReferenceExtractor | None = None,
) -> ValidationVerdict:
    references = (extractor or RegexReferenceExtractor()).extract(sql)
    valid_tables = ", ".join(schema.table_names)

    errors: list[str] = []
    warnings: list[str] = []
    for table in references.tables:
        if not schema.has_table(table):
            errors.append(f"Invalid table: {table}. Valid tables: {valid_tables}")

    if not references.tables:
        errors.append("No valid tables found in query")

    for table, field in references.fields:
        if schema.has_table(table) and not schema.has_field(table, field):
            warnings.append(f"Field {field} may not exist in table {table}")

    return ValidationVerdict.from_findings(errors, warnings)


def validate_against_schema(
    sql: str,
    schema_id: str,
    registry: SchemaRegistry,
    *,
    strategy: str = "regex",
    dialect: str = "postgres",
) -> ValidationVerdict:
    """Resolve the schema and check conformance; failures become a verdict."""
    try:
        schema = registry.get(schema_id)
        return check_schema_conformance(sql, schema, create_extractor(strategy, dialect))
    except Exception as exc:
        logger.warning("Schema conformance check failed for %s: %s", schema_id, exc)
        return ValidationVerdict.failure(str(exc))
