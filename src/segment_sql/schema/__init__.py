"""Semantic schema definitions and the schema registry."""

from segment_sql.schema.models import (
    DIRECT_MAIL,
    EMAIL_MARKETING,
    FieldDefinition,
    SchemaDefinition,
    SchemaSummary,
    TableDefinition,
    UseCaseRules,
)
from segment_sql.schema.registry import (
    SchemaRegistry,
    load_schema_file,
    parse_schema_document,
)

__all__ = [
    "DIRECT_MAIL",
    "EMAIL_MARKETING",
    "FieldDefinition",
    "SchemaDefinition",
    "SchemaSummary",
    "TableDefinition",
    "UseCaseRules",
    "SchemaRegistry",
    "load_schema_file",
    "parse_schema_document",
]
