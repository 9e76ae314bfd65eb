"""Schema document loading and the load-once schema registry."""

from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Any

from segment_sql.errors import SchemaLoadError, SchemaNotFoundError
from segment_sql.schema.models import (
    FieldDefinition,
    SchemaDefinition,
    SchemaSummary,
    TableDefinition,
    UseCaseRules,
)

logger = logging.getLogger(__name__)

METADATA_FILE = "schema-metadata.json"

_SCHEMA_ID = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]*")


def _optional_str(value: object, where: str) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise SchemaLoadError(f"{where} must be a string.")


def _string_list(value: object, where: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise SchemaLoadError(f"{where} must be a list of strings.")
    return tuple(value)


def _parse_field(field_name: str, payload: object, where: str) -> FieldDefinition:
    if not isinstance(payload, dict):
        raise SchemaLoadError(f"Field '{where}' is invalid.")

    field_type = payload.get("type")
    if not isinstance(field_type, str) or not field_type.strip():
        raise SchemaLoadError(f"Field '{where}' missing type.")

    nullable = payload.get("nullable", True)
    primary_key = payload.get("primary_key", False)
    if not isinstance(nullable, bool):
        raise SchemaLoadError(f"Field '{where}' has invalid nullable.")
    if not isinstance(primary_key, bool):
        raise SchemaLoadError(f"Field '{where}' has invalid primary_key.")

    return FieldDefinition(
        name=field_name,
        type=field_type,
        nullable=nullable,
        primary_key=primary_key,
        valid_values=_string_list(payload.get("valid_values"), f"Field '{where}' valid_values"),
        marketing_meaning=_optional_str(
            payload.get("marketing_meaning"), f"Field '{where}' marketing_meaning"
        ),
        ai_instructions=_optional_str(
            payload.get("ai_instructions"), f"Field '{where}' ai_instructions"
        ),
        creative_potential=_optional_str(
            payload.get("creative_potential"), f"Field '{where}' creative_potential"
        ),
    )


def _parse_rules(payload: object, where: str) -> UseCaseRules | None:
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise SchemaLoadError(f"'{where}' must be an object.")
    return UseCaseRules(
        required_filters=_string_list(
            payload.get("required_filters"), f"'{where}.required_filters'"
        ),
        required_fields=_string_list(
            payload.get("required_fields"), f"'{where}.required_fields'"
        ),
    )


def parse_schema_document(schema_id: str, payload: Any) -> SchemaDefinition:
    """Validate a persisted schema document and build its definition."""
    if not isinstance(payload, dict):
        raise SchemaLoadError(f"Schema '{schema_id}' root must be a JSON object.")

    tables_payload = payload.get("tables")
    if not isinstance(tables_payload, dict):
        raise SchemaLoadError(f"Schema '{schema_id}' is missing a valid 'tables' object.")

    tables: dict[str, TableDefinition] = {}
    for table_name, table_value in tables_payload.items():
        if not isinstance(table_value, dict):
            raise SchemaLoadError(f"Table '{table_name}' is invalid.")
        fields_payload = table_value.get("fields", {})
        if not isinstance(fields_payload, dict):
            raise SchemaLoadError(f"Table '{table_name}' has invalid 'fields'.")

        fields = {
            field_name: _parse_field(field_name, field_value, f"{table_name}.{field_name}")
            for field_name, field_value in fields_payload.items()
        }
        tables[table_name] = TableDefinition(
            name=table_name,
            description=_optional_str(
                table_value.get("description"), f"Table '{table_name}' description"
            ),
            fields=fields,
        )

    version = payload.get("version", "1.0.0")
    return SchemaDefinition(
        id=schema_id,
        version=str(version),
        tables=tables,
        name=_optional_str(payload.get("name"), f"Schema '{schema_id}' name"),
        description=_optional_str(
            payload.get("description"), f"Schema '{schema_id}' description"
        ),
        business_context=payload.get("business_context"),
        query_guidelines=payload.get("query_guidelines"),
        email_campaign_rules=_parse_rules(
            payload.get("email_campaign_rules"), "email_campaign_rules"
        ),
        direct_mail_rules=_parse_rules(payload.get("direct_mail_rules"), "direct_mail_rules"),
    )


def load_schema_file(schema_id: str, path: Path) -> SchemaDefinition:
    """Read and parse one schema JSON document."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SchemaLoadError(f"Schema file is not valid JSON: {path}: {exc}") from exc
    except OSError as exc:
        raise SchemaLoadError(f"Failed to read schema file {path}: {exc}") from exc
    return parse_schema_document(schema_id, payload)


class SchemaRegistry:
    """Resolves schema ids to definitions, loading each document at most once."""

    def __init__(self, schemas_dir: Path) -> None:
        self.schemas_dir = schemas_dir
        self._cache: dict[str, SchemaDefinition] = {}
        self._lock = threading.Lock()

    def _path_for(self, schema_id: str) -> Path:
        if not _SCHEMA_ID.fullmatch(schema_id or ""):
            raise SchemaNotFoundError(f"Schema not found: {schema_id}")
        return self.schemas_dir / f"{schema_id}.json"

    def get(self, schema_id: str) -> SchemaDefinition:
        cached = self._cache.get(schema_id)
        if cached is not None:
            return cached

        path = self._path_for(schema_id)
        with self._lock:
            cached = self._cache.get(schema_id)
            if cached is not None:
                return cached
            if not path.is_file():
                raise SchemaNotFoundError(f"Schema not found: {schema_id}")
            schema = load_schema_file(schema_id, path)
            self._cache[schema_id] = schema
            logger.info(
                "Loaded schema %s (version %s, %d tables)",
                schema_id,
                schema.version,
                len(schema.tables),
            )
            return schema

    def schema_ids(self) -> list[str]:
        if not self.schemas_dir.is_dir():
            return []
        return sorted(
            path.stem
            for path in self.schemas_dir.glob("*.json")
            if path.name != METADATA_FILE
        )

    def list_schemas(self) -> list[SchemaSummary]:
        """Summarise every readable schema; unreadable documents are skipped."""
        summaries: list[SchemaSummary] = []
        for schema_id in self.schema_ids():
            path = self.schemas_dir / f"{schema_id}.json"
            try:
                if not path.read_text(encoding="utf-8").strip():
                    continue
                schema = self.get(schema_id)
            except (OSError, SchemaLoadError, SchemaNotFoundError) as exc:
                logger.warning("Skipping invalid schema file %s: %s", path.name, exc)
                continue
            summaries.append(
                SchemaSummary(
                    id=schema_id,
                    name=schema.name or schema_id,
                    version=schema.version,
                    description=schema.description or "Identity graph schema",
                    table_count=len(schema.tables),
                )
            )
        return summaries
