"""Semantic schema definitions with case-insensitive lookups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

EMAIL_MARKETING = "email-marketing"
DIRECT_MAIL = "direct-mail"


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    type: str
    nullable: bool = True
    primary_key: bool = False
    valid_values: tuple[str, ...] = ()
    marketing_meaning: str | None = None
    ai_instructions: str | None = None
    creative_potential: str | None = None

    @property
    def is_enumerated(self) -> bool:
        return bool(self.valid_values)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "type": self.type,
            "nullable": self.nullable,
            "primary_key": self.primary_key,
        }
        if self.valid_values:
            payload["valid_values"] = list(self.valid_values)
        if self.marketing_meaning is not None:
            payload["marketing_meaning"] = self.marketing_meaning
        if self.ai_instructions is not None:
            payload["ai_instructions"] = self.ai_instructions
        if self.creative_potential is not None:
            payload["creative_potential"] = self.creative_potential
        return payload


@dataclass(frozen=True)
class TableDefinition:
    name: str
    description: str | None = None
    fields: dict[str, FieldDefinition] = field(default_factory=dict)

    @property
    def field_names(self) -> list[str]:
        return list(self.fields.keys())

    def get_field(self, name: str) -> FieldDefinition | None:
        wanted = name.upper()
        for field_name, definition in self.fields.items():
            if field_name.upper() == wanted:
                return definition
        return None

    def has_field(self, name: str) -> bool:
        return self.get_field(name) is not None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "fields": {
                field_name: definition.to_dict()
                for field_name, definition in self.fields.items()
            }
        }
        if self.description is not None:
            payload["description"] = self.description
        return payload


@dataclass(frozen=True)
class UseCaseRules:
    """Required filters and fields a schema declares for one use case."""

    required_filters: tuple[str, ...] = ()
    required_fields: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "required_filters": list(self.required_filters),
            "required_fields": list(self.required_fields),
        }


@dataclass(frozen=True)
class SchemaDefinition:
    """A loaded semantic schema. Names compare case-insensitively."""

    id: str
    version: str
    tables: dict[str, TableDefinition] = field(default_factory=dict)
    name: str | None = None
    description: str | None = None
    business_context: Any = None
    query_guidelines: Any = None
    email_campaign_rules: UseCaseRules | None = None
    direct_mail_rules: UseCaseRules | None = None

    @property
    def table_names(self) -> list[str]:
        return list(self.tables.keys())

    def get_table(self, name: str) -> TableDefinition | None:
        wanted = name.upper()
        for table_name, table in self.tables.items():
            if table_name.upper() == wanted:
                return table
        return None

    def has_table(self, name: str) -> bool:
        return self.get_table(name) is not None

    def has_field(self, table_name: str, field_name: str) -> bool:
        table = self.get_table(table_name)
        return table is not None and table.has_field(field_name)

    def rules_for(self, use_case: str | None) -> UseCaseRules | None:
        if use_case == EMAIL_MARKETING:
            return self.email_campaign_rules
        if use_case == DIRECT_MAIL:
            return self.direct_mail_rules
        return None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "version": self.version,
            "tables": {
                table_name: table.to_dict() for table_name, table in self.tables.items()
            },
        }
        optional = {
            "name": self.name,
            "description": self.description,
            "business_context": self.business_context,
            "query_guidelines": self.query_guidelines,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        if self.email_campaign_rules is not None:
            payload["email_campaign_rules"] = self.email_campaign_rules.to_dict()
        if self.direct_mail_rules is not None:
            payload["direct_mail_rules"] = self.direct_mail_rules.to_dict()
        return payload


@dataclass(frozen=True)
class SchemaSummary:
    id: str
    name: str
    version: str
    description: str
    table_count: int

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "tableCount": self.table_count,
        }
