"""Prompt builder for deterministic audience segment generation requests."""

from __future__ import annotations

from dataclasses import dataclass

from segment_sql.models.generation import GenerationConstraints, GenerationRequest
from segment_sql.prompts.templates import BASE_RULES, USE_CASE_INSTRUCTIONS
from segment_sql.schema.models import DIRECT_MAIL, EMAIL_MARKETING, SchemaDefinition
from segment_sql.schema.registry import SchemaRegistry

USE_CASES = tuple(USE_CASE_INSTRUCTIONS)

# Enumerations longer than this are previewed rather than listed in full.
MAX_INLINE_VALUES = 5

_RULE_HEADINGS = {
    EMAIL_MARKETING: "SCHEMA-SPECIFIC EMAIL RULES",
    DIRECT_MAIL: "SCHEMA-SPECIFIC DIRECT MAIL RULES",
}


@dataclass(frozen=True)
class PromptBundle:
    """Inspectable prompt bundle used by the generation adapter."""

    schema_id: str
    use_case: str | None
    schema_context: str
    prompt: str


def _quoted(values: tuple[str, ...] | list[str]) -> str:
    return ", ".join(f'"{value}"' for value in values)


def format_valid_values(values: tuple[str, ...] | list[str]) -> str:
    if len(values) <= MAX_INLINE_VALUES:
        return _quoted(values)
    return (
        f"{_quoted(values[:3])} ... ({len(values)} total) ... {_quoted(values[-2:])}"
    )


def build_schema_context(schema: SchemaDefinition) -> str:
    lines = ["DATABASE SCHEMA:", "=" * 50, ""]
    for table_name, table in schema.tables.items():
        lines.append(f"TABLE: {table_name}")
        if table.description:
            lines.append(f"Purpose: {table.description}")
        lines.extend(["", "Fields:"])
        for field_name, field in table.fields.items():
            lines.append(f"  - {field_name} ({field.type})")
            if field.marketing_meaning:
                lines.append(f"    Meaning: {field.marketing_meaning}")
            if field.ai_instructions:
                lines.append(f"    Instructions: {field.ai_instructions}")
            if field.creative_potential:
                lines.append(f"    Creative potential: {field.creative_potential}")
            if field.valid_values:
                lines.append(f"    Valid values: {format_valid_values(field.valid_values)}")
        lines.append("")
    return "\n".join(lines) + "\n"


def use_case_instructions(use_case: str | None) -> str:
    if not use_case:
        return ""
    return USE_CASE_INSTRUCTIONS.get(use_case, "")


def build_schema_rules_block(schema: SchemaDefinition, use_case: str | None) -> str:
    rules = schema.rules_for(use_case)
    heading = _RULE_HEADINGS.get(use_case or "")
    if rules is None or heading is None:
        return ""
    return (
        f"{heading}:\n"
        f"Required filters: {', '.join(rules.required_filters)}\n"
        f"Required fields: {', '.join(rules.required_fields)}\n"
    )


def build_constraints_block(constraints: GenerationConstraints | None) -> str:
    if constraints is None:
        return ""
    lines = []
    if constraints.min_size:
        lines.append(f"- Minimum audience size: {constraints.min_size:,} households")
    if constraints.max_size:
        lines.append(f"- Maximum audience size: {constraints.max_size:,} households")
    if constraints.require_email:
        lines.append("- MUST include email addresses with quality filters")
    if constraints.require_phone:
        lines.append("- MUST include phone numbers with quality filters")
    if not lines:
        return ""
    return "CONSTRAINTS:\n" + "\n".join(lines) + "\n"


def build_segment_prompt(
    request: GenerationRequest,
    schema: SchemaDefinition,
) -> PromptBundle:
    """Assemble the generation prompt in a fixed block order."""
    schema_context = build_schema_context(schema)

    prompt = BASE_RULES
    rules_block = build_schema_rules_block(schema, request.use_case)
    if rules_block:
        prompt += "\n\n" + rules_block
    prompt += "\n\n" + schema_context

    instructions = use_case_instructions(request.use_case)
    if instructions:
        prompt += "\n\nUSE CASE INSTRUCTIONS:\n" + instructions

    constraints_block = build_constraints_block(request.constraints)
    if constraints_block:
        prompt += "\n\n" + constraints_block

    prompt += "\n\nUSER REQUEST:\n" + request.prompt

    return PromptBundle(
        schema_id=schema.id,
        use_case=request.use_case,
        schema_context=schema_context,
        prompt=prompt,
    )


def compile_prompt(
    request: GenerationRequest,
    registry: SchemaRegistry,
    *,
    default_schema: str = "sig-v2",
) -> PromptBundle:
    """Resolve the request's schema and build its prompt."""
    schema = registry.get(request.schema_id or default_schema)
    return build_segment_prompt(request, schema)
