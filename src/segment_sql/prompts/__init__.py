"""Prompt builders for segment-sql."""

from segment_sql.prompts.segment_generation import (
    USE_CASES,
    PromptBundle,
    build_constraints_block,
    build_schema_context,
    build_segment_prompt,
    compile_prompt,
    format_valid_values,
    use_case_instructions,
)

__all__ = [
    "USE_CASES",
    "PromptBundle",
    "build_constraints_block",
    "build_schema_context",
    "build_segment_prompt",
    "compile_prompt",
    "format_valid_values",
    "use_case_instructions",
]
