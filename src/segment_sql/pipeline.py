"""End-to-end operations: generate a segment, validate SQL, preview results."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from segment_sql.config import Settings
from segment_sql.engine.executor import preview_query, validate_with_engine
from segment_sql.errors import RequestValidationError
from segment_sql.llm.base import LLMGenerator
from segment_sql.llm.parsing import parse_candidate
from segment_sql.models.execution import PreviewResult
from segment_sql.models.generation import (
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
    PreviewRequest,
    ValidationRequest,
)
from segment_sql.models.validation import ValidationReport, ValidationVerdict
from segment_sql.prompts.segment_generation import compile_prompt
from segment_sql.schema.registry import SchemaRegistry
from segment_sql.validation import run_static_validators, validate_against_schema, validate_syntax

logger = logging.getLogger(__name__)

DEFAULT_USE_CASE = "general"


def generate_segment(
    request: GenerationRequest,
    *,
    registry: SchemaRegistry,
    llm: LLMGenerator,
    settings: Settings,
) -> GenerationResult:
    """Compile a prompt, call the generation service and validate its candidate."""
    bundle = compile_prompt(request, registry, default_schema=settings.default_schema)
    logger.info(
        "Generating segment for schema %s (use case: %s)",
        bundle.schema_id,
        request.use_case or DEFAULT_USE_CASE,
    )

    response = llm.complete(bundle.prompt)
    candidate = parse_candidate(response.text)
    verdict = run_static_validators(
        candidate.sql_query,
        bundle.schema_id,
        registry,
        strategy=settings.reference_strategy,
        dialect=settings.sql_dialect,
    )
    logger.info(
        "Candidate validation: valid=%s errors=%d warnings=%d",
        verdict.is_valid,
        len(verdict.errors),
        len(verdict.warnings),
    )

    return GenerationResult(
        **candidate.model_dump(),
        validation=verdict,
        metadata=GenerationMetadata(
            schema_id=bundle.schema_id,
            use_case=request.use_case or DEFAULT_USE_CASE,
            model=response.model or settings.llm_model,
            tokens_used=response.tokens_used,
            timestamp=datetime.now(tz=timezone.utc).isoformat(),
        ),
    )


def validate_query(
    request: ValidationRequest,
    *,
    registry: SchemaRegistry,
    settings: Settings,
    with_engine: bool = False,
) -> ValidationReport:
    """Run the static validators and, when asked, the query engine plan check.

    The engine is only consulted when the syntax validator passed, so denied
    statements never reach it. Findings are merged in execution order.
    """
    schema_id = request.schema_id or settings.default_schema
    syntax = validate_syntax(request.sql)
    conformance = validate_against_schema(
        request.sql,
        schema_id,
        registry,
        strategy=settings.reference_strategy,
        dialect=settings.sql_dialect,
    )
    verdicts = [syntax, conformance]

    engine_report = None
    if with_engine and syntax.is_valid:
        settings.validate_engine_requirements()
        engine_report = validate_with_engine(
            request.sql,
            dsn=settings.query_engine_dsn,
            timeout_seconds=settings.query_engine_timeout_seconds,
        )
        verdicts.append(engine_report)

    merged = ValidationVerdict.merge(*verdicts)
    logger.info(
        "Validation against %s: valid=%s errors=%d warnings=%d engine=%s",
        schema_id,
        merged.is_valid,
        len(merged.errors),
        len(merged.warnings),
        engine_report is not None,
    )
    return ValidationReport(
        is_valid=merged.is_valid,
        errors=merged.errors,
        warnings=merged.warnings,
        estimated_row_count=engine_report.estimated_row_count if engine_report else None,
        execution_plan=engine_report.execution_plan if engine_report else None,
        complexity=engine_report.complexity if engine_report else None,
    )


def preview(request: PreviewRequest, *, settings: Settings) -> PreviewResult:
    """Execute a row-limited preview of a read-only statement."""
    syntax = validate_syntax(request.sql)
    if not syntax.is_valid:
        raise RequestValidationError(
            "Refusing to preview SQL that fails validation:\n"
            + "\n".join(f"- {error}" for error in syntax.errors)
        )

    settings.validate_engine_requirements()
    max_rows = request.max_rows if request.max_rows is not None else settings.preview_default_rows
    result = preview_query(
        request.sql,
        max_rows,
        dsn=settings.query_engine_dsn,
        timeout_seconds=settings.query_engine_timeout_seconds,
        max_rows_limit=settings.preview_max_rows,
        dialect=settings.sql_dialect,
    )
    logger.info(
        "Preview %s returned %d of ~%d rows",
        result.query_id,
        result.row_count,
        result.total_estimate,
    )
    return result
