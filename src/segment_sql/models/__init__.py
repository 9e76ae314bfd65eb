"""Request, result and verdict models."""

from segment_sql.models.execution import (
    ColumnMeta,
    CountResult,
    PreviewResult,
    QueryResult,
)
from segment_sql.models.generation import (
    CandidateSegment,
    GenerationConstraints,
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
    PreviewRequest,
    ValidationRequest,
    parse_request,
)
from segment_sql.models.validation import (
    Complexity,
    ExplainAnalysis,
    ValidationReport,
    ValidationVerdict,
)

__all__ = [
    "ColumnMeta",
    "CountResult",
    "PreviewResult",
    "QueryResult",
    "CandidateSegment",
    "GenerationConstraints",
    "GenerationMetadata",
    "GenerationRequest",
    "GenerationResult",
    "PreviewRequest",
    "ValidationRequest",
    "parse_request",
    "Complexity",
    "ExplainAnalysis",
    "ValidationReport",
    "ValidationVerdict",
]
