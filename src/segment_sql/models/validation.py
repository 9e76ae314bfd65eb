"""Validation verdicts and query-plan analysis results."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Complexity = Literal["low", "medium", "high"]


class ValidationVerdict(BaseModel):
    """Errors and warnings reported by one or more validators."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_findings(
        cls, errors: list[str], warnings: list[str] | None = None
    ) -> ValidationVerdict:
        return cls(is_valid=not errors, errors=list(errors), warnings=list(warnings or []))

    @classmethod
    def failure(cls, message: str) -> ValidationVerdict:
        return cls(is_valid=False, errors=[message], warnings=[])

    @classmethod
    def merge(cls, *verdicts: ValidationVerdict) -> ValidationVerdict:
        """Concatenate findings in argument order; valid only if every input is."""
        errors: list[str] = []
        warnings: list[str] = []
        for verdict in verdicts:
            errors.extend(verdict.errors)
            warnings.extend(verdict.warnings)
        return cls(
            is_valid=all(verdict.is_valid for verdict in verdicts),
            errors=errors,
            warnings=warnings,
        )


class ExplainAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    estimated_rows: int = 0
    summary: str
    operations: list[str] = Field(default_factory=list)
    complexity: Complexity = "medium"


class ValidationReport(ValidationVerdict):
    """Verdict enriched with query-engine estimates when the engine was consulted."""

    estimated_row_count: int | None = None
    execution_plan: str | None = None
    complexity: Complexity | None = None

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True)
