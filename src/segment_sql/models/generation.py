"""Typed request and result payloads for the segment pipeline."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from segment_sql.errors import RequestValidationError
from segment_sql.models.validation import ValidationVerdict

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerationConstraints(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", **_CAMEL)

    min_size: int | None = Field(default=None, ge=0)
    max_size: int | None = Field(default=None, ge=0)
    require_email: bool = False
    require_phone: bool = False


class GenerationRequest(BaseModel):
    """Natural-language audience request."""

    model_config = ConfigDict(frozen=True, **_CAMEL)

    prompt: str = Field(min_length=1)
    schema_id: str | None = Field(default=None, alias="schema")
    use_case: str | None = None
    constraints: GenerationConstraints | None = None

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt cannot be blank.")
        return value


class ValidationRequest(BaseModel):
    model_config = ConfigDict(frozen=True, **_CAMEL)

    sql: str = Field(min_length=1)
    schema_id: str | None = Field(default=None, alias="schema")


class PreviewRequest(BaseModel):
    model_config = ConfigDict(frozen=True, **_CAMEL)

    sql: str = Field(min_length=1)
    max_rows: int | None = None


class CandidateSegment(BaseModel):
    """Structured payload the generation service must return."""

    model_config = ConfigDict(frozen=True, extra="ignore", **_CAMEL)

    sql_query: str
    segment_name: str = ""
    description: str = ""
    reasoning: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    estimated_size: int = Field(default=0, ge=0)


class GenerationMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, **_CAMEL)

    schema_id: str = Field(alias="schema")
    use_case: str
    model: str
    tokens_used: int | None = None
    timestamp: str


class GenerationResult(CandidateSegment):
    """Candidate segment with its merged validation verdict and request metadata."""

    validation: ValidationVerdict
    metadata: GenerationMetadata

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


RequestModel = TypeVar("RequestModel", bound=BaseModel)


def parse_request(model: type[RequestModel], payload: Any) -> RequestModel:
    """Validate an inbound payload, raising RequestValidationError on bad input."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        messages = []
        for err in exc.errors():
            field = ".".join(str(item) for item in err["loc"]) or "(root)"
            messages.append(f"- {field}: {err['msg']}")
        raise RequestValidationError(
            f"Invalid {model.__name__} payload:\n" + "\n".join(messages)
        ) from exc
