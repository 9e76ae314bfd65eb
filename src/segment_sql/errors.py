"""Error taxonomy shared across the generation and validation pipeline."""

from __future__ import annotations


class SegmentSQLError(RuntimeError):
    """Base class for structured pipeline failures."""

    kind = "internal"

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind, "message": str(self)}


class RequestValidationError(SegmentSQLError):
    """Raised when a request payload is malformed or missing required input."""

    kind = "request_validation"


class SchemaNotFoundError(SegmentSQLError):
    """Raised when a schema id cannot be resolved."""

    kind = "schema_not_found"


class SchemaLoadError(SegmentSQLError):
    """Raised when a schema document exists but cannot be read or parsed."""

    kind = "schema_load"


class UpstreamParseError(SegmentSQLError):
    """Raised when the generation service response has no usable JSON payload."""

    kind = "upstream_parse"


class UpstreamServiceError(SegmentSQLError):
    """Raised when the generation service cannot be reached or fails."""

    kind = "upstream_service"


class UpstreamTimeoutError(UpstreamServiceError):
    kind = "upstream_timeout"


class QueryEngineError(SegmentSQLError):
    """Raised when the query engine rejects a statement or cannot be reached."""

    kind = "query_engine"


class QueryEngineTimeoutError(QueryEngineError):
    kind = "query_engine_timeout"


class PlanParsingError(SegmentSQLError):
    """Raised inside plan analysis; never escapes it."""

    kind = "plan_parsing"


class AuthenticationError(SegmentSQLError):
    kind = "authentication"
