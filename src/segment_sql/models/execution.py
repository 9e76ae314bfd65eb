"""Query-engine execution results."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_CAMEL = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ColumnMeta(BaseModel):
    model_config = _CAMEL

    name: str
    type: str


class QueryResult(BaseModel):
    model_config = _CAMEL

    rows: list[dict[str, Any]] = Field(default_factory=list)
    columns: list[ColumnMeta] = Field(default_factory=list)
    row_count: int = 0
    execution_time: float = Field(description="Milliseconds spent executing the query.")
    query_id: str


class CountResult(BaseModel):
    model_config = _CAMEL

    count: int
    execution_time: float
    query_id: str


class PreviewResult(BaseModel):
    """Row-limited sample of a query plus the full result cardinality."""

    model_config = _CAMEL

    rows: list[dict[str, Any]] = Field(default_factory=list)
    columns: list[ColumnMeta] = Field(default_factory=list)
    row_count: int = 0
    total_estimate: int = 0
    execution_time: float
    query_id: str
    limit_applied: bool = False

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
