import json

import psycopg
import pytest

from segment_sql.errors import QueryEngineError, RequestValidationError, UpstreamParseError
from segment_sql.models import (
    GenerationRequest,
    PreviewRequest,
    ValidationRequest,
    parse_request,
)
from segment_sql.pipeline import generate_segment, preview, validate_query

AFFLUENT_SQL = (
    "SELECT DISTINCT d.HOUSEHOLD_ID FROM DATA d "
    "WHERE d.INCOME_HH IN ('K. $100,000-$149,999')"
)


def candidate_text(sql: str) -> str:
    payload = {
        "sqlQuery": sql,
        "segmentName": "Affluent Families",
        "description": "High income households with children",
        "reasoning": "Income bracket K and above",
        "confidence": 0.9,
        "estimatedSize": 120000,
    }
    return "Here you go:\n```json\n" + json.dumps(payload) + "\n```"


def affluent_request() -> GenerationRequest:
    return parse_request(
        GenerationRequest, {"prompt": "affluent families with children", "schema": "sig-v2"}
    )


def test_generated_segment_is_validated_and_described(registry, settings, fake_llm_factory) -> None:
    llm = fake_llm_factory(candidate_text(AFFLUENT_SQL))

    result = generate_segment(affluent_request(), registry=registry, llm=llm, settings=settings)
    payload = result.to_dict()

    assert payload["validation"]["isValid"] is True
    assert payload["validation"]["errors"] == []
    assert payload["metadata"]["schema"] == "sig-v2"
    assert payload["metadata"]["useCase"] == "general"
    assert payload["metadata"]["model"] == "fake-model"
    assert payload["metadata"]["tokensUsed"] == 42
    assert payload["sqlQuery"] == AFFLUENT_SQL
    assert payload["segmentName"] == "Affluent Families"
    assert payload["estimatedSize"] == 120000
    assert llm.prompts[0].endswith("USER REQUEST:\naffluent families with children")


def test_generated_mutation_is_flagged(registry, settings, fake_llm_factory) -> None:
    llm = fake_llm_factory(candidate_text("DROP TABLE DATA"))

    result = generate_segment(affluent_request(), registry=registry, llm=llm, settings=settings)

    assert not result.validation.is_valid
    assert any("DROP" in error for error in result.validation.errors)
    assert "No valid tables found in query" in result.validation.errors


def test_unparseable_generation_is_an_upstream_error(registry, settings, fake_llm_factory) -> None:
    llm = fake_llm_factory("Sorry, I cannot help with that.")

    with pytest.raises(UpstreamParseError):
        generate_segment(affluent_request(), registry=registry, llm=llm, settings=settings)


def test_blank_prompt_is_rejected_before_generation() -> None:
    with pytest.raises(RequestValidationError, match="prompt"):
        parse_request(GenerationRequest, {"prompt": "   "})


def test_static_validation_without_engine(registry, settings, fake_engine) -> None:
    report = validate_query(
        ValidationRequest(sql="SELECT HOUSEHOLD_ID FROM DATA"),
        registry=registry,
        settings=settings,
    )

    assert report.to_dict() == {
        "isValid": True,
        "errors": [],
        "warnings": ["Consider using DISTINCT to avoid duplicate records"],
    }
    assert fake_engine.connections == []


def test_engine_findings_are_merged_last(registry, settings, fake_engine) -> None:
    def handler(sql):
        if sql.startswith("PREPARE"):
            return psycopg.errors.UndefinedColumn('column "shoe_size" does not exist')
        return [], []

    fake_engine.handler = handler

    report = validate_query(
        ValidationRequest(sql="SELECT DISTINCT DATA.SHOE_SIZE FROM DATA"),
        registry=registry,
        settings=settings,
        with_engine=True,
    )

    assert not report.is_valid
    assert report.warnings == ["Field SHOE_SIZE may not exist in table DATA"]
    assert report.errors == ['column "shoe_size" does not exist']


def test_engine_reports_estimates(registry, settings, fake_engine) -> None:
    fake_engine.handler = lambda sql: (
        ([("QUERY PLAN", 25)], [{"QUERY PLAN": "Seq Scan on data  (rows=500 width=8)"}])
        if sql.startswith("EXPLAIN")
        else ([], [])
    )

    report = validate_query(
        ValidationRequest(sql="SELECT DISTINCT HOUSEHOLD_ID FROM DATA"),
        registry=registry,
        settings=settings,
        with_engine=True,
    )

    payload = report.to_dict()
    assert payload["isValid"] is True
    assert payload["estimatedRowCount"] == 500
    assert payload["complexity"] == "low"


def test_engine_is_skipped_when_syntax_fails(registry, settings, fake_engine) -> None:
    report = validate_query(
        ValidationRequest(sql="DELETE FROM DATA"),
        registry=registry,
        settings=settings,
        with_engine=True,
    )

    assert not report.is_valid
    assert fake_engine.connections == []
    assert report.estimated_row_count is None


def test_engine_outage_propagates(registry, settings, fake_engine) -> None:
    fake_engine.connect_error = psycopg.OperationalError("connection refused")

    with pytest.raises(QueryEngineError):
        validate_query(
            ValidationRequest(sql="SELECT DISTINCT HOUSEHOLD_ID FROM DATA"),
            registry=registry,
            settings=settings,
            with_engine=True,
        )


def test_preview_uses_configured_bounds(settings, fake_engine) -> None:
    fake_engine.handler = lambda sql: (
        ([("total_count", 20)], [{"total_count": 7}])
        if sql.startswith("WITH")
        else ([("household_id", 25)], [{"household_id": "h1"}])
    )

    result = preview(
        parse_request(PreviewRequest, {"sql": "SELECT DISTINCT HOUSEHOLD_ID FROM DATA", "maxRows": 99999}),
        settings=settings,
    )

    assert fake_engine.executed[0].endswith("LIMIT 1000")
    assert result.total_estimate == 7


def test_preview_refuses_mutations(settings, fake_engine) -> None:
    with pytest.raises(RequestValidationError, match="Dangerous keyword detected: UPDATE"):
        preview(PreviewRequest(sql="UPDATE DATA SET AGE = 1"), settings=settings)
    assert fake_engine.connections == []
