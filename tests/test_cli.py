import json

import psycopg
import pytest

from segment_sql import cli
from segment_sql.llm.base import LLMResponse


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["QUERY_ENGINE_DSN", "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "LLM_PROVIDER", "SCHEMAS_DIR", "API_KEYS"]:
        monkeypatch.delenv(name, raising=False)


def test_no_command_prints_help(capsys) -> None:
    assert cli.main([]) == 0
    assert "segment-sql" in capsys.readouterr().out


def test_config_check_redacts_secrets(monkeypatch, capsys) -> None:
    monkeypatch.setenv("QUERY_ENGINE_DSN", "postgresql://user:hunter2@db:5432/graph")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-secret")

    assert cli.main(["config-check"]) == 0

    out = capsys.readouterr().out
    assert "postgresql://***@db:5432/graph" in out
    assert "hunter2" not in out
    assert "sk-ant-secret" not in out


def test_invalid_configuration_exits_with_2(monkeypatch, capsys) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "cohere")

    assert cli.main(["list-schemas"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_list_and_show_schemas(capsys) -> None:
    assert cli.main(["list-schemas"]) == 0
    summaries = json.loads(capsys.readouterr().out)
    assert summaries[0]["id"] == "sig-v2"
    assert summaries[0]["tableCount"] == 4

    assert cli.main(["show-schema", "sig-v2"]) == 0
    assert "INCOME_HH" in json.loads(capsys.readouterr().out)["tables"]["DATA"]["fields"]


def test_unknown_schema_prints_structured_error(capsys) -> None:
    assert cli.main(["show-schema", "nope"]) == 1

    assert json.loads(capsys.readouterr().err) == {
        "error": "schema_not_found",
        "message": "Schema not found: nope",
    }


def test_build_prompt_includes_constraints(capsys) -> None:
    code = cli.main(
        ["build-prompt", "young renters", "--use-case", "direct-mail", "--min-size", "5000"]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "DIRECT MAIL REQUIREMENTS:" in out
    assert "- Minimum audience size: 5,000 households" in out


def test_generate_requires_llm_key(capsys) -> None:
    assert cli.main(["generate", "young renters"]) == 2
    assert "ANTHROPIC_API_KEY" in capsys.readouterr().err


def test_generate_prints_result(monkeypatch, capsys) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")

    def fake_complete(self, prompt):
        return LLMResponse(
            text='{"sqlQuery": "SELECT DISTINCT HOUSEHOLD_ID FROM DATA", "segmentName": "All"}',
            model="claude-test",
            tokens_used=10,
        )

    monkeypatch.setattr("segment_sql.llm.AnthropicAdapter.complete", fake_complete)

    assert cli.main(["generate", "everyone", "--use-case", "lookalike"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["validation"]["isValid"] is True
    assert payload["metadata"]["useCase"] == "lookalike"
    assert payload["metadata"]["model"] == "claude-test"


def test_validate_sql_exit_code_follows_verdict(capsys) -> None:
    assert cli.main(["validate-sql", "SELECT DISTINCT HOUSEHOLD_ID FROM DATA"]) == 0
    assert json.loads(capsys.readouterr().out)["isValid"] is True

    assert cli.main(["validate-sql", "SELECT DISTINCT x FROM CUSTOMERS", "--parser"]) == 1
    report = json.loads(capsys.readouterr().out)
    assert report["errors"] == ["Invalid table: CUSTOMERS. Valid tables: DATA, PII, EMAIL, PHONE"]


def test_validate_sql_with_engine_needs_dsn(capsys) -> None:
    assert cli.main(["validate-sql", "SELECT DISTINCT HOUSEHOLD_ID FROM DATA", "--engine"]) == 2
    assert "QUERY_ENGINE_DSN" in capsys.readouterr().err


def test_preview_engine_failure_exits_with_1(monkeypatch, fake_engine, capsys) -> None:
    monkeypatch.setenv("QUERY_ENGINE_DSN", "postgresql://u:p@db:5432/graph")
    fake_engine.connect_error = psycopg.OperationalError("connection refused")

    assert cli.main(["preview-sql", "SELECT DISTINCT HOUSEHOLD_ID FROM DATA"]) == 1
    assert json.loads(capsys.readouterr().err)["error"] == "query_engine"


def test_check_key_accepts_configured_key(monkeypatch, capsys) -> None:
    monkeypatch.setenv("API_KEYS", "alpha-key-0001,beta-key-0002")

    assert cli.main(["check-key", "Bearer beta-key-0002"]) == 0
    assert "API key accepted: key-...0002" in capsys.readouterr().out


def test_check_key_rejects_unknown_key(monkeypatch, capsys) -> None:
    monkeypatch.setenv("API_KEYS", "alpha-key-0001")

    assert cli.main(["check-key", "Bearer wrong-key"]) == 1
    err = capsys.readouterr().err
    assert '"error": "authentication"' in err
    assert '"message": "Invalid API key."' in err
