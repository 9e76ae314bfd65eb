from pathlib import Path

import pytest

from segment_sql.config import BUNDLED_SCHEMAS_DIR, ConfigError, Settings, load_settings

ENV_NAMES = [
    "QUERY_ENGINE_DSN",
    "QUERY_ENGINE_TIMEOUT_SECONDS",
    "LLM_PROVIDER",
    "ANTHROPIC_API_KEY",
    "ANTHROPIC_MODEL",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "LLM_TIMEOUT_SECONDS",
    "LLM_MAX_TOKENS",
    "SCHEMAS_DIR",
    "DEFAULT_SCHEMA",
    "SQL_DIALECT",
    "REFERENCE_STRATEGY",
    "PREVIEW_DEFAULT_ROWS",
    "PREVIEW_MAX_ROWS",
    "API_KEYS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment() -> None:
    settings = load_settings()

    assert settings.query_engine_dsn == ""
    assert settings.llm_provider == "anthropic"
    assert settings.schemas_dir == BUNDLED_SCHEMAS_DIR
    assert settings.default_schema == "sig-v2"
    assert settings.reference_strategy == "regex"
    assert (settings.preview_default_rows, settings.preview_max_rows) == (100, 1000)
    assert settings.api_keys == ()


def test_environment_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("QUERY_ENGINE_DSN", " postgresql://u:p@db:5432/graph ")
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("SCHEMAS_DIR", str(tmp_path))
    monkeypatch.setenv("REFERENCE_STRATEGY", "parser")
    monkeypatch.setenv("API_KEYS", "one,two")
    monkeypatch.setenv("QUERY_ENGINE_TIMEOUT_SECONDS", "12")

    settings = load_settings()

    assert settings.query_engine_dsn == "postgresql://u:p@db:5432/graph"
    assert settings.redacted_dsn == "postgresql://***@db:5432/graph"
    assert settings.llm_model == "gpt-5.2-mini"
    assert settings.llm_api_key == "sk-test"
    assert settings.schemas_dir == Path(tmp_path)
    assert settings.reference_strategy == "parser"
    assert settings.api_keys == ("one", "two")
    assert settings.query_engine_timeout_seconds == 12


@pytest.mark.parametrize(
    "name, value, field",
    [
        ("QUERY_ENGINE_DSN", "mysql://db/graph", "query_engine_dsn"),
        ("LLM_PROVIDER", "cohere", "llm_provider"),
        ("REFERENCE_STRATEGY", "vibes", "reference_strategy"),
        ("QUERY_ENGINE_TIMEOUT_SECONDS", "0", "query_engine_timeout_seconds"),
    ],
)
def test_invalid_values_raise_config_error(monkeypatch, name, value, field) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigError, match=f"- {field}:"):
        load_settings()


def test_missing_llm_key_is_reported_per_provider() -> None:
    with pytest.raises(ConfigError, match="ANTHROPIC_API_KEY"):
        Settings().validate_llm_requirements()
    with pytest.raises(ConfigError, match="OPENAI_API_KEY"):
        Settings(llm_provider="openai").validate_llm_requirements()


def test_missing_dsn_is_reported() -> None:
    with pytest.raises(ConfigError, match="QUERY_ENGINE_DSN"):
        Settings().validate_engine_requirements()
    assert Settings().redacted_dsn == "(not set)"
