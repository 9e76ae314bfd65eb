"""Generation service adapters and factory helpers."""

from segment_sql.config import Settings
from segment_sql.llm.anthropic_adapter import AnthropicAdapter
from segment_sql.llm.base import LLMGenerator, LLMResponse
from segment_sql.llm.openai_adapter import OpenAIAdapter
from segment_sql.llm.parsing import extract_json_object, parse_candidate


def create_llm_generator(settings: Settings) -> LLMGenerator:
    """Create the generation adapter selected by LLM_PROVIDER."""
    if settings.llm_provider == "openai":
        return OpenAIAdapter(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout_seconds=settings.llm_timeout_seconds,
        )
    return AnthropicAdapter(
        api_key=settings.anthropic_api_key,
        model=settings.anthropic_model,
        max_tokens=settings.llm_max_tokens,
        timeout_seconds=settings.llm_timeout_seconds,
    )


__all__ = [
    "AnthropicAdapter",
    "LLMGenerator",
    "LLMResponse",
    "OpenAIAdapter",
    "create_llm_generator",
    "extract_json_object",
    "parse_candidate",
]
