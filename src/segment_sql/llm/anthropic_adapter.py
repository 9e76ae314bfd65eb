"""Anthropic implementation of the generation service interface."""

from __future__ import annotations

from dataclasses import dataclass

from segment_sql.errors import UpstreamServiceError
from segment_sql.llm.base import LLMGenerator, LLMResponse
from segment_sql.llm.transport import post_json

ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class AnthropicAdapter(LLMGenerator):
    """Generate segment payloads using the Anthropic Messages API."""

    api_key: str
    model: str
    max_tokens: int = 2048
    base_url: str = "https://api.anthropic.com/v1"
    timeout_seconds: int = 30

    def complete(self, prompt: str) -> LLMResponse:
        body = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        payload = post_json(
            self.base_url.rstrip("/") + "/messages",
            body,
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            timeout_seconds=self.timeout_seconds,
            service="Anthropic",
        )

        return LLMResponse(
            text=self._extract_text(payload),
            model=str(payload.get("model") or self.model),
            tokens_used=self._tokens_used(payload),
        )

    @staticmethod
    def _extract_text(payload: dict[str, object]) -> str:
        content = payload.get("content")
        if not isinstance(content, list) or not content:
            raise UpstreamServiceError("Anthropic response is missing content.")

        first = content[0]
        if not isinstance(first, dict) or first.get("type") != "text":
            raise UpstreamServiceError("Anthropic response did not start with a text block.")

        text = first.get("text")
        if not isinstance(text, str) or not text.strip():
            raise UpstreamServiceError("Anthropic message text is empty.")
        return text

    @staticmethod
    def _tokens_used(payload: dict[str, object]) -> int | None:
        usage = payload.get("usage")
        if not isinstance(usage, dict):
            return None
        input_tokens = usage.get("input_tokens")
        output_tokens = usage.get("output_tokens")
        if isinstance(input_tokens, int) and isinstance(output_tokens, int):
            return input_tokens + output_tokens
        return None
