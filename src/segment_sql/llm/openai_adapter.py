"""OpenAI implementation of the generation service interface."""

from __future__ import annotations

from dataclasses import dataclass

from segment_sql.errors import UpstreamServiceError
from segment_sql.llm.base import LLMGenerator, LLMResponse
from segment_sql.llm.transport import post_json


@dataclass(frozen=True)
class OpenAIAdapter(LLMGenerator):
    """Generate segment payloads using the OpenAI Chat Completions API."""

    api_key: str
    model: str
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: int = 30

    def complete(self, prompt: str) -> LLMResponse:
        body = {
            "model": self.model,
            "temperature": 1,
            "response_format": {"type": "json_object"},
            "messages": [{"role": "user", "content": prompt}],
        }
        payload = post_json(
            self.base_url.rstrip("/") + "/chat/completions",
            body,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout_seconds=self.timeout_seconds,
            service="OpenAI",
        )

        usage = payload.get("usage")
        tokens_used = usage.get("total_tokens") if isinstance(usage, dict) else None
        return LLMResponse(
            text=self._extract_message_content(payload),
            model=str(payload.get("model") or self.model),
            tokens_used=tokens_used if isinstance(tokens_used, int) else None,
        )

    @staticmethod
    def _extract_message_content(payload: dict[str, object]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise UpstreamServiceError("OpenAI response is missing choices.")

        first = choices[0]
        if not isinstance(first, dict):
            raise UpstreamServiceError("OpenAI response has invalid choice format.")

        message = first.get("message")
        if not isinstance(message, dict):
            raise UpstreamServiceError("OpenAI response is missing message content.")

        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise UpstreamServiceError("OpenAI message content is empty.")
        return content
