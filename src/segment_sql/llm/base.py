"""Provider-independent interface to the generation service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class LLMResponse:
    """Free-form text returned by the generation service."""

    text: str
    model: str
    tokens_used: int | None = None


class LLMGenerator(ABC):
    """Abstract generation service adapter."""

    @abstractmethod
    def complete(self, prompt: str) -> LLMResponse:
        """Send a compiled prompt and return the raw response text."""
