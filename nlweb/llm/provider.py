"""Completion provider interface used by the result generator.

A provider is optional: the generator falls back to deterministic templates when
none is configured or when a call fails.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


class CompletionProvider(ABC):
    @property
    @abstractmethod
    def model(self) -> str:
        pass

    @abstractmethod
    async def complete(
        self, prompt: str, max_tokens: int = 512, temperature: float = 0.3
    ) -> str:
        """Full completion text. Raises GenerationError on failure."""

    @abstractmethod
    def stream_complete(
        self, prompt: str, max_tokens: int = 1024, temperature: float = 0.3
    ) -> AsyncIterator[str]:
        """Async iterator of text fragments as the model produces them."""

    async def close(self) -> None:
        pass
