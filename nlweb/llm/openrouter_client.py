"""OpenRouter provider: chat completions over a list of model IDs (try in order, fallback on failure)."""

import json
import logging
from collections.abc import AsyncIterator

import httpx

from nlweb.llm.provider import CompletionProvider
from nlweb.observability import trace
from nlweb.orchestrators.search.errors import GenerationError

logger = logging.getLogger(__name__)

OPENROUTER_BASE = "https://openrouter.ai/api/v1"
RETRY_STATUS = (429, 500, 502, 503, 504)


class OpenRouterProvider(CompletionProvider):
    def __init__(
        self,
        api_key: str,
        models: list[str] | None = None,
        client: httpx.AsyncClient | None = None,
        base_url: str = OPENROUTER_BASE,
    ):
        self.models = [m for m in (models or []) if m.strip()] or ["openrouter/free"]
        self.api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=120.0)

    @property
    def model(self) -> str:
        return self.models[0]

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def _should_retry(self, e: Exception) -> bool:
        if isinstance(e, httpx.HTTPStatusError):
            return e.response.status_code in RETRY_STATUS
        return isinstance(e, httpx.TransportError)

    def _payload(
        self, model: str, prompt: str, max_tokens: int, temperature: float, stream: bool
    ) -> dict:
        return {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stream": stream,
        }

    async def complete(
        self, prompt: str, max_tokens: int = 512, temperature: float = 0.3
    ) -> str:
        last_error: Exception | None = None
        async with trace(
            "openrouter_complete",
            "llm",
            inputs={"models": self.models, "prompt_preview": prompt[-500:]},
            metadata={"provider": "openrouter"},
        ) as run:
            for model in self.models:
                try:
                    response = await self.client.post(
                        f"{self.base_url}/chat/completions",
                        json=self._payload(model, prompt, max_tokens, temperature, False),
                        headers=self._headers(),
                    )
                    response.raise_for_status()
                    data = response.json()
                except httpx.HTTPError as e:
                    last_error = e
                    if isinstance(e, httpx.HTTPStatusError):
                        logger.error(
                            "OpenRouter %s %s: %s",
                            model,
                            e.response.status_code,
                            e.response.text[:300],
                        )
                    else:
                        logger.error("OpenRouter %s failed: %s", model, e)
                    if self._should_retry(e):
                        continue
                    raise GenerationError(f"OpenRouter {model} failed: {e}") from e
                served = data.get("model") or model
                choice = (data.get("choices") or [{}])[0]
                text = (choice.get("message") or {}).get("content") or ""
                run.end(outputs={"model": served, "text_preview": text[:500]})
                return text.strip()
        if last_error is not None:
            raise GenerationError(f"All OpenRouter models failed: {last_error}") from last_error
        raise GenerationError("No OpenRouter models configured")

    async def stream_complete(
        self, prompt: str, max_tokens: int = 1024, temperature: float = 0.3
    ) -> AsyncIterator[str]:
        last_error: Exception | None = None
        for model in self.models:
            emitted = False
            try:
                async for chunk in self._stream_one(
                    self._payload(model, prompt, max_tokens, temperature, True), model
                ):
                    emitted = True
                    yield chunk
                return
            except httpx.HTTPError as e:
                last_error = e
                # Once text has gone out, switching models would splice two answers.
                if emitted or not self._should_retry(e):
                    raise GenerationError(f"OpenRouter {model} stream failed: {e}") from e
                logger.debug("OpenRouter %s failed, trying next: %s", model, e)
        if last_error is not None:
            raise GenerationError(f"All OpenRouter models failed: {last_error}") from last_error
        raise GenerationError("No OpenRouter models configured")

    async def _stream_one(self, payload: dict, model: str) -> AsyncIterator[str]:
        async with self.client.stream(
            "POST",
            f"{self.base_url}/chat/completions",
            json=payload,
            headers=self._headers(),
        ) as response:
            served: str | None = None
            if response.status_code >= 400:
                body = (await response.aread()).decode("utf-8", errors="replace")
                logger.error("OpenRouter %s %s: %s", model, response.status_code, body[:300])
                response.raise_for_status()
            async for line in response.aiter_lines():
                if not line or not line.startswith("data: "):
                    continue
                data_str = line[6:].strip()
                if data_str == "[DONE]":
                    break
                try:
                    chunk = json.loads(data_str)
                except ValueError:
                    continue
                if served is None and chunk.get("model"):
                    served = chunk["model"]
                    logger.debug("OpenRouter stream served by %s", served)
                delta = (chunk.get("choices") or [{}])[0].get("delta") or {}
                text = delta.get("content") or ""
                if text:
                    yield text

    async def close(self) -> None:
        await self.client.aclose()
