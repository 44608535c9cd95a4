"""vLLM provider: OpenAI-compatible completions for local inference."""

import json
import logging
from collections.abc import AsyncIterator

import httpx

from nlweb.llm.provider import CompletionProvider
from nlweb.observability import trace
from nlweb.orchestrators.search.errors import GenerationError

logger = logging.getLogger(__name__)


def _error_body(response: httpx.Response) -> str:
    try:
        return response.text[:500]
    except httpx.ResponseNotRead:
        return ""


class VLLMProvider(CompletionProvider):
    def __init__(
        self,
        base_url: str,
        model: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 120.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._model = model
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def model(self) -> str:
        return self._model

    def _payload(
        self, prompt: str, max_tokens: int, temperature: float, stream: bool
    ) -> dict:
        return {
            "model": self._model,
            "prompt": prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stream": stream,
        }

    async def complete(
        self, prompt: str, max_tokens: int = 512, temperature: float = 0.3
    ) -> str:
        async with trace(
            "vllm_complete",
            "llm",
            inputs={
                "model": self._model,
                "prompt_preview": prompt[-500:] if len(prompt) > 500 else prompt,
            },
            metadata={"provider": "vllm"},
        ) as run:
            try:
                response = await self.client.post(
                    f"{self.base_url}/v1/completions",
                    json=self._payload(prompt, max_tokens, temperature, False),
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                data = response.json()
                text = data["choices"][0]["text"].strip()
            except httpx.HTTPStatusError as e:
                logger.error(
                    "vLLM request failed %s: %s",
                    e.response.status_code,
                    _error_body(e.response),
                )
                raise GenerationError(
                    f"vLLM returned {e.response.status_code}"
                ) from e
            except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
                logger.error("vLLM request failed: %s", e)
                raise GenerationError(f"vLLM request failed: {e}") from e
            run.end(outputs={"text_preview": text[:500]})
            return text

    async def stream_complete(
        self, prompt: str, max_tokens: int = 1024, temperature: float = 0.3
    ) -> AsyncIterator[str]:
        try:
            async with self.client.stream(
                "POST",
                f"{self.base_url}/v1/completions",
                json=self._payload(prompt, max_tokens, temperature, True),
                headers={"Content-Type": "application/json"},
            ) as response:
                if response.status_code >= 400:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    logger.error(
                        "vLLM server error %s: %s", response.status_code, body[:500]
                    )
                    raise GenerationError(f"vLLM returned {response.status_code}")
                async for line in response.aiter_lines():
                    if not line or not line.startswith("data: "):
                        continue
                    data_str = line[6:].strip()
                    if data_str == "[DONE]":
                        break
                    try:
                        chunk = json.loads(data_str)
                        text = chunk["choices"][0]["text"]
                    except (ValueError, KeyError, IndexError):
                        continue
                    if text:
                        yield text
        except httpx.HTTPError as e:
            logger.error("vLLM streaming connection lost: %s", e)
            raise GenerationError(f"vLLM stream failed: {e}") from e

    async def close(self) -> None:
        await self.client.aclose()
