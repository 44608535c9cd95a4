"""Result generation: list, summary and answer modes, plus chunked streaming.

With a completion provider the summary and answer come from prompts in
nlweb/prompts/. Without one, or when a provider call fails, deterministic
templates are used, so generation never fails the request.
"""

import asyncio
import logging
import re
from collections.abc import AsyncIterator
from contextlib import aclosing
from pathlib import Path

from nlweb.contracts.nlweb_v1 import NLWebResult, QueryMode
from nlweb.core.config import NLWebSettings
from nlweb.core.prompts import render_prompt
from nlweb.llm.provider import CompletionProvider
from nlweb.orchestrators.search.constants import (
    STREAM_FALLBACK_WORDS,
    STREAM_TARGET_CHUNKS,
    SUMMARY_CONTEXT_RESULTS,
    TEMPLATE_ANSWER_RESULTS,
    TEMPLATE_SUMMARY_NAMES,
    Messages,
)
from nlweb.orchestrators.search.interface import SearchService

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\S+\s*")


def split_words(text: str, words_per_chunk: int) -> list[str]:
    """Group words into chunks, keeping the original whitespace.

    "".join(split_words(text, n)) == text for any n >= 1.
    """
    tokens = _TOKEN_RE.findall(text)
    if not tokens:
        return [text] if text else []
    leading = text[: len(text) - len(text.lstrip())]
    tokens[0] = leading + tokens[0]
    size = max(1, words_per_chunk)
    return ["".join(tokens[i : i + size]) for i in range(0, len(tokens), size)]


def template_summary(query: str, results: list[NLWebResult]) -> str:
    names = ", ".join(r.name for r in results[:TEMPLATE_SUMMARY_NAMES])
    return f"Found {len(results)} results for '{query}'. Top results include: {names}."


def template_answer(query: str, results: list[NLWebResult]) -> str:
    parts = [f"Based on the search results for '{query}', here's what I found:\n\n"]
    for r in results[:TEMPLATE_ANSWER_RESULTS]:
        parts.append(f"• **{r.name}**: {r.description}\n  Source: {r.url}\n\n")
    remaining = len(results) - TEMPLATE_ANSWER_RESULTS
    if remaining > 0:
        parts.append(f"... and {remaining} more results.")
    return "".join(parts).rstrip()


def list_message(results: list[NLWebResult]) -> str:
    return f"Found {len(results)} results for your query."


class ResultGenerator:
    def __init__(
        self,
        search: SearchService,
        settings: NLWebSettings,
        provider: CompletionProvider | None = None,
        prompts_dir: Path | None = None,
    ):
        self._search = search
        self._settings = settings
        self._provider = provider
        self._prompts_dir = prompts_dir

    @property
    def has_provider(self) -> bool:
        return self._provider is not None

    async def generate_list(
        self, query: str, site: str | None = None, max_results: int | None = None
    ) -> list[NLWebResult]:
        cap = self._settings.max_results_per_query
        limit = min(max_results, cap) if max_results else cap
        return await self._search.search(query, site, limit)

    async def _complete(self, prompt_name: str, query: str, results: list[NLWebResult]) -> str | None:
        """Provider text, or None when there is no provider or the call failed."""
        if self._provider is None:
            return None
        try:
            prompt = render_prompt(
                prompt_name, query, results, SUMMARY_CONTEXT_RESULTS, self._prompts_dir
            )
            text = await self._provider.complete(prompt)
        except Exception as e:
            logger.warning("Provider %s failed, using template: %s", prompt_name, e)
            return None
        text = (text or "").strip()
        if not text:
            logger.warning("Provider returned empty %s, using template", prompt_name)
            return None
        return text

    async def generate_summary(
        self, query: str, results: list[NLWebResult]
    ) -> tuple[str, list[NLWebResult]]:
        if not results:
            return Messages.NO_RESULTS_SUMMARY, results
        text = await self._complete("summary", query, results)
        return text or template_summary(query, results), results

    async def generate_response(
        self, query: str, results: list[NLWebResult]
    ) -> tuple[str, list[NLWebResult]]:
        if not results:
            return Messages.NO_RESULTS_ANSWER, results
        text = await self._complete("answer", query, results)
        return text or template_answer(query, results), results

    async def complete_text(
        self, query: str, results: list[NLWebResult], mode: QueryMode
    ) -> str:
        if mode == QueryMode.GENERATE:
            text, _ = await self.generate_response(query, results)
        elif mode == QueryMode.SUMMARIZE:
            text, _ = await self.generate_summary(query, results)
        else:
            text = list_message(results)
        return text

    async def stream_response(
        self, query: str, results: list[NLWebResult], mode: QueryMode
    ) -> AsyncIterator[str]:
        """Yield text fragments; joined, they form the complete response text."""
        if mode == QueryMode.GENERATE and self.has_provider and results:
            emitted = False
            try:
                prompt = render_prompt(
                    "answer", query, results, SUMMARY_CONTEXT_RESULTS, self._prompts_dir
                )
                async with aclosing(self._provider.stream_complete(prompt)) as fragments:
                    async for fragment in fragments:
                        if fragment:
                            emitted = True
                            yield fragment
            except Exception as e:
                if emitted:
                    logger.error("Provider stream failed mid-answer, ending stream: %s", e)
                    return
                logger.warning("Provider stream failed, re-chunking full answer: %s", e)
            else:
                if emitted:
                    return
                logger.warning("Provider stream was empty, re-chunking full answer")
            text, _ = await self.generate_response(query, results)
            async for chunk in self._emit(
                split_words(text, STREAM_FALLBACK_WORDS),
                self._settings.stream_fallback_delay_seconds,
            ):
                yield chunk
            return

        text = await self.complete_text(query, results, mode)
        words = len(text.split())
        async for chunk in self._emit(
            split_words(text, max(1, words // STREAM_TARGET_CHUNKS)),
            self._settings.stream_chunk_delay_seconds,
        ):
            yield chunk

    async def _emit(self, chunks: list[str], delay: float) -> AsyncIterator[str]:
        for i, chunk in enumerate(chunks):
            if i and delay:
                await asyncio.sleep(delay)
            yield chunk
