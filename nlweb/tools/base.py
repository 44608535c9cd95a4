"""Base ToolHandler class and response helpers shared by the specialized handlers."""

import logging
import re
import time
from abc import ABC, abstractmethod

from nlweb.contracts.nlweb_v1 import (
    NLWebRequest,
    NLWebResponse,
    NLWebResult,
    ToolDescriptor,
)
from nlweb.orchestrators.search.constants import ToolType
from nlweb.orchestrators.search.errors import ToolExecutionError
from nlweb.orchestrators.search.interface import SearchService
from nlweb.orchestrators.search.query_processor import QueryProcessor

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 50
_TRAILING_PUNCT = re.compile(r"[\s?.!,;:]+$")


def contains_any(text: str, keywords: tuple[str, ...] | list[str]) -> bool:
    t = text.lower()
    return any(k in t for k in keywords)


def clean_subject(text: str) -> str:
    """Lowercase, trim and drop trailing punctuation from an extracted subject."""
    return _TRAILING_PUNCT.sub("", text.strip().lower()).strip()


def query_terms(text: str, min_length: int = 3) -> list[str]:
    return [t for t in re.findall(r"[a-z0-9][a-z0-9+#.-]*", text.lower()) if len(t) >= min_length]


class ToolHandler(ABC):
    """A specialized query handler.

    Subclasses implement `run`; `execute` wraps it so that any failure comes back
    as an error response with empty results instead of an exception.
    """

    keywords: tuple[str, ...] = ()
    default_priority: int = DEFAULT_PRIORITY

    def __init__(
        self,
        search: SearchService,
        query_processor: QueryProcessor | None = None,
        max_results: int = 50,
    ):
        self._search = search
        self._query_processor = query_processor
        self._max_results = max_results

    @property
    @abstractmethod
    def tool_type(self) -> ToolType:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        pass

    def can_handle(self, request: NLWebRequest) -> bool:
        return bool(request.query and request.query.strip())

    def priority(self, request: NLWebRequest) -> int:
        return self.default_priority

    @abstractmethod
    async def run(self, request: NLWebRequest) -> NLWebResponse:
        pass

    async def execute(self, request: NLWebRequest) -> NLWebResponse:
        start = time.monotonic()
        try:
            response = await self.run(request)
        except ToolExecutionError as e:
            logger.warning("%s: %s (query=%r)", self.name, e, request.query)
            return self.error_response(request, str(e), start)
        except Exception as e:
            logger.exception("%s failed for query %r", self.name, request.query)
            return self.error_response(request, f"{self.name} failed: {e}", start)
        response.processing_time_ms = round((time.monotonic() - start) * 1000, 1)
        return response

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            tool_type=self.tool_type,
            description=self.description,
            keywords=list(self.keywords),
            priority=self.default_priority,
        )

    async def _effective_query(self, request: NLWebRequest) -> str:
        if self._query_processor is None:
            return request.query
        return await self._query_processor.process(request)

    async def _search_for(
        self, query: str, site: str | None = None, max_results: int | None = None
    ) -> list[NLWebResult]:
        return await self._search.search(query, site, max_results or self._max_results)

    def success_response(
        self,
        request: NLWebRequest,
        results: list[NLWebResult],
        summary: str | None = None,
        processed_query: str | None = None,
    ) -> NLWebResponse:
        """Response carrying at most `request.max_results` results, when set."""
        if request.max_results:
            results = results[: request.max_results]
        return NLWebResponse(
            query_id=request.query_id or "",
            query=request.query,
            mode=request.mode,
            results=results,
            summary=summary,
            processed_query=processed_query,
            total_results=len(results),
        )

    def error_response(
        self, request: NLWebRequest, message: str, start: float | None = None
    ) -> NLWebResponse:
        elapsed = (time.monotonic() - start) * 1000 if start is not None else 0.0
        return NLWebResponse(
            query_id=request.query_id or "",
            query=request.query,
            mode=request.mode,
            results=[],
            error=message,
            total_results=0,
            processing_time_ms=round(elapsed, 1),
        )
