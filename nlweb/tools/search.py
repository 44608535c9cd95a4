"""Search tool: keyword search with lead-in stripping and term-match re-ranking."""

import re

from nlweb.contracts.nlweb_v1 import NLWebRequest, NLWebResponse, NLWebResult
from nlweb.orchestrators.search.constants import ToolType
from nlweb.tools.base import ToolHandler, contains_any, query_terms

NAME_TERM_WEIGHT = 3.0
DESCRIPTION_TERM_WEIGHT = 2.0

_LEAD_IN = re.compile(
    r"^\s*(?:please\s+)?(?:search\s+for|search|find|look\s+for|locate)\b\s*",
    re.IGNORECASE,
)
_STRONG_SIGNALS = ("search", "find", "look for", "locate", "discover")


def strip_lead_in(query: str) -> str:
    stripped = _LEAD_IN.sub("", query).strip()
    return stripped or query.strip()


def rerank(results: list[NLWebResult], query: str) -> list[NLWebResult]:
    terms = query_terms(query)
    rescored = []
    for r in results:
        name = r.name.lower()
        description = r.description.lower()
        bonus = sum(NAME_TERM_WEIGHT for t in terms if t in name) + sum(
            DESCRIPTION_TERM_WEIGHT for t in terms if t in description
        )
        rescored.append(
            r.model_copy(update={"score": r.score + bonus, "site": r.site or "Search"})
        )
    rescored.sort(key=lambda r: r.score, reverse=True)
    return rescored


class SearchToolHandler(ToolHandler):
    keywords = ("search", "find", "look for", "locate", "discover")

    @property
    def tool_type(self) -> ToolType:
        return ToolType.SEARCH

    @property
    def name(self) -> str:
        return "Enhanced Search"

    @property
    def description(self) -> str:
        return "Keyword search with query cleanup and relevance re-ranking"

    def priority(self, request: NLWebRequest) -> int:
        return 80 if contains_any(request.query, _STRONG_SIGNALS) else 60

    async def run(self, request: NLWebRequest) -> NLWebResponse:
        cleaned = strip_lead_in(request.query)
        effective = await self._effective_query(
            request.model_copy(update={"query": cleaned})
        )
        results = await self._search_for(effective, request.site, request.max_results)
        ranked = rerank(results, cleaned)
        if request.max_results:
            ranked = ranked[: request.max_results]
        return self.success_response(
            request,
            ranked,
            summary=f"Enhanced search completed - found {len(ranked)} results",
            processed_query=effective,
        )
