"""Details tool: focused lookup of one subject ("tell me about X", "what is X")."""

import re

from nlweb.contracts.nlweb_v1 import NLWebRequest, NLWebResponse, NLWebResult
from nlweb.orchestrators.search.constants import ToolType
from nlweb.tools.base import ToolHandler, clean_subject, contains_any, query_terms

MAX_DETAIL_RESULTS = 10
INDICATOR_WORDS = ("overview", "introduction", "definition", "explanation", "guide", "about")

_SUBJECT_PATTERNS = (
    re.compile(r"(?:tell me about|information about|details about|describe)\s+(.+)", re.IGNORECASE),
    re.compile(r"(?:what is|what are)\s+(.+)", re.IGNORECASE),
    re.compile(r"(?:explain|definition of|overview of)\s+(.+)", re.IGNORECASE),
)
_LEADING_ARTICLE = re.compile(r"^(?:the|a|an)\s+")


def extract_subject(query: str) -> str:
    for pattern in _SUBJECT_PATTERNS:
        match = pattern.search(query)
        if match:
            subject = clean_subject(match.group(1))
            subject = _LEADING_ARTICLE.sub("", subject)
            if subject:
                return subject
    return clean_subject(query)


def score_detail(result: NLWebResult, subject: str) -> float:
    terms = query_terms(subject, min_length=2) or [subject]
    name = result.name.lower()
    description = result.description.lower()
    score = result.score
    if all(t in name for t in terms):
        score += 5.0
    score += 2.0 * sum(1 for w in INDICATOR_WORDS if w in name)
    score += 1.5 * sum(1 for t in terms if t in description)
    if len(result.description) > 100:
        score += 1.0
    return score


def _label(result: NLWebResult) -> str:
    if "details" in result.name.lower():
        return result.name
    return f"Details: {result.name}"


class DetailsToolHandler(ToolHandler):
    keywords = (
        "details",
        "information about",
        "tell me about",
        "describe",
        "what is",
        "explain",
        "definition of",
        "overview of",
    )

    @property
    def tool_type(self) -> ToolType:
        return ToolType.DETAILS

    @property
    def name(self) -> str:
        return "Details Retrieval"

    @property
    def description(self) -> str:
        return "Finds overview and explanatory material about one named subject"

    def can_handle(self, request: NLWebRequest) -> bool:
        return super().can_handle(request) and contains_any(request.query, self.keywords)

    def priority(self, request: NLWebRequest) -> int:
        q = request.query.strip().lower()
        if q.startswith(("tell me about", "what is")) or "details about" in q:
            return 90
        if contains_any(q, ("information about", "describe")):
            return 75
        return 65

    async def run(self, request: NLWebRequest) -> NLWebResponse:
        subject = extract_subject(request.query)
        focused = f"{subject} overview definition explanation details"
        results = await self._search_for(focused, request.site)

        scored = [
            r.model_copy(
                update={
                    "score": score_detail(r, subject),
                    "name": _label(r),
                    "site": r.site or "Details",
                }
            )
            for r in results
        ]
        kept = [r for r in scored if r.score > 0]
        kept.sort(key=lambda r: r.score, reverse=True)
        kept = kept[:MAX_DETAIL_RESULTS]
        return self.success_response(
            request,
            kept,
            summary=f"Details for '{subject}' - {len(kept)} relevant sources",
            processed_query=focused,
        )
