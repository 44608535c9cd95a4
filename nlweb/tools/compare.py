"""Compare tool: side-by-side results for two subjects ("A vs B", "difference between A and B")."""

import re

from nlweb.contracts.nlweb_v1 import NLWebRequest, NLWebResponse, NLWebResult
from nlweb.orchestrators.search.constants import ToolType
from nlweb.orchestrators.search.errors import ToolExecutionError
from nlweb.tools.base import ToolHandler, clean_subject, contains_any, query_terms

MAX_BODY_RESULTS = 8

_PAIR_PATTERNS = (
    re.compile(r"compare\s+(.+?)\s+(?:vs\.?|versus)\s+(.+)"),
    re.compile(r"(.+?)\s+(?:vs\.?|versus)\s+(.+)"),
    re.compile(r"differences?\s+between\s+(.+?)\s+and\s+(.+)"),
    re.compile(r"(.+?)\s+or\s+(.+?)(?:\s+which\b.*|$)"),
    re.compile(r"(.+?)\s+and\s+(.+?)\s+comparison"),
    re.compile(r"compare\s+(.+?)\s+(?:and|with|to)\s+(.+)"),
)
_PREFIX_NOISE = ("the", "a", "an", "which", "what", "how")
_SUFFIX_NOISE = ("better", "worse", "best", "good", "bad")


def clean_item(text: str) -> str:
    # "which is better, react or vue" -> the item is after the last comma
    cleaned = clean_subject(text.split(",")[-1])
    changed = True
    while changed and cleaned:
        changed = False
        for noise in _PREFIX_NOISE:
            if cleaned.startswith(noise + " "):
                cleaned = cleaned[len(noise) + 1 :].strip()
                changed = True
        for noise in _SUFFIX_NOISE:
            if cleaned.endswith(" " + noise):
                cleaned = cleaned[: -len(noise) - 1].strip()
                changed = True
    return cleaned


def extract_pair(query: str) -> tuple[str, str] | None:
    q = clean_subject(query)
    for pattern in _PAIR_PATTERNS:
        match = pattern.search(q)
        if not match:
            continue
        a, b = clean_item(match.group(1)), clean_item(match.group(2))
        if a and b and a != b:
            return a, b
    return None


def _mentions(result: NLWebResult, subject: str) -> bool:
    text = f"{result.name} {result.description}".lower()
    terms = query_terms(subject, min_length=2) or [subject]
    return all(t in text for t in terms)


def _best_description(results: list[NLWebResult]) -> str:
    if not results:
        return "No information found."
    return max(results, key=lambda r: len(r.description)).description


def side_by_side_table(a: str, b: str, a_results: list[NLWebResult], b_results: list[NLWebResult]) -> str:
    rows = [
        f"| | {a} | {b} |",
        "|---|---|---|",
        f"| Sources | {len(a_results)} | {len(b_results)} |",
        f"| Top result | {a_results[0].name if a_results else '-'} | {b_results[0].name if b_results else '-'} |",
        f"| Summary | {_best_description(a_results)} | {_best_description(b_results)} |",
    ]
    return "\n".join(rows)


class CompareToolHandler(ToolHandler):
    keywords = (
        "compare",
        "vs",
        "versus",
        "difference",
        "contrast",
        "better",
        "worse",
        "pros and cons",
        "which is better",
    )

    @property
    def tool_type(self) -> ToolType:
        return ToolType.COMPARE

    @property
    def name(self) -> str:
        return "Compare Items"

    @property
    def description(self) -> str:
        return "Side-by-side comparison of two named subjects"

    def can_handle(self, request: NLWebRequest) -> bool:
        return super().can_handle(request) and contains_any(request.query, self.keywords)

    def priority(self, request: NLWebRequest) -> int:
        q = request.query.strip().lower()
        if " vs " in q or " versus " in q or q.startswith("compare"):
            return 95
        if "difference" in q or "contrast" in q:
            return 85
        return 70

    async def run(self, request: NLWebRequest) -> NLWebResponse:
        pair = extract_pair(request.query)
        if pair is None:
            raise ToolExecutionError(self.tool_type, "Could not identify two items to compare")
        a, b = pair

        joint = f"{a} vs {b} comparison differences"
        results = await self._search_for(joint, request.site)
        a_results: list[NLWebResult] = []
        b_results: list[NLWebResult] = []
        body: list[NLWebResult] = []
        for r in results:
            has_a, has_b = _mentions(r, a), _mentions(r, b)
            if not (has_a or has_b):
                continue
            if has_a:
                a_results.append(r)
            if has_b:
                b_results.append(r)
            if len(body) < MAX_BODY_RESULTS:
                label = f"{a} & {b}" if has_a and has_b else (a if has_a else b)
                body.append(
                    r.model_copy(
                        update={"name": f"[{label}] {r.name}", "site": r.site or "Compare"}
                    )
                )

        header = NLWebResult(
            url=f"comparison://{a.replace(' ', '-')}-vs-{b.replace(' ', '-')}",
            name=f"Comparison: {a} vs {b}",
            site="Compare",
            score=max((r.score for r in body), default=0.0) + 1.0,
            description=(
                f"{a}: {_best_description(a_results)}\n\n"
                f"{b}: {_best_description(b_results)}"
            ),
            schema_object={
                "type": "Comparison",
                "items": [a, b],
                "table": side_by_side_table(a, b, a_results, b_results),
            },
        )
        return self.success_response(
            request,
            [header, *body],
            summary=f"Comparison completed between '{a}' and '{b}'",
            processed_query=joint,
        )
