"""Ensemble tool: a themed set of recommendations across several categories.

"plan an italian dinner" -> theme "italian", categories starter/main/dessert, one
small sub-search per category, assembled under an overview result.
"""

import re
from dataclasses import dataclass

from nlweb.contracts.nlweb_v1 import NLWebRequest, NLWebResponse, NLWebResult
from nlweb.orchestrators.search.constants import ToolType
from nlweb.tools.base import ToolHandler, contains_any

PER_CATEGORY_RESULTS = 3
MAX_OPTIONS = 10
OVERVIEW_NAME = "Curated Ensemble Recommendations"

THEMES: dict[str, tuple[str, ...]] = {
    "cuisine": (
        "italian", "french", "japanese", "mexican", "indian", "chinese", "thai",
        "greek", "spanish", "mediterranean", "vegan", "vegetarian",
    ),
    "occasion": (
        "birthday", "anniversary", "date night", "holiday", "christmas",
        "thanksgiving", "party", "wedding", "picnic", "weekend", "romantic",
    ),
    "city": (
        "paris", "london", "tokyo", "new york", "rome", "seattle", "barcelona",
        "berlin", "neo tokyo", "san francisco",
    ),
}


@dataclass(frozen=True)
class Category:
    name: str
    keywords: tuple[str, ...]
    search_terms: str


CATEGORIES: tuple[Category, ...] = (
    Category("starter", ("starter", "appetizer"), "appetizer starter"),
    Category("main", ("main", "main course", "entree", "entrée"), "main course"),
    Category("dessert", ("dessert", "sweet"), "dessert"),
    Category("drink", ("drink", "wine", "cocktail", "beverage"), "drink pairing"),
    Category("museum", ("museum", "gallery", "exhibit"), "museum"),
    Category("attraction", ("attraction", "sight", "landmark", "sightseeing"), "attraction"),
    Category("restaurant", ("restaurant", "dining", "food"), "restaurant"),
    Category("entertainment", ("entertainment", "show", "theater", "theatre", "concert", "nightlife"), "entertainment"),
    Category("hotel", ("hotel", "accommodation", "stay"), "hotel"),
    Category("shopping", ("shopping", "shop", "market"), "shopping"),
)
_BY_NAME = {c.name: c for c in CATEGORIES}

# Context words that imply a category set when none is named.
DEFAULT_CATEGORY_SETS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (("dinner", "meal", "menu"), ("starter", "main", "dessert")),
    (("day", "visit", "trip", "itinerary"), ("attraction", "restaurant")),
)


def _word_pattern(keyword: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(keyword)}(?:e?s)?\b")


def _first_position(text: str, keywords: tuple[str, ...]) -> int | None:
    positions = [m.start() for k in keywords if (m := _word_pattern(k).search(text))]
    return min(positions) if positions else None


def detect_theme(query: str) -> dict[str, str]:
    q = query.lower()
    theme: dict[str, str] = {}
    for kind, words in THEMES.items():
        # Longest first so "neo tokyo" wins over "tokyo".
        for word in sorted(words, key=len, reverse=True):
            if _word_pattern(word).search(q):
                theme[kind] = word
                break
    return theme


def detect_categories(query: str) -> list[str]:
    q = query.lower()
    found = []
    for category in CATEGORIES:
        pos = _first_position(q, category.keywords)
        if pos is not None:
            found.append((pos, category.name))
    if found:
        return [name for _, name in sorted(found)]
    for context_words, names in DEFAULT_CATEGORY_SETS:
        if _first_position(q, context_words) is not None:
            return list(names)
    return []


class EnsembleToolHandler(ToolHandler):
    keywords = (
        "recommend",
        "suggest",
        "give me",
        "plan",
        "set of",
        "ensemble",
        "what should",
        "help me choose",
        "i need",
        "looking for",
    )

    @property
    def tool_type(self) -> ToolType:
        return ToolType.ENSEMBLE

    @property
    def name(self) -> str:
        return "Ensemble Recommendations"

    @property
    def description(self) -> str:
        return "Builds a themed set of recommendations across several categories"

    def can_handle(self, request: NLWebRequest) -> bool:
        return super().can_handle(request) and contains_any(request.query, self.keywords)

    def priority(self, request: NLWebRequest) -> int:
        q = request.query.strip().lower()
        has_list = " and " in q or ", " in q
        if "give me" in q and has_list:
            return 90
        if q.startswith("plan") or "help me plan" in q:
            return 85
        if ("recommend" in q or "suggest" in q) and has_list:
            return 80
        return 65

    async def run(self, request: NLWebRequest) -> NLWebResponse:
        query = request.query.strip()
        theme = detect_theme(query)
        categories = detect_categories(query)
        if not categories:
            return await self._options(request)

        theme_text = " ".join(theme.values())
        seen: set[str] = set()
        sections: dict[str, list[NLWebResult]] = {}
        for name in categories:
            category = _BY_NAME[name]
            sub_query = " ".join(p for p in (theme_text, category.search_terms) if p)
            results = await self._search_for(sub_query, request.site, PER_CATEGORY_RESULTS * 3)
            picked = []
            for r in results:
                if r.url in seen:
                    continue
                seen.add(r.url)
                picked.append(
                    r.model_copy(
                        update={
                            "name": f"[{name.title()}] {r.name}",
                            "site": r.site or "Ensemble",
                        }
                    )
                )
                if len(picked) >= PER_CATEGORY_RESULTS:
                    break
            sections[name] = picked

        body = [r for picked in sections.values() for r in picked]
        overview = NLWebResult(
            url="ensemble://" + "-".join(categories),
            name=OVERVIEW_NAME,
            site="Ensemble",
            score=max((r.score for r in body), default=0.0) + 1.0,
            description=(
                "A carefully selected collection of recommendations based on "
                f"your request: {query}"
            ),
            schema_object={
                "type": "Ensemble",
                "theme": theme,
                "categories": categories,
                "sections": {name: [r.url for r in picked] for name, picked in sections.items()},
            },
        )
        filled = sum(1 for picked in sections.values() if picked)
        return self.success_response(
            request,
            [overview, *body],
            summary=f"Ensemble of {len(body)} items across {filled}/{len(categories)} categories",
            processed_query=" ".join(p for p in (theme_text, *categories) if p),
        )

    async def _options(self, request: NLWebRequest) -> NLWebResponse:
        query = request.query.strip()
        focused = f"{query} recommendations suggestions set"
        results = await self._search_for(focused, request.site)
        options = [
            r.model_copy(update={"name": f"[Option {i}] {r.name}", "site": r.site or "Ensemble"})
            for i, r in enumerate(results[:MAX_OPTIONS], start=1)
        ]
        overview = NLWebResult(
            url="ensemble://options",
            name=OVERVIEW_NAME,
            site="Ensemble",
            score=max((r.score for r in options), default=0.0) + 1.0,
            description=(
                "A carefully selected collection of recommendations based on "
                f"your request: {query}"
            ),
            schema_object={"type": "Ensemble", "categories": [], "options": len(options)},
        )
        return self.success_response(
            request,
            [overview, *options],
            summary=f"{len(options)} recommended options",
            processed_query=focused,
        )
