"""Recipe tool: substitutions, pairings, recipes, techniques and nutrition lookups."""

import re
from dataclasses import dataclass
from enum import StrEnum

from nlweb.contracts.nlweb_v1 import NLWebRequest, NLWebResponse, NLWebResult
from nlweb.orchestrators.search.constants import ToolType
from nlweb.orchestrators.search.errors import ToolExecutionError
from nlweb.tools.base import ToolHandler, clean_subject, contains_any


class RecipeQueryType(StrEnum):
    SUBSTITUTION = "substitution"
    ACCOMPANIMENT = "accompaniment"
    RECIPE = "recipe"
    TECHNIQUE = "technique"
    NUTRITION = "nutrition"


@dataclass(frozen=True)
class RecipePlan:
    """How one query type is searched and shaped."""

    keywords: tuple[str, ...]
    subject: re.Pattern
    query_template: str
    max_results: int
    label: str
    take: int
    filter_words: tuple[str, ...] = ()
    header: str | None = None


# Checked in declaration order; the first type whose keywords appear wins.
PLANS: dict[RecipeQueryType, RecipePlan] = {
    RecipeQueryType.SUBSTITUTION: RecipePlan(
        keywords=("substitute", "substitution", "replace", "instead of", "alternative to"),
        subject=re.compile(
            r"(?:substitutes?|substitution|replace|alternatives?\s+to|instead\s+of)"
            r"\s+(?:for\s+)?(.+?)(?:\s+(?:in|with|when)\b.*)?$"
        ),
        query_template="substitute {s} cooking ingredient alternative replacement",
        max_results=10,
        label="[Substitution]",
        take=5,
        filter_words=("substitut", "alternative", "replace"),
        header="Substitutions for {s}",
    ),
    RecipeQueryType.ACCOMPANIMENT: RecipePlan(
        keywords=("goes with", "serve with", "pair with", "side dish", "accompaniment"),
        subject=re.compile(
            r"(?:goes\s+with|go\s+with|serve\s+with|pair\s+with|side\s+dish(?:es)?\s+(?:for|with)"
            r"|accompaniments?\s+(?:for|to))\s+(.+)"
        ),
        query_template="what goes with {s} side dish pairing accompaniment serve",
        max_results=10,
        label="[Pairing]",
        take=5,
        filter_words=("side", "pair", "serve", "goes with"),
        header="What to Serve with {s}",
    ),
    RecipeQueryType.RECIPE: RecipePlan(
        keywords=("recipe for", "how to make", "cook", "bake", "prepare"),
        subject=re.compile(
            r"(?:recipe\s+for|how\s+to\s+make|how\s+do\s+i\s+make|cook|bake|prepare)"
            r"\s+(?:a\s+|an\s+|some\s+)?(.+)"
        ),
        query_template="recipe {s} cooking instructions preparation",
        max_results=8,
        label="[Recipe]",
        take=6,
    ),
    RecipeQueryType.TECHNIQUE: RecipePlan(
        keywords=("how to", "technique", "method", "process", "way to"),
        subject=re.compile(
            r"(?:how\s+to|technique\s+(?:for|of)|method\s+(?:for|of)|process\s+(?:for|of)"
            r"|way\s+to)\s+(.+)"
        ),
        query_template="how to {s} cooking technique method instructions",
        max_results=8,
        label="[Technique]",
        take=5,
    ),
    RecipeQueryType.NUTRITION: RecipePlan(
        keywords=("nutrition", "calories", "healthy", "vitamins", "nutrients"),
        subject=re.compile(
            r"(?:nutrition(?:al)?(?:\s+(?:facts|information|info|value))?\s+(?:of|for|in)"
            r"|calories\s+in|how\s+healthy\s+(?:is|are)|vitamins\s+in|nutrients\s+in)\s+(.+)"
        ),
        query_template="{s} nutrition facts calories vitamins minerals health",
        max_results=6,
        label="[Nutrition]",
        take=4,
    ),
}

_FILLER = re.compile(
    r"\b(?:what|can|could|i|use|a|an|the|is|are|good|best|some|for|to|with|me|please)\b"
)


def classify(query: str) -> RecipeQueryType | None:
    q = query.lower()
    for query_type, plan in PLANS.items():
        if contains_any(q, plan.keywords):
            return query_type
    return None


def extract_subject(query: str, query_type: RecipeQueryType) -> str:
    q = clean_subject(query)
    plan = PLANS[query_type]
    match = plan.subject.search(q)
    if match:
        subject = clean_subject(match.group(1))
        if subject:
            return subject
    # No phrasing matched: drop the type keywords and filler words.
    for keyword in plan.keywords:
        q = q.replace(keyword, " ")
    return " ".join(_FILLER.sub(" ", q).split()) or clean_subject(query)


class RecipeToolHandler(ToolHandler):
    keywords = (
        "recipe",
        "cooking",
        "cook",
        "ingredient",
        "substitute",
        "substitution",
        "bake",
        "baking",
        "preparation",
        "kitchen",
        "culinary",
        "food",
        "accompaniment",
        "side dish",
        "pair with",
        "serve with",
        "goes with",
    )

    @property
    def tool_type(self) -> ToolType:
        return ToolType.RECIPE

    @property
    def name(self) -> str:
        return "Recipe Assistant"

    @property
    def description(self) -> str:
        return "Recipes, ingredient substitutions, pairings, techniques and nutrition"

    def can_handle(self, request: NLWebRequest) -> bool:
        return super().can_handle(request) and contains_any(request.query, self.keywords)

    def priority(self, request: NLWebRequest) -> int:
        q = request.query.lower()
        if "substitute" in q or "substitution" in q:
            return 95
        if "recipe for" in q or "how to cook" in q:
            return 90
        if "serve with" in q or "goes with" in q:
            return 85
        return 70

    async def run(self, request: NLWebRequest) -> NLWebResponse:
        query_type = classify(request.query)
        if query_type is None:
            raise ToolExecutionError(self.tool_type, "Unknown recipe query type")
        plan = PLANS[query_type]
        subject = extract_subject(request.query, query_type)

        focused = plan.query_template.format(s=subject)
        results = await self._search_for(focused, request.site, plan.max_results)
        picked = results
        if plan.filter_words:
            filtered = [
                r
                for r in results
                if contains_any(f"{r.name} {r.description}", plan.filter_words)
            ]
            picked = filtered or results
        shaped = [
            r.model_copy(
                update={"name": f"{plan.label} {r.name}", "site": r.site or "Recipe"}
            )
            for r in picked[: plan.take]
        ]

        if plan.header:
            header = NLWebResult(
                url=f"recipe://{query_type}/{subject.replace(' ', '-')}",
                name=plan.header.format(s=subject),
                site="Recipe",
                score=max((r.score for r in shaped), default=0.0) + 1.0,
                description=f"{len(shaped)} suggestions for {subject}",
                schema_object={"type": "RecipeQuery", "queryType": str(query_type), "subject": subject},
            )
            shaped = [header, *shaped]

        return self.success_response(
            request,
            shaped,
            summary=f"{query_type.title()} results for '{subject}'",
            processed_query=focused,
        )
