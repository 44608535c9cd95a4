"""In-memory backend over a small sample catalog. Used for demos and tests."""

import asyncio
import logging
from collections.abc import Iterable

from nlweb.contracts.nlweb_v1 import BackendCapabilities, NLWebResult
from nlweb.orchestrators.search.interface import DataBackend

logger = logging.getLogger(__name__)

NAME_HIT = 10.0
DESCRIPTION_HIT = 5.0
MULTI_TERM_BOOST = 0.2
MAX_RESULTS = 50


def _item(url: str, name: str, description: str, **schema) -> NLWebResult:
    site = url.split("/")[2]
    return NLWebResult(
        url=url,
        name=name,
        site=site,
        description=description,
        schema_object=schema or None,
    )


SAMPLE_CATALOG: tuple[NLWebResult, ...] = (
    _item(
        "https://galactic-shipyards.com/millennium-falcon",
        "Millennium Falcon Technical Specifications",
        "Complete technical breakdown of the legendary Corellian YT-1300 light "
        "freighter, including hyperdrive capabilities and modifications.",
        type="Product",
        brand="Corellian Engineering Corporation",
        category="Light Freighter",
    ),
    _item(
        "https://starfleet-database.com/enterprise-nx01",
        "Enterprise NX-01 Mission Archives",
        "Historical records of humanity's first deep space exploration vessel and "
        "its missions to establish interstellar relations.",
        type="Product",
        brand="Earth Starfleet",
        category="Exploration Vessel",
    ),
    _item(
        "https://cyberdyne-systems.com/terminator-series",
        "Cyberdyne Systems T-800 Series",
        "Cybernetic organism specifications for the T-800 endoskeleton, featuring "
        "neural net processors and combat protocols.",
        type="Product",
        brand="Cyberdyne Systems",
        category="Cybernetic Organism",
    ),
    _item(
        "https://weyland-yutani.com/nostromo-specs",
        "USCSS Nostromo Commercial Towing Vessel",
        "Heavy-duty commercial towing vehicle designed for long-haul cargo "
        "operations across the outer rim territories.",
        type="Product",
        brand="Weyland-Yutani",
        category="Commercial Towing Vessel",
    ),
    _item(
        "https://future-chronicles.com/artificial-intelligence-breakthrough",
        "The Great AI Awakening of 2157",
        "An account of humanity's first contact with truly sentient artificial "
        "intelligence and the societal changes that followed.",
        type="BlogPosting",
        author="Dr. Sarah Chen",
        category="artificial-intelligence",
    ),
    _item(
        "https://space-exploration-journal.com/mars-colony-update",
        "New Olympia Mars Colony: Year Five Report",
        "Update on the progress of humanity's first permanent settlement on Mars, "
        "including terraforming advances and population growth.",
        type="BlogPosting",
        author="Commander Lisa Rodriguez",
        category="space-colonization",
    ),
    _item(
        "https://quantum-physics-today.com/faster-than-light-discovery",
        "Breakthrough in Alcubierre Drive Technology",
        "Advances in space-time manipulation bring practical faster-than-light "
        "travel closer to reality than ever before.",
        type="BlogPosting",
        category="space-technology",
    ),
    _item(
        "https://scifi-cinema.com/movies/blade-runner-2049",
        "Blade Runner 2049",
        "A young blade runner discovers a secret that leads him to track down "
        "former blade runner Rick Deckard, missing for thirty years.",
        type="Movie",
        director="Denis Villeneuve",
        genre=["Science Fiction", "Drama"],
    ),
    _item(
        "https://scifi-cinema.com/movies/dune-2021",
        "Dune",
        "Paul Atreides leads nomadic tribes in a battle to control the desert "
        "planet Arrakis and its valuable spice.",
        type="Movie",
        director="Denis Villeneuve",
        genre=["Science Fiction", "Adventure"],
    ),
    _item(
        "https://orbital-kitchen.com/recipes/hydroponic-pasta",
        "Hydroponic Basil Pasta Recipe",
        "Recipe for a quick pasta dinner with basil grown in station hydroponics, "
        "garlic, olive oil and parmesan. Serve with a green salad side dish.",
        type="Recipe",
        cuisine="Italian",
    ),
    _item(
        "https://orbital-kitchen.com/guides/egg-substitutes",
        "Egg Substitutes for Low-Gravity Baking",
        "How to substitute eggs in baking: flax seed, applesauce and aquafaba are "
        "reliable alternatives that replace eggs in most recipes.",
        type="HowTo",
        category="substitution",
    ),
    _item(
        "https://neo-tokyo-guide.com/museums/cybernetics-museum",
        "Neo Tokyo Museum of Cybernetics",
        "Museum tracing the history of cybernetic augmentation, a popular "
        "attraction for a day visit to Neo Tokyo.",
        type="TouristAttraction",
        city="Neo Tokyo",
    ),
    _item(
        "https://neo-tokyo-guide.com/dining/ramen-district",
        "Neon Ramen District Restaurant Guide",
        "Restaurant guide to the ramen stalls and noodle bars of Neo Tokyo's "
        "night market, from quick dinner spots to late-night dessert cafes.",
        type="Restaurant",
        city="Neo Tokyo",
    ),
)


def score_item(item: NLWebResult, terms: list[str]) -> float:
    """Term-hit relevance: name hits outrank description hits, multi-term matches boosted."""
    if not terms:
        return 0.0
    name = item.name.lower()
    description = item.description.lower()
    text = f"{name} {description}"
    score = 0.0
    for term in terms:
        if term in name:
            score += NAME_HIT
        elif term in description:
            score += DESCRIPTION_HIT
    matching = sum(1 for term in terms if term in text)
    if matching > 1:
        score *= 1.0 + MULTI_TERM_BOOST * (matching - 1)
    return round(score, 2)


class MockDataBackend(DataBackend):
    def __init__(
        self,
        items: Iterable[NLWebResult] | None = None,
        backend_id: str = "mock",
        latency_seconds: float = 0.0,
        fail_with: Exception | None = None,
    ):
        self._items = list(SAMPLE_CATALOG if items is None else items)
        self._backend_id = backend_id
        self._latency = latency_seconds
        self._fail_with = fail_with

    async def search(
        self,
        query: str,
        site: str | None = None,
        max_results: int = 10,
    ) -> list[NLWebResult]:
        if self._latency:
            await asyncio.sleep(self._latency)
        if self._fail_with is not None:
            raise self._fail_with
        if not query or not query.strip():
            return []

        terms = [t for t in query.lower().split() if len(t) > 2]
        scored = []
        for item in self._items:
            if site is not None and item.site.lower() != site.lower():
                continue
            score = score_item(item, terms)
            if score > 0:
                scored.append(item.model_copy(update={"score": score}))
        scored.sort(key=lambda r: r.score, reverse=True)
        results = scored[: min(max_results, MAX_RESULTS)]
        logger.debug("Mock %s: %s results for %r", self._backend_id, len(results), query)
        return results

    async def get_available_sites(self) -> list[str]:
        return sorted({item.site for item in self._items if item.site})

    async def get_item_by_url(self, url: str) -> NLWebResult | None:
        for item in self._items:
            if item.url.lower() == url.lower():
                return item
        return None

    def get_capabilities(self) -> BackendCapabilities:
        return BackendCapabilities(
            supports_site_filtering=True,
            supports_full_text_search=True,
            supports_semantic_search=False,
            max_results=MAX_RESULTS,
            description="In-memory sample catalog for demos and tests",
        )

    def get_backend_id(self) -> str:
        return self._backend_id
