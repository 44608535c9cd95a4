"""Result merging: identity deduplication and score ranking across backends."""

import logging
from collections.abc import Iterable

from nlweb.contracts.nlweb_v1 import NLWebResult

logger = logging.getLogger(__name__)


def deduplicate_results(results: Iterable[NLWebResult]) -> list[NLWebResult]:
    """Collapse results sharing a URL, keeping the highest score.

    Single pass over a dict keyed by URL. On equal scores the first result seen
    stays, and each survivor keeps the position its URL was first seen at.
    """
    seen: dict[str, NLWebResult] = {}
    for r in results:
        existing = seen.get(r.url)
        if existing is None or r.score > existing.score:
            seen[r.url] = r
    return list(seen.values())


def rank_results(results: Iterable[NLWebResult]) -> list[NLWebResult]:
    """Sort by descending score; stable, so equal scores keep input order."""
    return sorted(results, key=lambda r: r.score, reverse=True)


def merge_results(
    per_backend: Iterable[list[NLWebResult]],
    max_results: int,
    deduplicate: bool = True,
) -> list[NLWebResult]:
    """Flatten backend result lists (in backend order), dedup, rank, cap."""
    flat = [r for results in per_backend for r in results]
    merged = deduplicate_results(flat) if deduplicate else flat
    if deduplicate and len(merged) < len(flat):
        logger.debug("Dedup: %s -> %s results", len(flat), len(merged))
    return rank_results(merged)[:max_results]
