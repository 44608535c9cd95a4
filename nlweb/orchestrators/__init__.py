"""Orchestrators: query pipelines (e.g. NLWeb search)."""

from nlweb.orchestrators.search import (
    DataBackend,
    NLWebOrchestrator,
    SearchService,
)

__all__ = [
    "DataBackend",
    "NLWebOrchestrator",
    "SearchService",
]
