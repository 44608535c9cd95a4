"""NLWeb query engine: tool routing, multi-backend search and response generation."""

from nlweb.orchestrators.search.interface import DataBackend, SearchService
from nlweb.orchestrators.search.manager import (
    BackendEntry,
    BackendManager,
    SingleBackendService,
)
from nlweb.orchestrators.search.orchestrator import NLWebOrchestrator

__all__ = [
    "BackendEntry",
    "BackendManager",
    "DataBackend",
    "NLWebOrchestrator",
    "SearchService",
    "SingleBackendService",
]
