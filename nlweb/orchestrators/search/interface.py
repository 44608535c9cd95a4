"""Standard interfaces for data backends and the search service built on them.

Every data source implements DataBackend. Callers (handlers, the result generator,
the orchestrator) only ever see a SearchService, so they never branch on whether
one backend or several are configured.
"""

from abc import ABC, abstractmethod

from nlweb.contracts.nlweb_v1 import BackendCapabilities, BackendInfo, NLWebResult


class DataBackend(ABC):
    """Base class for all data backends."""

    @abstractmethod
    async def search(
        self,
        query: str,
        site: str | None = None,
        max_results: int = 50,
    ) -> list[NLWebResult]:
        """Execute search and return scored results."""

    @abstractmethod
    async def get_available_sites(self) -> list[str]:
        """Site labels this backend can filter on."""

    @abstractmethod
    async def get_item_by_url(self, url: str) -> NLWebResult | None:
        """Exact lookup by identity."""

    @abstractmethod
    def get_capabilities(self) -> BackendCapabilities:
        """Static capability metadata."""

    @abstractmethod
    def get_backend_id(self) -> str:
        """Stable identifier used in config and logs."""


class SearchService(ABC):
    """What the rest of the engine searches through."""

    @abstractmethod
    async def search(
        self,
        query: str,
        site: str | None = None,
        max_results: int | None = None,
    ) -> list[NLWebResult]:
        pass

    @abstractmethod
    async def get_available_sites(self) -> set[str]:
        pass

    @abstractmethod
    async def get_item_by_url(self, url: str) -> NLWebResult | None:
        pass

    @abstractmethod
    def get_write_backend(self) -> BackendInfo | None:
        pass

    @abstractmethod
    def get_backend_info(self) -> list[BackendInfo]:
        pass
