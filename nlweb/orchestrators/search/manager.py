"""Backend coordination: single-backend delegation and multi-backend fan-out.

BackendManager queries every enabled backend concurrently, bounded by a
per-call semaphore, each call under its own timeout. A backend that times out
or raises contributes no results and never fails the overall search. Caller
cancellation (task cancellation) still propagates.
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

from nlweb.contracts.nlweb_v1 import BackendInfo, NLWebResult
from nlweb.core.config import NLWebSettings
from nlweb.observability import traceable
from nlweb.orchestrators.search.fusion import merge_results
from nlweb.orchestrators.search.interface import DataBackend, SearchService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackendEntry:
    """A configured backend plus its startup-time descriptor fields."""

    backend: DataBackend
    enabled: bool = True
    priority: int = 0

    @property
    def backend_id(self) -> str:
        return self.backend.get_backend_id()


class SingleBackendService(SearchService):
    """One backend, no fan-out. Backend errors propagate to the caller."""

    def __init__(self, backend: DataBackend, settings: NLWebSettings):
        self._backend = backend
        self._settings = settings

    async def search(
        self,
        query: str,
        site: str | None = None,
        max_results: int | None = None,
    ) -> list[NLWebResult]:
        limit = max_results or self._settings.max_results_per_query
        return await self._backend.search(query, site, limit)

    async def get_available_sites(self) -> set[str]:
        return set(await self._backend.get_available_sites())

    async def get_item_by_url(self, url: str) -> NLWebResult | None:
        return await self._backend.get_item_by_url(url)

    def get_write_backend(self) -> BackendInfo | None:
        return self.get_backend_info()[0]

    def get_backend_info(self) -> list[BackendInfo]:
        return [
            BackendInfo(
                id=self._backend.get_backend_id(),
                capabilities=self._backend.get_capabilities(),
                is_write_endpoint=True,
            )
        ]


class BackendManager(SearchService):
    def __init__(
        self,
        backends: Sequence[DataBackend | BackendEntry],
        settings: NLWebSettings,
    ):
        entries = [
            b if isinstance(b, BackendEntry) else BackendEntry(backend=b)
            for b in backends
        ]
        # Stable: equal priorities keep declaration order.
        self._entries = sorted(entries, key=lambda e: e.priority, reverse=True)
        self._settings = settings
        self._multi = settings.multi_backend
        self._write_id = self._resolve_write_id()
        logger.info(
            "BackendManager: backends=%s enabled=%s write=%s parallel=%s limit=%s",
            [e.backend_id for e in self._entries],
            [e.backend_id for e in self._active],
            self._write_id,
            self._multi.parallel_querying_enabled,
            self._multi.max_concurrent_queries,
        )

    @property
    def _active(self) -> list[BackendEntry]:
        return [e for e in self._entries if e.enabled]

    def _resolve_write_id(self) -> str | None:
        if not self._entries:
            return None
        wanted = self._multi.write_endpoint
        if wanted:
            for e in self._entries:
                if e.backend_id == wanted:
                    return wanted
            logger.warning(
                "Write endpoint '%s' is not a configured backend; using '%s'",
                wanted,
                self._entries[0].backend_id,
            )
        return self._entries[0].backend_id

    @traceable(name="backend_search", run_type="retriever")
    async def search(
        self,
        query: str,
        site: str | None = None,
        max_results: int | None = None,
    ) -> list[NLWebResult]:
        limit = max_results or self._settings.max_results_per_query
        active = self._active
        if not active:
            logger.warning("No enabled backends; returning no results")
            return []

        if not self._multi.enabled or len(active) == 1:
            return await active[0].backend.search(query, site, limit)

        start = time.monotonic()
        if self._multi.parallel_querying_enabled:
            semaphore = asyncio.Semaphore(self._multi.max_concurrent_queries)
            per_backend = await asyncio.gather(
                *(self._search_one(e, query, site, limit, semaphore) for e in active)
            )
        else:
            per_backend = []
            for e in active:
                per_backend.append(await self._search_one(e, query, site, limit))

        merged = merge_results(
            per_backend, limit, deduplicate=self._multi.deduplication_enabled
        )
        logger.info(
            "Fan-out: %s backends, %s raw -> %s results in %.0fms",
            len(active),
            sum(len(r) for r in per_backend),
            len(merged),
            (time.monotonic() - start) * 1000,
        )
        return merged

    async def _search_one(
        self,
        entry: BackendEntry,
        query: str,
        site: str | None,
        limit: int,
        semaphore: asyncio.Semaphore | None = None,
    ) -> list[NLWebResult]:
        timeout = self._multi.backend_timeout_seconds
        try:
            async with semaphore or contextlib.nullcontext():
                async with asyncio.timeout(timeout):
                    results = await entry.backend.search(query, site, limit)
        except TimeoutError:
            logger.warning(
                "Backend %s timed out after %.1fs", entry.backend_id, timeout
            )
            return []
        except Exception as e:
            logger.warning("Backend %s failed: %s", entry.backend_id, e)
            return []
        logger.debug("Backend %s returned %s results", entry.backend_id, len(results))
        return list(results)

    async def get_available_sites(self) -> set[str]:
        async def sites_of(entry: BackendEntry) -> list[str]:
            try:
                return await entry.backend.get_available_sites()
            except Exception as e:
                logger.warning(
                    "Backend %s failed to list sites: %s", entry.backend_id, e
                )
                return []

        per_backend = await asyncio.gather(*(sites_of(e) for e in self._active))
        return {site for sites in per_backend for site in sites}

    async def get_item_by_url(self, url: str) -> NLWebResult | None:
        for entry in self._active:
            try:
                item = await entry.backend.get_item_by_url(url)
            except Exception as e:
                logger.warning(
                    "Backend %s failed lookup for %s: %s", entry.backend_id, url, e
                )
                continue
            if item is not None:
                return item
        return None

    def get_write_backend(self) -> BackendInfo | None:
        for info in self.get_backend_info():
            if info.is_write_endpoint:
                return info
        return None

    def get_backend_info(self) -> list[BackendInfo]:
        return [
            BackendInfo(
                id=e.backend_id,
                enabled=e.enabled,
                capabilities=e.backend.get_capabilities(),
                priority=e.priority,
                is_write_endpoint=e.backend_id == self._write_id,
            )
            for e in self._entries
        ]
