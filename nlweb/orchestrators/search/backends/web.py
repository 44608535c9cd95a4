"""Web search backend (SearXNG). Returns NLWebResult."""

from urllib.parse import urlparse

import httpx

from nlweb.contracts.nlweb_v1 import BackendCapabilities, NLWebResult
from nlweb.orchestrators.search.errors import BackendError
from nlweb.orchestrators.search.interface import DataBackend

# Rank-decayed score on the same scale as the catalog backends.
TOP_SCORE = 20.0
RANK_DECAY = 1.0
MIN_SCORE = 5.0


def _host(url: str) -> str:
    return urlparse(url).netloc or url


class WebSearchBackend(DataBackend):
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        search_url = (base_url or "").rstrip("/")
        if search_url and not search_url.endswith("/search"):
            search_url = search_url + "/search"
        self._base_url = search_url
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def search(
        self,
        query: str,
        site: str | None = None,
        max_results: int = 10,
    ) -> list[NLWebResult]:
        if not self._base_url or not query.strip():
            return []

        q = f"{query} site:{site}" if site else query
        params = {"q": q, "format": "json", "language": "en-US"}
        try:
            async with self._client() as client:
                response = await client.get(
                    self._base_url, params=params, follow_redirects=True
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise BackendError(self.get_backend_id(), f"SearXNG request failed: {e}") from e
        except ValueError as e:
            raise BackendError(self.get_backend_id(), "SearXNG returned invalid JSON") from e

        results: list[NLWebResult] = []
        for i, item in enumerate((data.get("results") or [])[:max_results]):
            url = item.get("url")
            if not url:
                continue
            results.append(
                NLWebResult(
                    url=url,
                    name=item.get("title") or "No Title",
                    site=_host(url),
                    score=max(MIN_SCORE, TOP_SCORE - i * RANK_DECAY),
                    description=item.get("content") or item.get("snippet") or "",
                    schema_object={"engine": item["engine"]} if item.get("engine") else None,
                )
            )
        return results

    async def get_available_sites(self) -> list[str]:
        # Any host is reachable through site: filtering; there is no fixed list.
        return []

    async def get_item_by_url(self, url: str) -> NLWebResult | None:
        results = await self.search(url, max_results=5)
        for r in results:
            if r.url == url:
                return r
        return None

    def get_capabilities(self) -> BackendCapabilities:
        return BackendCapabilities(
            supports_site_filtering=True,
            supports_full_text_search=True,
            supports_semantic_search=False,
            max_results=50,
            description="Public web search through a SearXNG instance",
        )

    def get_backend_id(self) -> str:
        return "web"
