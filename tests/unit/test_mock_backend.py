import pytest

from nlweb.orchestrators.search.backends import MockDataBackend
from nlweb.orchestrators.search.backends.mock import SAMPLE_CATALOG, score_item
from tests.factories import make_result


def test_score_item_weights():
    item = make_result("https://x.test/1", name="Dune Messiah", description="desert sequel")
    assert score_item(item, ["dune"]) == 10.0
    assert score_item(item, ["desert"]) == 5.0
    # two matching terms: (10 + 5) * 1.2
    assert score_item(item, ["dune", "desert"]) == 18.0
    assert score_item(item, ["ramen"]) == 0.0
    assert score_item(item, []) == 0.0


class TestMockDataBackend:
    @pytest.mark.asyncio
    async def test_search_ranks_name_hits_first(self):
        results = await MockDataBackend().search("blade runner movie", max_results=5)

        assert results[0].name == "Blade Runner 2049"
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert all(r.score > 0 for r in results)

    @pytest.mark.asyncio
    async def test_short_terms_ignored(self):
        assert await MockDataBackend().search("a of to") == []

    @pytest.mark.asyncio
    async def test_site_filter_case_insensitive(self):
        results = await MockDataBackend().search(
            "dune blade runner", site="SCIFI-CINEMA.com"
        )
        assert {r.site for r in results} == {"scifi-cinema.com"}
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_results_capped_at_fifty(self):
        items = [make_result(f"https://x.test/{i}", name=f"dune {i}") for i in range(60)]
        results = await MockDataBackend(items).search("dune", max_results=100)
        assert len(results) == 50

    @pytest.mark.asyncio
    async def test_configured_failure(self):
        with pytest.raises(ConnectionError):
            await MockDataBackend(fail_with=ConnectionError("offline")).search("dune")

    @pytest.mark.asyncio
    async def test_sites_and_lookup(self):
        backend = MockDataBackend()

        sites = await backend.get_available_sites()
        item = await backend.get_item_by_url("HTTPS://scifi-cinema.com/movies/dune-2021")

        assert "orbital-kitchen.com" in sites
        assert sites == sorted(set(sites))
        assert item is not None and item.name == "Dune"
        assert await backend.get_item_by_url("https://nowhere.test") is None

    def test_descriptor(self):
        backend = MockDataBackend(backend_id="demo")
        assert backend.get_backend_id() == "demo"
        assert backend.get_capabilities().supports_site_filtering is True
        assert len(SAMPLE_CATALOG) == 13
