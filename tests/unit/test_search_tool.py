import pytest

from nlweb.contracts.nlweb_v1 import NLWebRequest
from nlweb.orchestrators.search.query_processor import QueryProcessor
from nlweb.tools.search import SearchToolHandler, rerank, strip_lead_in
from tests.factories import FakeBackend, make_result


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("search for mars colony", "mars colony"),
        ("Find the best ramen", "the best ramen"),
        ("please look for dune", "dune"),
        ("LOCATE nostromo", "nostromo"),
        ("findings on mars", "findings on mars"),
        ("find", "find"),
    ],
)
def test_strip_lead_in(query, expected):
    assert strip_lead_in(query) == expected


def test_rerank_rewards_name_over_description():
    results = [
        make_result("https://x.test/desc", 2.0, name="Other", description="mars"),
        make_result("https://x.test/name", 1.0, name="Mars Colony Report"),
    ]
    ranked = rerank(results, "mars colony")
    assert [r.url for r in ranked] == ["https://x.test/name", "https://x.test/desc"]
    assert ranked[0].score == 7.0
    assert ranked[1].score == 4.0


def test_rerank_fills_missing_site():
    ranked = rerank([make_result("https://x.test/1", site="")], "anything")
    assert ranked[0].site == "Search"


class TestSearchToolHandler:
    @pytest.mark.asyncio
    async def test_searches_with_cleaned_query(self):
        backend = FakeBackend(
            "b",
            [
                make_result("https://x.test/1", 1.0, name="Mars Colony"),
                make_result("https://x.test/2", 3.0, name="Dune"),
            ],
        )
        handler = SearchToolHandler(backend)

        response = await handler.execute(NLWebRequest(query="find mars colony"))

        assert backend.calls[0][0] == "mars colony"
        assert response.error is None
        assert response.results[0].name == "Mars Colony"
        assert response.summary == "Enhanced search completed - found 2 results"

    @pytest.mark.asyncio
    async def test_decontextualizes_cleaned_query(self):
        backend = FakeBackend("b")
        handler = SearchToolHandler(backend, QueryProcessor())

        await handler.execute(
            NLWebRequest(query="find more like those", prev=["sci-fi movies"])
        )

        assert backend.calls[0][0] == "sci-fi movies. more like those"

    @pytest.mark.asyncio
    async def test_respects_max_results(self):
        backend = FakeBackend("b", [make_result(f"https://x.test/{i}") for i in range(5)])
        handler = SearchToolHandler(backend)

        response = await handler.execute(NLWebRequest(query="dune", max_results=2))

        assert len(response.results) == 2

    @pytest.mark.asyncio
    async def test_backend_failure_becomes_error_response(self):
        handler = SearchToolHandler(FakeBackend("b", error=RuntimeError("down")))

        response = await handler.execute(NLWebRequest(query="dune"))

        assert response.results == []
        assert response.error == "Enhanced Search failed: down"

    @pytest.mark.parametrize(("query", "priority"), [("find dune", 80), ("dune", 60)])
    def test_priority(self, query, priority):
        assert SearchToolHandler(None).priority(NLWebRequest(query=query)) == priority

    def test_declines_blank_query(self):
        assert SearchToolHandler(None).can_handle(NLWebRequest(query="  ")) is False
