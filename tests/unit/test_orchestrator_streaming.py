"""Streaming sequence shape: initial results chunk, cumulative text, final chunk."""

import pytest

from nlweb.contracts.nlweb_v1 import NLWebRequest, QueryMode
from nlweb.orchestrators.search.backends import MockDataBackend
from nlweb.orchestrators.search.constants import Messages
from nlweb.orchestrators.search.generator import template_answer, template_summary
from tests.factories import FakeBackend, FakeProvider, make_result
from tests.factories import build_orchestrator as build

RESULTS = [
    make_result("https://x.test/dune", 9, name="Dune", description="Desert planet."),
    make_result("https://x.test/br", 7, name="Blade Runner 2049", description="Replicants."),
]


async def _collect(orchestrator, request):
    return [chunk async for chunk in orchestrator.process_stream(request)]


class TestStreamShape:
    @pytest.mark.asyncio
    async def test_generate_without_provider(self, settings):
        orchestrator = build(settings, FakeBackend("b", RESULTS))

        chunks = await _collect(
            orchestrator, NLWebRequest(query="sci-fi films", mode=QueryMode.GENERATE)
        )

        first, *content, final = chunks
        assert first.results == RESULTS
        assert first.is_streaming and not first.is_complete
        assert first.generated_response is None

        assert content
        texts = [c.generated_response for c in content]
        for previous, current in zip(texts, texts[1:]):
            assert current.startswith(previous)
        assert texts[-1] == template_answer("sci-fi films", RESULTS)
        assert all(c.results == [] and not c.is_complete for c in content)

        assert final.is_complete and not final.is_streaming
        assert final.results == RESULTS
        assert final.generated_response == texts[-1]
        assert len({c.query_id for c in chunks}) == 1

    @pytest.mark.asyncio
    async def test_summarize_stream(self, settings):
        untooled = settings.model_copy(update={"tool_selection_enabled": False})
        orchestrator = build(untooled, FakeBackend("b", RESULTS))

        chunks = await _collect(
            orchestrator, NLWebRequest(query="sci-fi films", mode=QueryMode.SUMMARIZE)
        )

        assert chunks[-1].summary == template_summary("sci-fi films", RESULTS)
        assert all(c.generated_response is None for c in chunks)

    @pytest.mark.asyncio
    async def test_list_mode_single_chunk(self, settings):
        untooled = settings.model_copy(update={"tool_selection_enabled": False})
        chunks = await _collect(
            build(untooled, FakeBackend("b", RESULTS)), NLWebRequest(query="sci-fi films")
        )

        assert len(chunks) == 1
        assert chunks[0].is_complete and chunks[0].results == RESULTS

    @pytest.mark.asyncio
    async def test_tool_response_single_chunk(self, settings):
        chunks = await _collect(
            build(settings, MockDataBackend()),
            NLWebRequest(query="compare dune vs blade runner", mode=QueryMode.SUMMARIZE),
        )

        assert len(chunks) == 1
        assert chunks[0].is_complete
        assert chunks[0].results[0].name == "Comparison: dune vs blade runner"

    @pytest.mark.asyncio
    async def test_provider_fragments_accumulate(self, settings):
        provider = FakeProvider(fragments=["Both ", "are ", "Villeneuve films."])
        orchestrator = build(settings, FakeBackend("b", RESULTS), provider)

        chunks = await _collect(
            orchestrator, NLWebRequest(query="sci-fi films", mode=QueryMode.GENERATE)
        )

        assert [c.generated_response for c in chunks[1:-1]] == [
            "Both ",
            "Both are ",
            "Both are Villeneuve films.",
        ]
        assert chunks[-1].generated_response == "Both are Villeneuve films."

    @pytest.mark.asyncio
    async def test_provider_failing_mid_stream_still_completes(self, settings):
        provider = FakeProvider(fragments=["Both ", "are"], fail_after=1)
        orchestrator = build(settings, FakeBackend("b", RESULTS), provider)

        chunks = await _collect(
            orchestrator, NLWebRequest(query="sci-fi films", mode=QueryMode.GENERATE)
        )

        assert chunks[-1].is_complete
        assert chunks[-1].generated_response == "Both "
        assert chunks[-1].error is None


class TestStreamErrors:
    @pytest.mark.asyncio
    async def test_invalid_request_single_error(self, settings):
        chunks = await _collect(build(settings, FakeBackend("b")), NLWebRequest(query="   "))

        assert len(chunks) == 1
        assert chunks[0].error == Messages.INVALID_REQUEST
        assert chunks[0].results == []

    @pytest.mark.asyncio
    async def test_failure_yields_only_error(self, settings):
        orchestrator = build(settings, FakeBackend("b", error=RuntimeError("db down")))

        chunks = await _collect(
            orchestrator, NLWebRequest(query="sci-fi films", mode=QueryMode.GENERATE)
        )

        assert len(chunks) == 1
        assert chunks[0].error == Messages.PROCESSING_ERROR
        assert chunks[0].results == []

    @pytest.mark.asyncio
    async def test_timeout_yields_only_error(self, settings):
        orchestrator = build(settings, FakeBackend("b", RESULTS, delay=5))

        chunks = await _collect(
            orchestrator,
            NLWebRequest(query="sci-fi films", mode=QueryMode.SUMMARIZE, timeout_seconds=0.1),
        )

        assert [c.error for c in chunks] == [Messages.TIMEOUT]

    @pytest.mark.asyncio
    async def test_consumer_can_stop_early(self, settings):
        orchestrator = build(settings, FakeBackend("b", RESULTS))
        stream = orchestrator.process_stream(
            NLWebRequest(query="sci-fi films", mode=QueryMode.GENERATE)
        )

        first = await anext(stream)
        await stream.aclose()

        assert first.results == RESULTS
