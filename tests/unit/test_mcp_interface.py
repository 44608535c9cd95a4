"""MCP surface: tool and prompt discovery, tool calls over the orchestrator, prompts."""

import pytest

from nlweb.contracts.mcp_v1 import (
    McpCallToolRequest,
    McpGetPromptRequest,
    McpSearchArguments,
)
from nlweb.contracts.nlweb_v1 import NLWebRequest, QueryMode
from nlweb.interfaces.mcp import McpService
from nlweb.orchestrators.search.generator import template_summary
from tests.factories import FakeBackend, build_orchestrator, make_result

RESULTS = [
    make_result("https://x.test/dune", 9, name="Dune", description="Desert planet."),
    make_result("https://x.test/br", 7, name="Blade Runner 2049"),
]


@pytest.fixture
def untooled(settings):
    return settings.model_copy(update={"tool_selection_enabled": False})


def _service(settings, backend) -> McpService:
    return McpService(build_orchestrator(settings, backend))


def _call(name, **arguments) -> McpCallToolRequest:
    return McpCallToolRequest(name=name, arguments=arguments)


class _BrokenOrchestrator:
    async def process(self, request):
        raise RuntimeError("engine down")


class TestDiscovery:
    @pytest.mark.asyncio
    async def test_list_tools(self, untooled):
        listed = await _service(untooled, FakeBackend("b")).list_tools()

        assert [t.name for t in listed.tools] == ["nlweb_search", "nlweb_query_history"]
        search, history = listed.tools
        assert search.input_schema["required"] == ["query"]
        assert search.input_schema["properties"]["mode"]["enum"] == [
            "list",
            "summarize",
            "generate",
        ]
        assert history.input_schema["properties"]["previous_queries"]["type"] == "array"
        assert "inputSchema" in listed.model_dump(by_alias=True)["tools"][0]

    @pytest.mark.asyncio
    async def test_list_prompts(self, untooled):
        listed = await _service(untooled, FakeBackend("b")).list_prompts()

        required = {
            p.name: [a.name for a in p.arguments if a.required] for p in listed.prompts
        }
        assert required == {
            "nlweb_search_prompt": ["topic"],
            "nlweb_summarize_prompt": ["query"],
            "nlweb_generate_prompt": ["question"],
        }

    @pytest.mark.asyncio
    async def test_listings_are_copies(self, untooled):
        service = _service(untooled, FakeBackend("b"))

        first = await service.list_tools()
        first.tools[0].input_schema["required"].append("mode")

        second = await service.list_tools()
        assert second.tools[0].input_schema["required"] == ["query"]


class TestSearchTool:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("streaming", [True, False])
    async def test_list_mode_formats_results(self, untooled, streaming):
        backend = FakeBackend("b", RESULTS)

        response = await _service(untooled, backend).call_tool(
            _call("nlweb_search", query="sci-fi films", streaming=streaming)
        )

        assert response.is_error is False
        text = response.content[0].text
        assert response.content[0].type == "text"
        assert text.startswith("Query ID: ")
        assert "Results Count: 2" in text
        assert "1. Dune\n   URL: https://x.test/dune\n   Score: 9.00\n   Description: Desert planet." in text
        assert "2. Blade Runner 2049\n   URL: https://x.test/br\n   Score: 7.00\n" in text
        assert "Description: \n" not in text

    @pytest.mark.asyncio
    async def test_summarize_mode_includes_summary(self, untooled):
        response = await _service(untooled, FakeBackend("b", RESULTS)).call_tool(
            _call("nlweb_search", query="sci-fi films", mode="Summarize")
        )

        expected = template_summary("sci-fi films", RESULTS)
        assert f"Summary:\n{expected}\n" in response.content[0].text

    @pytest.mark.asyncio
    async def test_site_is_forwarded(self, untooled):
        backend = FakeBackend("b", RESULTS)

        await _service(untooled, backend).call_tool(
            _call("nlweb_search", query="dune", site="x.test", streaming=False)
        )

        assert backend.calls[0][:2] == ("dune", "x.test")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   ", None])
    async def test_blank_query_is_error(self, untooled, query):
        backend = FakeBackend("b", RESULTS)

        response = await _service(untooled, backend).call_tool(_call("nlweb_search", query=query))

        assert response.is_error is True
        assert response.content[0].text == "Query parameter is required"
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_error_response_marks_result_as_error(self, untooled):
        response = await _service(untooled, FakeBackend("b", RESULTS)).call_tool(
            _call("nlweb_search", query="x" * 1001)
        )

        assert response.is_error is True
        assert "Error:\n" in response.content[0].text
        assert "Results Count: 0" in response.content[0].text

    @pytest.mark.asyncio
    async def test_orchestrator_failure_becomes_error_result(self):
        service = McpService(_BrokenOrchestrator())

        response = await service.call_tool(_call("nlweb_search", query="dune", streaming=False))

        assert response.is_error is True
        assert response.content[0].text == "Error executing tool: engine down"

    @pytest.mark.asyncio
    async def test_unknown_tool(self, untooled):
        response = await _service(untooled, FakeBackend("b")).call_tool(_call("nlweb_delete"))

        assert response.is_error is True
        assert response.content[0].text == "Unknown tool: nlweb_delete"


class TestQueryHistoryTool:
    @pytest.mark.asyncio
    async def test_history_decontextualizes_follow_up(self, untooled):
        backend = FakeBackend("b", RESULTS)

        response = await _service(untooled, backend).call_tool(
            _call(
                "nlweb_query_history",
                query="what is its runtime",
                previous_queries=["blade runner", " ", "dune"],
            )
        )

        assert response.is_error is False
        assert backend.calls[0][0] == "dune. what is its runtime"

    @pytest.mark.asyncio
    async def test_history_optional(self, untooled):
        backend = FakeBackend("b", RESULTS)

        await _service(untooled, backend).call_tool(
            _call("nlweb_query_history", query="dune films")
        )

        assert backend.calls[0][0] == "dune films"


class TestPrompts:
    @pytest.mark.asyncio
    async def test_search_prompt_with_context(self, untooled):
        prompt = await _service(untooled, FakeBackend("b")).get_prompt(
            McpGetPromptRequest(
                name="nlweb_search_prompt",
                arguments={"topic": "dune", "context": "1965 novel"},
            )
        )

        assert prompt.description == "Structured search prompt for NLWeb"
        assert [m.role for m in prompt.messages] == ["user"]
        assert prompt.messages[0].content.text == (
            "Search for information about: dune\n\nAdditional context: 1965 novel"
        )

    @pytest.mark.asyncio
    async def test_search_prompt_defaults(self, untooled):
        prompt = await _service(untooled, FakeBackend("b")).get_prompt(
            McpGetPromptRequest(name="nlweb_search_prompt", arguments=None)
        )
        assert prompt.messages[0].content.text == "Search for information about: information"

    @pytest.mark.asyncio
    async def test_summarize_prompt(self, untooled):
        prompt = await _service(untooled, FakeBackend("b")).get_prompt(
            McpGetPromptRequest(name="nlweb_summarize_prompt", arguments={"query": "dune"})
        )

        system, user = prompt.messages
        assert system.role == "system"
        assert user.content.text.startswith(
            "Please summarize the multiple search results for the query: 'dune'. "
        )

    @pytest.mark.asyncio
    async def test_generate_prompt_style(self, untooled):
        prompt = await _service(untooled, FakeBackend("b")).get_prompt(
            McpGetPromptRequest(
                name="nlweb_generate_prompt",
                arguments={"question": "who wrote dune", "style": "concise"},
            )
        )

        system, user = prompt.messages
        assert "provides concise answers" in system.content.text
        assert user.content.text.endswith("in a concise manner: who wrote dune")

    @pytest.mark.asyncio
    async def test_unknown_prompt(self, untooled):
        prompt = await _service(untooled, FakeBackend("b")).get_prompt(
            McpGetPromptRequest(name="nope")
        )

        assert prompt.description == "Unknown prompt: nope"
        assert prompt.messages[0].role == "system"
        assert prompt.messages[0].content.text == "Error: Unknown prompt 'nope'"


class TestSearchArguments:
    @pytest.mark.parametrize(
        ("mode", "expected"),
        [
            ("generate", QueryMode.GENERATE),
            ("SUMMARIZE", QueryMode.SUMMARIZE),
            ("bogus", QueryMode.LIST),
            (None, QueryMode.LIST),
        ],
    )
    def test_mode_is_lenient(self, mode, expected):
        assert McpSearchArguments.model_validate({"query": "q", "mode": mode}).mode == expected

    def test_defaults_and_cleanup(self):
        args = McpSearchArguments.model_validate(
            {"query": "q", "site": "  ", "previous_queries": [None, " a ", ""], "extra": 1}
        )
        assert args.site is None
        assert args.streaming is True
        assert args.previous_queries == ["a"]


@pytest.mark.asyncio
async def test_process_query_delegates(untooled):
    service = _service(untooled, FakeBackend("b", RESULTS))

    response = await service.process_query(NLWebRequest(query="dune"))

    assert response.results == RESULTS
