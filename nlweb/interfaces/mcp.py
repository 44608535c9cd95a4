"""MCP interface: NLWeb tools and prompts for AI clients, independent of transport.

McpService answers the four protocol calls (list_tools, list_prompts,
call_tool, get_prompt) over an NLWebOrchestrator. Failures come back as
`isError` results or an error prompt message, never as exceptions, so a server
can serialize every answer the same way.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from nlweb.contracts.mcp_v1 import (
    McpCallToolRequest,
    McpCallToolResponse,
    McpContent,
    McpGetPromptRequest,
    McpGetPromptResponse,
    McpListPromptsResponse,
    McpListToolsResponse,
    McpPrompt,
    McpPromptArgument,
    McpPromptMessage,
    McpSearchArguments,
    McpTool,
)
from nlweb.contracts.nlweb_v1 import NLWebRequest, NLWebResponse
from nlweb.core.logger import logger
from nlweb.orchestrators.search.orchestrator import NLWebOrchestrator

SEARCH_TOOL = "nlweb_search"
HISTORY_TOOL = "nlweb_query_history"

_MODE_SCHEMA = {
    "type": "string",
    "enum": ["list", "summarize", "generate"],
    "default": "list",
}

TOOLS = (
    McpTool(
        name=SEARCH_TOOL,
        description=(
            "Search for information using natural language queries with support for "
            "different modes (list, summarize, generate)"
        ),
        input_schema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The natural language query to search for",
                },
                "mode": {
                    **_MODE_SCHEMA,
                    "description": (
                        "Search mode: 'list' for results list, 'summarize' for summarized "
                        "results, 'generate' for AI-generated responses"
                    ),
                },
                "site": {
                    "type": "string",
                    "description": "Optional site filter to restrict search to specific data subset",
                },
                "streaming": {
                    "type": "boolean",
                    "description": "Whether to enable streaming responses",
                    "default": True,
                },
            },
            "required": ["query"],
        },
    ),
    McpTool(
        name=HISTORY_TOOL,
        description="Search using conversation history for contextual queries",
        input_schema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "The current natural language query",
                },
                "previous_queries": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Previous queries in the conversation for context",
                },
                "mode": {**_MODE_SCHEMA, "description": "Search mode"},
            },
            "required": ["query"],
        },
    ),
)

PROMPTS = (
    McpPrompt(
        name="nlweb_search_prompt",
        description="Generate a well-structured search query for NLWeb",
        arguments=[
            McpPromptArgument(
                name="topic",
                description="The main topic or subject to search for",
                required=True,
            ),
            McpPromptArgument(
                name="context",
                description="Additional context or constraints for the search",
            ),
        ],
    ),
    McpPrompt(
        name="nlweb_summarize_prompt",
        description="Create a prompt for summarizing search results",
        arguments=[
            McpPromptArgument(
                name="query", description="The original search query", required=True
            ),
            McpPromptArgument(
                name="result_count", description="Number of results to summarize"
            ),
        ],
    ),
    McpPrompt(
        name="nlweb_generate_prompt",
        description="Create a prompt for generating comprehensive answers from search results",
        arguments=[
            McpPromptArgument(
                name="question",
                description="The question to answer using search results",
                required=True,
            ),
            McpPromptArgument(
                name="style",
                description="Response style (detailed, concise, technical, etc.)",
            ),
        ],
    ),
)


def _arg(arguments: dict[str, Any], name: str, default: str) -> str:
    value = arguments.get(name)
    if value is None:
        return default
    return str(value)


def _message(role: str, text: str) -> McpPromptMessage:
    return McpPromptMessage(role=role, content=McpContent(text=text))


def search_prompt(arguments: dict[str, Any]) -> McpGetPromptResponse:
    topic = _arg(arguments, "topic", "information")
    context = _arg(arguments, "context", "")
    text = f"Search for information about: {topic}"
    if context.strip():
        text += f"\n\nAdditional context: {context}"
    return McpGetPromptResponse(
        description="Structured search prompt for NLWeb",
        messages=[_message("user", text)],
    )


def summarize_prompt(arguments: dict[str, Any]) -> McpGetPromptResponse:
    query = _arg(arguments, "query", "")
    result_count = _arg(arguments, "result_count", "multiple")
    return McpGetPromptResponse(
        description="Prompt for summarizing NLWeb search results",
        messages=[
            _message(
                "system",
                "You are a helpful assistant that summarizes search results clearly and concisely.",
            ),
            _message(
                "user",
                f"Please summarize the {result_count} search results for the query: '{query}'. "
                "Provide a clear, concise summary that captures the key information from all results.",
            ),
        ],
    )


def generate_prompt(arguments: dict[str, Any]) -> McpGetPromptResponse:
    question = _arg(arguments, "question", "")
    style = _arg(arguments, "style", "detailed")
    return McpGetPromptResponse(
        description="Prompt for generating comprehensive answers from search results",
        messages=[
            _message(
                "system",
                f"You are a knowledgeable assistant that provides {style} answers based on "
                "search results. Always cite your sources and be accurate.",
            ),
            _message(
                "user",
                "Based on the search results provided, please answer the following question "
                f"in a {style} manner: {question}",
            ),
        ],
    )


PROMPT_BUILDERS: dict[str, Callable[[dict[str, Any]], McpGetPromptResponse]] = {
    "nlweb_search_prompt": search_prompt,
    "nlweb_summarize_prompt": summarize_prompt,
    "nlweb_generate_prompt": generate_prompt,
}


def format_response(response: NLWebResponse) -> str:
    """Plain-text rendering of a response for a tool result."""
    lines = [
        f"Query ID: {response.query_id}",
        f"Results Count: {len(response.results)}",
        "",
    ]
    if response.error:
        lines += ["Error:", response.error, ""]
    if response.summary and response.summary.strip():
        lines += ["Summary:", response.summary, ""]
    if response.generated_response and response.generated_response.strip():
        lines += ["Answer:", response.generated_response, ""]
    if response.results:
        lines.append("Results:")
        for i, r in enumerate(response.results, start=1):
            lines.append(f"{i}. {r.name}")
            lines.append(f"   URL: {r.url}")
            lines.append(f"   Score: {r.score:.2f}")
            if r.description.strip():
                lines.append(f"   Description: {r.description}")
            lines.append("")
    return "\n".join(lines)


class McpService:
    def __init__(self, orchestrator: NLWebOrchestrator):
        self._orchestrator = orchestrator

    async def list_tools(self) -> McpListToolsResponse:
        logger.debug("Listing MCP tools")
        return McpListToolsResponse(tools=[t.model_copy(deep=True) for t in TOOLS])

    async def list_prompts(self) -> McpListPromptsResponse:
        logger.debug("Listing MCP prompts")
        return McpListPromptsResponse(prompts=[p.model_copy(deep=True) for p in PROMPTS])

    async def call_tool(self, request: McpCallToolRequest) -> McpCallToolResponse:
        logger.debug(f"Calling MCP tool: {request.name}")
        try:
            if request.name == SEARCH_TOOL:
                return await self._search(request.arguments, with_history=False)
            if request.name == HISTORY_TOOL:
                return await self._search(request.arguments, with_history=True)
        except Exception as e:
            logger.error(f"MCP tool {request.name} failed", e)
            return McpCallToolResponse.from_text(f"Error executing tool: {e}", is_error=True)
        logger.warning(f"Unknown MCP tool requested: {request.name}")
        return McpCallToolResponse.from_text(f"Unknown tool: {request.name}", is_error=True)

    async def get_prompt(self, request: McpGetPromptRequest) -> McpGetPromptResponse:
        logger.debug(f"Getting MCP prompt: {request.name}")
        builder = PROMPT_BUILDERS.get(request.name)
        if builder is None:
            logger.warning(f"Unknown MCP prompt requested: {request.name}")
            return McpGetPromptResponse(
                description=f"Unknown prompt: {request.name}",
                messages=[_message("system", f"Error: Unknown prompt '{request.name}'")],
            )
        return builder(request.arguments)

    async def process_query(self, request: NLWebRequest) -> NLWebResponse:
        return await self._orchestrator.process(request)

    async def _search(self, arguments: dict[str, Any], with_history: bool) -> McpCallToolResponse:
        args = McpSearchArguments.model_validate(arguments)
        if not args.query.strip():
            return McpCallToolResponse.from_text("Query parameter is required", is_error=True)
        if with_history:
            request = NLWebRequest(query=args.query, mode=args.mode, prev=args.previous_queries)
            response = await self._orchestrator.process(request)
        else:
            request = NLWebRequest(query=args.query, mode=args.mode, site=args.site)
            response = await self._run(request, streaming=args.streaming)
        return McpCallToolResponse.from_text(format_response(response), is_error=not response.ok)

    async def _run(self, request: NLWebRequest, streaming: bool) -> NLWebResponse:
        if not streaming:
            return await self._orchestrator.process(request)
        chunks = [chunk async for chunk in self._orchestrator.process_stream(request)]
        return chunks[-1]
