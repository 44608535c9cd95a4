"""MCP Contract v1.

Defines the Model Context Protocol types NLWeb exposes to AI clients:
  - Tool discovery and invocation (McpTool, McpCallToolRequest, McpCallToolResponse)
  - Prompt discovery and rendering (McpPrompt, McpGetPromptRequest, McpGetPromptResponse)
  - Tool argument parsing (McpSearchArguments)

These are transport-independent: an HTTP or stdio server serializes them with
model_dump(by_alias=True), which yields the protocol's camelCase keys
(inputSchema, isError).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from nlweb.contracts.nlweb_v1 import QueryMode


class _McpModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


class McpContent(_McpModel):
    type: str = "text"
    text: str | None = None


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class McpTool(_McpModel):
    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(
        default_factory=dict, description="JSON Schema of the tool arguments"
    )


class McpListToolsResponse(_McpModel):
    tools: list[McpTool] = Field(default_factory=list)


class McpCallToolRequest(_McpModel):
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def _none_arguments(cls, value: Any) -> Any:
        return {} if value is None else value


class McpCallToolResponse(_McpModel):
    content: list[McpContent] = Field(default_factory=list)
    is_error: bool = False

    @classmethod
    def from_text(cls, text: str, is_error: bool = False) -> McpCallToolResponse:
        return cls(content=[McpContent(text=text)], is_error=is_error)


class McpSearchArguments(BaseModel):
    """Arguments accepted by the nlweb_search and nlweb_query_history tools.

    Lenient like the protocol's clients: an unknown mode falls back to list,
    blank history entries are dropped, and unknown keys are ignored.
    """

    query: str = ""
    mode: QueryMode = QueryMode.LIST
    site: str | None = None
    streaming: bool = True
    previous_queries: list[str] = Field(default_factory=list)

    @field_validator("query", mode="before")
    @classmethod
    def _stringify_query(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("mode", mode="before")
    @classmethod
    def _lenient_mode(cls, value: Any) -> QueryMode:
        try:
            return QueryMode(str(value).strip().lower())
        except ValueError:
            return QueryMode.LIST

    @field_validator("site", mode="before")
    @classmethod
    def _blank_site(cls, value: Any) -> str | None:
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    @field_validator("previous_queries", mode="before")
    @classmethod
    def _clean_history(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [str(item).strip() for item in value if item is not None and str(item).strip()]


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------


class McpPromptArgument(_McpModel):
    name: str
    description: str = ""
    required: bool = False


class McpPrompt(_McpModel):
    name: str
    description: str = ""
    arguments: list[McpPromptArgument] = Field(default_factory=list)


class McpListPromptsResponse(_McpModel):
    prompts: list[McpPrompt] = Field(default_factory=list)


class McpGetPromptRequest(_McpModel):
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)

    @field_validator("arguments", mode="before")
    @classmethod
    def _none_arguments(cls, value: Any) -> Any:
        return {} if value is None else value


class McpPromptMessage(_McpModel):
    role: str = "user"
    content: McpContent = Field(default_factory=McpContent)


class McpGetPromptResponse(_McpModel):
    description: str = ""
    messages: list[McpPromptMessage] = Field(default_factory=list)
