"""NLWeb contracts v1: request, result, response and discovery types, plus the MCP surface."""

from nlweb.contracts.mcp_v1 import (
    McpCallToolRequest,
    McpCallToolResponse,
    McpGetPromptRequest,
    McpGetPromptResponse,
    McpListPromptsResponse,
    McpListToolsResponse,
)
from nlweb.contracts.nlweb_v1 import (
    MAX_QUERY_LENGTH,
    BackendCapabilities,
    BackendInfo,
    NLWebRequest,
    NLWebResponse,
    NLWebResult,
    QueryMode,
    ToolDescriptor,
)

__all__ = [
    "MAX_QUERY_LENGTH",
    "BackendCapabilities",
    "BackendInfo",
    "McpCallToolRequest",
    "McpCallToolResponse",
    "McpGetPromptRequest",
    "McpGetPromptResponse",
    "McpListPromptsResponse",
    "McpListToolsResponse",
    "NLWebRequest",
    "NLWebResponse",
    "NLWebResult",
    "QueryMode",
    "ToolDescriptor",
]
