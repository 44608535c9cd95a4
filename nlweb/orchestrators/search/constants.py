"""Shared typed constants for query routing and response assembly."""

from dataclasses import dataclass
from enum import StrEnum


class ToolType(StrEnum):
    """Specialized handlers a query can be routed to."""

    SEARCH = "search"
    COMPARE = "compare"
    DETAILS = "details"
    ENSEMBLE = "ensemble"
    RECIPE = "recipe"


@dataclass(frozen=True)
class KeywordFamily:
    """Ordered routing rule: any keyword present (substring, case-insensitive) selects tool."""

    tool: ToolType
    keywords: tuple[str, ...]


# First match wins; anything unmatched goes to DEFAULT_TOOL.
ROUTING_FAMILIES: tuple[KeywordFamily, ...] = (
    KeywordFamily(ToolType.SEARCH, ("search", "find", "look for", "locate")),
    KeywordFamily(
        ToolType.COMPARE, ("compare", "difference", "versus", "vs", "contrast")
    ),
    KeywordFamily(
        ToolType.DETAILS,
        ("details", "information about", "tell me about", "describe"),
    ),
    KeywordFamily(
        ToolType.ENSEMBLE,
        ("recommend", "suggest", "what should", "ensemble", "set of"),
    ),
)
DEFAULT_TOOL = ToolType.SEARCH

# Words that mark a follow-up query as depending on an earlier turn.
REFERENCE_PRONOUNS = frozenset(
    {"it", "its", "this", "that", "they", "them", "these", "those"}
)
REFERENCE_WORDS = frozenset({"above", "mentioned", "previous", "earlier", "before"})

SUMMARY_CONTEXT_RESULTS = 5
TEMPLATE_ANSWER_RESULTS = 3
TEMPLATE_SUMMARY_NAMES = 3
STREAM_TARGET_CHUNKS = 10
STREAM_FALLBACK_WORDS = 3


class Messages:
    """User-visible response text."""

    INVALID_REQUEST = "Invalid request. Please check your query and try again."
    PROCESSING_ERROR = (
        "An error occurred while processing your request. Please try again."
    )
    TIMEOUT = "The request timed out. Please try again."
    NO_RESULTS_SUMMARY = "No results found for your query."
    NO_RESULTS_ANSWER = (
        "I couldn't find any relevant information to answer your question."
    )
