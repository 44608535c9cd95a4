"""Deterministic tool routing by ordered keyword families.

No model calls and no I/O: the same request always selects the same tool.
"""

import logging

from nlweb.contracts.nlweb_v1 import NLWebRequest, QueryMode
from nlweb.core.config import NLWebSettings
from nlweb.orchestrators.search.constants import (
    DEFAULT_TOOL,
    ROUTING_FAMILIES,
    KeywordFamily,
    ToolType,
)

logger = logging.getLogger(__name__)


def classify_query(
    query: str, families: tuple[KeywordFamily, ...] = ROUTING_FAMILIES
) -> ToolType:
    """First family with a keyword contained in the query wins."""
    q = query.lower()
    for family in families:
        if any(keyword in q for keyword in family.keywords):
            return family.tool
    return DEFAULT_TOOL


class ToolSelector:
    def __init__(
        self,
        settings: NLWebSettings,
        families: tuple[KeywordFamily, ...] = ROUTING_FAMILIES,
    ):
        self._settings = settings
        self._families = families

    def should_route(self, request: NLWebRequest) -> bool:
        if not self._settings.tool_selection_enabled:
            return False
        # Generate mode keeps direct generation; a precomputed query was already routed.
        if request.mode == QueryMode.GENERATE:
            return False
        if request.decontextualized_query:
            return False
        return True

    def select_tool(self, request: NLWebRequest) -> ToolType | None:
        if not self.should_route(request):
            return None
        tool = classify_query(request.query, self._families)
        logger.debug("Selected tool %s for %r", tool, request.query)
        return tool
