"""Tool dispatcher: picks the best registered handler for a selected tool and runs it.

Registration is a flat list fixed at startup. Among handlers of the requested
tool type that can handle the request, the highest priority wins; ties go to
the handler registered first.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from nlweb.contracts.nlweb_v1 import NLWebRequest, NLWebResponse, ToolDescriptor
from nlweb.orchestrators.search.constants import ToolType
from nlweb.orchestrators.search.errors import NoHandlerError

if TYPE_CHECKING:
    from nlweb.tools.base import ToolHandler

logger = logging.getLogger(__name__)


class ToolExecutor:
    def __init__(self, handlers: Iterable[ToolHandler]):
        self._handlers: list[ToolHandler] = list(handlers)
        logger.info(
            "ToolExecutor: registered %s",
            [f"{h.tool_type}:{h.name}" for h in self._handlers],
        )

    def select_handler(self, request: NLWebRequest, tool: ToolType | str) -> ToolHandler:
        best: ToolHandler | None = None
        best_priority = 0
        for handler in self._handlers:
            if handler.tool_type != tool or not handler.can_handle(request):
                continue
            priority = handler.priority(request)
            if best is None or priority > best_priority:
                best, best_priority = handler, priority
        if best is None:
            raise NoHandlerError(str(tool))
        logger.debug("Tool %s -> %s (priority %s)", tool, best.name, best_priority)
        return best

    async def execute(self, request: NLWebRequest, tool: ToolType | str) -> NLWebResponse:
        """Run the selected handler. NoHandlerError and handler exceptions propagate."""
        handler = self.select_handler(request, tool)
        return await handler.execute(request)

    def get_handler(self, tool: ToolType | str) -> ToolHandler | None:
        for handler in self._handlers:
            if handler.tool_type == tool:
                return handler
        return None

    def list_tools(self) -> list[ToolDescriptor]:
        return [h.descriptor() for h in self._handlers]
