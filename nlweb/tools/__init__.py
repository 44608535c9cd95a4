from nlweb.tools.base import ToolHandler
from nlweb.tools.compare import CompareToolHandler
from nlweb.tools.details import DetailsToolHandler
from nlweb.tools.ensemble import EnsembleToolHandler
from nlweb.tools.recipe import RecipeToolHandler
from nlweb.tools.search import SearchToolHandler

__all__ = [
    "ToolHandler",
    "SearchToolHandler",
    "DetailsToolHandler",
    "CompareToolHandler",
    "EnsembleToolHandler",
    "RecipeToolHandler",
    "default_handlers",
]


def default_handlers(search, query_processor=None, max_results: int = 50) -> list[ToolHandler]:
    """The built-in handlers, in registration order."""
    return [
        cls(search, query_processor, max_results)
        for cls in (
            SearchToolHandler,
            DetailsToolHandler,
            CompareToolHandler,
            EnsembleToolHandler,
            RecipeToolHandler,
        )
    ]
