from nlweb.orchestrators.search.backends.mock import MockDataBackend
from nlweb.orchestrators.search.backends.web import WebSearchBackend

__all__ = [
    "MockDataBackend",
    "WebSearchBackend",
]
