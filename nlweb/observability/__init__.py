"""Observability: LangSmith tracing (optional, env-controlled)."""

from nlweb.observability.langsmith import (
    flush,
    get_client,
    trace,
    traceable,
)

__all__ = ["trace", "traceable", "flush", "get_client"]
