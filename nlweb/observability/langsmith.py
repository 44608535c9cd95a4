"""LangSmith tracing for the query pipeline.

Tracing is off unless LANGSMITH_TRACING=true. When off, `trace` yields a run
whose `end()` does nothing and `traceable` returns the function unchanged, so
call sites never branch on whether tracing is configured.
"""

from __future__ import annotations

import atexit
import os
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Literal, cast

if TYPE_CHECKING:
    from langsmith import Client as LangSmithClient

RunType = Literal["tool", "chain", "llm", "retriever", "embedding", "prompt", "parser"]

_ENABLED = os.getenv("LANGSMITH_TRACING", "").strip().lower() == "true"
_PROJECT = os.getenv("LANGSMITH_PROJECT", "nlweb")


class _NoOpRun:
    def end(self, outputs: dict[str, Any] | None = None, **kwargs: Any) -> None:
        pass


class _NoOpTrace:
    def __enter__(self) -> _NoOpRun:
        return _NoOpRun()

    def __exit__(self, *args: Any) -> None:
        pass

    async def __aenter__(self) -> _NoOpRun:
        return _NoOpRun()

    async def __aexit__(self, *args: Any) -> None:
        pass


def is_enabled() -> bool:
    return _ENABLED


def trace(
    name: str,
    run_type: str = "chain",
    *,
    inputs: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
    **kwargs: Any,
):
    """Context manager (sync or async) around one traced run."""
    if not _ENABLED:
        return _NoOpTrace()
    from langsmith.run_helpers import trace as ls_trace

    return ls_trace(
        name,
        run_type=cast("RunType", run_type),
        inputs=inputs or {},
        metadata=metadata or {},
        project_name=kwargs.pop("project_name", None) or _PROJECT,
        **kwargs,
    )


def traceable(
    name: str | None = None,
    run_type: str = "chain",
    **kwargs: Any,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    if not _ENABLED:

        def passthrough(fn: Callable[..., Any]) -> Callable[..., Any]:
            return fn

        return passthrough
    from langsmith import traceable as ls_traceable

    return ls_traceable(  # type: ignore[call-overload]
        name=name,
        run_type=run_type,
        project_name=kwargs.pop("project_name", None) or _PROJECT,
        **kwargs,
    )


_client: LangSmithClient | None = None


def get_client() -> LangSmithClient | None:
    global _client
    if not _ENABLED:
        return None
    if _client is None:
        from langsmith import Client

        _client = Client()
    return _client


def flush() -> None:
    client = get_client()
    if client is not None:
        client.flush()


if _ENABLED:
    atexit.register(flush)
