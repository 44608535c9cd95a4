"""Structured logging: console lines plus an optional JSONL event file."""

import contextvars
import json
import logging
import os
import sys
import threading
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any


def _format_duration(seconds: float) -> str:
    if seconds < 0:
        return "0s"
    if seconds >= 60:
        m = int(seconds // 60)
        s = seconds % 60
        return f"{m}m {s:.0f}s"
    if seconds >= 1:
        return f"{seconds:.1f}s"
    if seconds > 0:
        return f"{seconds * 1000:.0f}ms"
    return "0s"


def _short(text: str | None, max_len: int = 80) -> str:
    if not text or not text.strip():
        return ""
    s = text.strip().replace("\n", " ")
    return s[:max_len] + "..." if len(s) > max_len else s


_query_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "nlweb_query_id", default=None
)
_request_start: contextvars.ContextVar[float | None] = contextvars.ContextVar(
    "nlweb_request_start", default=None
)


def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return sys.stdout.isatty()
    except Exception:
        return False


def _c(role: str) -> str:
    if not _use_color():
        return ""
    codes = {
        "dim": "\033[38;5;239m",
        "tool": "\033[38;5;81m",
        "ok": "\033[38;5;78m",
        "fail": "\033[38;5;203m",
        "duration": "\033[38;5;221m",
    }
    return codes.get(role, "")


def _reset() -> str:
    if not _use_color():
        return ""
    return "\033[0m"


@dataclass
class LogEvent:
    event_type: str
    timestamp: str
    query_id: str | None
    data: dict[str, Any]

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class NLWebLogger:
    def __init__(self, log_file: Path | None = None, level: str = "INFO"):
        self._file_lock = threading.Lock()
        self._log_file_handle = None
        self._setup_console_logger(level)
        if log_file is not None:
            self.set_log_file(log_file)

    def _setup_console_logger(self, level: str):
        self.console = logging.getLogger("nlweb")
        self.console.setLevel(logging.DEBUG)
        self._console_formatter = logging.Formatter(
            "%(asctime)s │ %(message)s", datefmt="%H:%M:%S"
        )
        if not self.console.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(self._console_formatter)
            self.console.addHandler(handler)
        self.console.propagate = False
        self.set_level(level)

    def set_level(self, level: str) -> None:
        for handler in self.console.handlers:
            handler.setLevel(getattr(logging, level.upper(), logging.INFO))

    def set_log_file(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._file_lock:
            if self._log_file_handle is not None:
                self._log_file_handle.close()
            self._log_file_handle = open(path, "a", encoding="utf-8")

    def configure(self, level: str = "INFO", log_file: Path | None = None) -> None:
        self.set_level(level)
        if log_file is not None:
            self.set_log_file(log_file)

    def close(self) -> None:
        with self._file_lock:
            if self._log_file_handle is not None:
                self._log_file_handle.close()
                self._log_file_handle = None

    def log_event(self, event: LogEvent) -> None:
        if self._log_file_handle is None:
            return
        with self._file_lock:
            self._log_file_handle.write(event.to_json() + "\n")
            self._log_file_handle.flush()

    def _event(self, event_type: str, **data: Any) -> None:
        self.log_event(
            LogEvent(
                event_type=event_type,
                timestamp=datetime.now().isoformat(),
                query_id=_query_id.get(),
                data=data,
            )
        )

    def _prefix(self) -> str:
        qid = _query_id.get()
        return f"{_c('dim')}[{qid}]{_reset()} " if qid else ""

    # -- request context ---------------------------------------------------

    def bind_query(self, query_id: str) -> contextvars.Token:
        _request_start.set(time.monotonic())
        return _query_id.set(query_id)

    def unbind_query(self, token: contextvars.Token) -> None:
        _query_id.reset(token)
        _request_start.set(None)

    def current_query_id(self) -> str | None:
        return _query_id.get()

    # -- domain events -----------------------------------------------------

    def request_received(self, query: str, mode: str, streaming: bool = False):
        self._event(
            "REQUEST_RECEIVED", query=query[:500], mode=mode, streaming=streaming
        )
        kind = "stream" if streaming else "query"
        self.console.info(f"{self._prefix()}{kind} [{mode}]: {_short(query, 100)}")

    def tool_routed(self, tool: str, result_count: int):
        self._event("TOOL_ROUTED", tool=tool, result_count=result_count)
        self.console.info(
            f"{self._prefix()}{_c('tool')}▶ tool{_reset()} {tool}: {result_count} results"
        )

    def tool_fallback(self, tool: str, reason: str):
        self._event("TOOL_FALLBACK", tool=tool, reason=reason[:500])
        self.console.warning(
            f"{self._prefix()}{_c('fail')}tool {tool} failed{_reset()}, "
            f"falling back to standard pipeline: {_short(reason)}"
        )

    def search_completed(self, query: str, result_count: int, duration_seconds: float):
        self._event(
            "SEARCH_COMPLETED",
            query=query[:500],
            result_count=result_count,
            duration_seconds=round(duration_seconds, 3),
        )
        dur = f"{_c('duration')}{_format_duration(duration_seconds)}{_reset()}"
        self.console.info(
            f"{self._prefix()}search: {result_count} results in {dur}  ({_short(query, 60)})"
        )

    def response_sent(self, result_count: int, error: str | None = None):
        start = _request_start.get()
        elapsed = (time.monotonic() - start) if start is not None else 0.0
        self._event(
            "RESPONSE_SENT",
            result_count=result_count,
            error=error,
            duration_seconds=round(elapsed, 3),
        )
        dur = f"{_c('duration')}{_format_duration(elapsed)}{_reset()}"
        if error:
            status = f"{_c('fail')}[failed]{_reset()} {_short(error)}"
        else:
            status = f"{_c('ok')}[ok]{_reset()}"
        self.console.info(
            f"{self._prefix()}✓ done  {result_count} results  total {dur}  {status}"
        )

    # -- plain levels ------------------------------------------------------

    def info(self, message: str):
        self.console.info(f"{self._prefix()}{message}")

    def debug(self, message: str):
        self.console.debug(f"{self._prefix()}{message}")

    def warning(self, message: str):
        self._event("WARNING", message=message[:500])
        self.console.warning(f"{self._prefix()}⚠ {message}")

    def error(self, message: str, exception: Exception | None = None):
        data: dict[str, Any] = {"message": message[:500]}
        if exception is not None:
            data["exception"] = f"{type(exception).__name__}: {exception}"
        self._event("ERROR", **data)
        suffix = f": {exception}" if exception is not None else ""
        self.console.error(f"{self._prefix()}✗ {message}{suffix}")

    def exception(self, message: str):
        self._event("ERROR", message=message[:500])
        self.console.exception(f"{self._prefix()}✗ {message}")


logger = NLWebLogger()
