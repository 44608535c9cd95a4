"""Error taxonomy for the query engine.

Only NoHandlerError is meant to escape the orchestrator: it signals a tool
registration defect rather than a runtime failure.
"""


class NLWebError(Exception):
    """Base class for engine errors."""


class NoHandlerError(NLWebError):
    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"No handler registered that can handle tool '{tool}'")


class BackendError(NLWebError):
    def __init__(self, backend_id: str, message: str):
        self.backend_id = backend_id
        super().__init__(f"{backend_id}: {message}")


class ToolExecutionError(NLWebError):
    """A tool could not produce a response; the message is shown to the caller."""

    def __init__(self, tool: str, message: str):
        self.tool = tool
        super().__init__(message)


class GenerationError(NLWebError):
    """Completion provider failure; always recovered with a template."""
