"""NLWeb Contract v1.

Defines the canonical types for:
  - Query requests (NLWebRequest, QueryMode)
  - Result payloads (NLWebResult, NLWebResponse)
  - Backend and tool discovery (BackendCapabilities, BackendInfo, ToolDescriptor)

Responses serialize with camelCase aliases (queryId, processingTimeMs, ...) so the
transport layer can hand model_dump(by_alias=True) straight to clients.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_QUERY_LENGTH = 1000

# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


class QueryMode(StrEnum):
    """Shape of the response."""

    LIST = "list"  # Raw ranked results
    SUMMARIZE = "summarize"  # Short synthesis plus results
    GENERATE = "generate"  # Full generated answer plus results


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class NLWebRequest(_CamelModel):
    """One natural-language query.

    The query text is not length-checked here: QueryProcessor.validate owns that
    decision so an over-long or blank query becomes an error response instead of a
    construction failure.
    """

    query: str = Field(default="", description="Free-text query")
    mode: QueryMode = Field(default=QueryMode.LIST)
    site: str | None = Field(default=None, description="Optional scope filter")
    max_results: int | None = Field(default=None, ge=1)
    prev: list[str] = Field(
        default_factory=list,
        description="Earlier queries in this conversation, oldest first",
    )
    decontextualized_query: str | None = Field(
        default=None,
        description="Query already resolved against prior turns upstream",
    )
    query_id: str | None = Field(default=None)
    timeout_seconds: float | None = Field(default=None, gt=0)

    @field_validator("prev", mode="before")
    @classmethod
    def _split_prev(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [str(item).strip() for item in value if str(item).strip()]

    @field_validator("query", mode="before")
    @classmethod
    def _none_query(cls, value: Any) -> Any:
        return "" if value is None else value


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class NLWebResult(_CamelModel):
    """A scored candidate. `url` is the identity used for deduplication."""

    url: str
    name: str = ""
    site: str = ""
    score: float = Field(default=0.0, allow_inf_nan=False)
    description: str = ""
    schema_object: dict[str, Any] | None = Field(
        default=None, description="Opaque structured payload"
    )


class NLWebResponse(_CamelModel):
    query_id: str = ""
    query: str = ""
    mode: QueryMode = Field(default=QueryMode.LIST)
    results: list[NLWebResult] = Field(default_factory=list)
    summary: str | None = None
    generated_response: str | None = None
    error: str | None = None
    processed_query: str | None = Field(
        default=None, description="Query the backends were actually searched with"
    )
    total_results: int | None = Field(default=None, ge=0)
    processing_time_ms: float = 0.0
    is_streaming: bool = False
    is_complete: bool = True

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_wire(self) -> dict[str, Any]:
        """camelCase dict without the unset optional fields."""
        data = self.model_dump(by_alias=True, mode="json")
        for key in (
            "summary",
            "generatedResponse",
            "error",
            "processedQuery",
            "totalResults",
        ):
            if data.get(key) is None:
                data.pop(key, None)
        for result in data["results"]:
            if result.get("schemaObject") is None:
                result.pop("schemaObject", None)
        return data


# ---------------------------------------------------------------------------
# Backend and tool discovery
# ---------------------------------------------------------------------------


class BackendCapabilities(_CamelModel):
    supports_site_filtering: bool = False
    supports_full_text_search: bool = True
    supports_semantic_search: bool = False
    max_results: int = Field(default=50, ge=1)
    description: str = ""


class BackendInfo(_CamelModel):
    """Descriptor for one configured backend."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str
    enabled: bool = True
    capabilities: BackendCapabilities = Field(default_factory=BackendCapabilities)
    priority: int = 0
    is_write_endpoint: bool = False


class ToolDescriptor(_CamelModel):
    name: str
    tool_type: str
    description: str = ""
    keywords: list[str] = Field(default_factory=list)
    priority: int = 50
