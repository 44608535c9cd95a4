"""Configuration from environment variables (.env)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from nlweb.contracts.nlweb_v1 import QueryMode


class MultiBackendSettings(BaseModel):
    """Fan-out behaviour of the backend manager."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    parallel_querying_enabled: bool = True
    deduplication_enabled: bool = True
    max_concurrent_queries: int = Field(default=5, ge=1, le=10)
    backend_timeout_seconds: float = Field(default=30.0, ge=1, le=120)
    write_endpoint: str | None = None


class NLWebSettings(BaseModel):
    """Immutable engine settings; built once and passed into each component."""

    model_config = ConfigDict(frozen=True)

    tool_selection_enabled: bool = False
    max_results_per_query: int = Field(default=50, ge=1, le=1000)
    default_mode: QueryMode = QueryMode.LIST
    default_timeout_seconds: float = Field(default=30.0, ge=1, le=300)
    stream_chunk_delay_seconds: float = Field(default=0.05, ge=0)
    stream_fallback_delay_seconds: float = Field(default=0.1, ge=0)
    multi_backend: MultiBackendSettings = Field(default_factory=MultiBackendSettings)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str = "") -> list[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


@dataclass
class Config:
    project_root: Path
    prompts_dir: Path
    settings: NLWebSettings
    backends: list[str]  # Backend ids to build, in priority order: mock, web
    searxng_url: str
    llm_provider: str  # none | vllm | openrouter
    vllm_url: str
    vllm_model: str
    openrouter_api_key: str
    openrouter_models: list[str]  # Model IDs to try in order (fallback on 5xx/429)
    log_level: str
    log_file: Path | None

    @classmethod
    def load(cls) -> "Config":
        load_dotenv()
        package_root = Path(__file__).parent.parent
        multi = MultiBackendSettings(
            enabled=_env_bool("NLWEB_MULTI_BACKEND_ENABLED", True),
            parallel_querying_enabled=_env_bool("NLWEB_PARALLEL_QUERYING", True),
            deduplication_enabled=_env_bool("NLWEB_DEDUPLICATION", True),
            max_concurrent_queries=int(os.getenv("NLWEB_MAX_CONCURRENT_QUERIES", "5")),
            backend_timeout_seconds=float(
                os.getenv("NLWEB_BACKEND_TIMEOUT_SECONDS", "30")
            ),
            write_endpoint=os.getenv("NLWEB_WRITE_ENDPOINT") or None,
        )
        settings = NLWebSettings(
            tool_selection_enabled=_env_bool("NLWEB_TOOL_SELECTION_ENABLED", False),
            max_results_per_query=int(os.getenv("NLWEB_MAX_RESULTS_PER_QUERY", "50")),
            default_mode=QueryMode(os.getenv("NLWEB_DEFAULT_MODE", "list").lower()),
            default_timeout_seconds=float(
                os.getenv("NLWEB_DEFAULT_TIMEOUT_SECONDS", "30")
            ),
            stream_chunk_delay_seconds=float(
                os.getenv("NLWEB_STREAM_CHUNK_DELAY", "0.05")
            ),
            stream_fallback_delay_seconds=float(
                os.getenv("NLWEB_STREAM_FALLBACK_DELAY", "0.1")
            ),
            multi_backend=multi,
        )
        log_file = os.getenv("NLWEB_LOG_FILE", "").strip()
        return cls(
            project_root=package_root.parent,
            prompts_dir=package_root / "prompts",
            settings=settings,
            backends=_env_list("NLWEB_BACKENDS", "mock"),
            searxng_url=os.getenv("SEARXNG_URL", "http://localhost:8080"),
            llm_provider=os.getenv("LLM_PROVIDER", "none").strip().lower(),
            vllm_url=os.getenv("VLLM_URL", "http://localhost:6001"),
            vllm_model=os.getenv(
                "VLLM_MODEL", "/models/Meta-Llama-3.1-8B-Instruct-AWQ-INT4"
            ),
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY", ""),
            openrouter_models=_env_list("OPENROUTER_MODELS", "openrouter/free"),
            log_level=os.getenv("NLWEB_LOG_LEVEL", "INFO").upper(),
            log_file=Path(log_file) if log_file else None,
        )

    def validate(self) -> list[str]:
        errors = []
        if not self.prompts_dir.exists():
            errors.append(f"Prompts directory not found: {self.prompts_dir}")
        unknown = [b for b in self.backends if b not in ("mock", "web")]
        if unknown:
            errors.append(f"Unknown backends: {', '.join(unknown)}")
        if not self.backends:
            errors.append("No backends configured (NLWEB_BACKENDS)")
        if self.llm_provider not in ("none", "vllm", "openrouter"):
            errors.append(f"Unknown LLM_PROVIDER: {self.llm_provider}")
        if self.llm_provider == "openrouter" and not self.openrouter_api_key.strip():
            errors.append("OPENROUTER_API_KEY is required for LLM_PROVIDER=openrouter")
        return errors
