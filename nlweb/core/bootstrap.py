"""Engine wiring at startup: backends, completion provider, tools, orchestrator."""

from dataclasses import dataclass, field

from nlweb.core.config import Config
from nlweb.core.logger import logger
from nlweb.llm.openrouter_client import OpenRouterProvider
from nlweb.llm.provider import CompletionProvider
from nlweb.llm.vllm_client import VLLMProvider
from nlweb.orchestrators.search.backends import MockDataBackend, WebSearchBackend
from nlweb.orchestrators.search.dispatcher import ToolExecutor
from nlweb.orchestrators.search.generator import ResultGenerator
from nlweb.orchestrators.search.interface import DataBackend, SearchService
from nlweb.orchestrators.search.manager import (
    BackendEntry,
    BackendManager,
    SingleBackendService,
)
from nlweb.orchestrators.search.orchestrator import NLWebOrchestrator
from nlweb.orchestrators.search.query_processor import QueryProcessor
from nlweb.orchestrators.search.router import ToolSelector
from nlweb.tools import default_handlers


@dataclass
class Engine:
    orchestrator: NLWebOrchestrator
    search: SearchService
    tools: ToolExecutor
    provider: CompletionProvider | None = None
    closables: list[object] = field(default_factory=list)

    async def close(self) -> None:
        for resource in self.closables:
            await resource.close()


def build_backend(backend_id: str, cfg: Config) -> DataBackend:
    if backend_id == "mock":
        return MockDataBackend()
    if backend_id == "web":
        return WebSearchBackend(cfg.searxng_url)
    raise ValueError(f"Unknown backend: {backend_id}")


def build_provider(cfg: Config) -> CompletionProvider | None:
    if cfg.llm_provider == "vllm":
        return VLLMProvider(cfg.vllm_url, cfg.vllm_model)
    if cfg.llm_provider == "openrouter":
        return OpenRouterProvider(cfg.openrouter_api_key, cfg.openrouter_models)
    return None


def build_search_service(backends: list[DataBackend], cfg: Config) -> SearchService:
    if len(backends) == 1:
        return SingleBackendService(backends[0], cfg.settings)
    # Earlier entries in NLWEB_BACKENDS get higher priority.
    entries = [
        BackendEntry(backend=b, priority=len(backends) - i)
        for i, b in enumerate(backends)
    ]
    return BackendManager(entries, cfg.settings)


def build_engine(cfg: Config | None = None) -> Engine:
    cfg = cfg or Config.load()
    errors = cfg.validate()
    if errors:
        raise ValueError("Invalid configuration: " + "; ".join(errors))

    backends = [build_backend(b, cfg) for b in cfg.backends]
    search = build_search_service(backends, cfg)
    provider = build_provider(cfg)
    settings = cfg.settings

    query_processor = QueryProcessor()
    generator = ResultGenerator(search, settings, provider, cfg.prompts_dir)
    tools = ToolExecutor(
        default_handlers(search, query_processor, settings.max_results_per_query)
    )
    orchestrator = NLWebOrchestrator(
        search=search,
        query_processor=query_processor,
        generator=generator,
        settings=settings,
        tool_selector=ToolSelector(settings),
        tool_executor=tools,
    )
    logger.info(
        f"Engine ready: backends={cfg.backends} provider={cfg.llm_provider} "
        f"tools={'on' if settings.tool_selection_enabled else 'off'}"
    )
    return Engine(
        orchestrator=orchestrator,
        search=search,
        tools=tools,
        provider=provider,
        closables=[provider] if provider is not None else [],
    )
