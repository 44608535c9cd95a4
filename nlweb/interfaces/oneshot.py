"""One-shot interface: run a single query, print the response, exit."""

from __future__ import annotations

import asyncio
import json

from nlweb.contracts.nlweb_v1 import NLWebRequest, NLWebResponse, QueryMode
from nlweb.core.bootstrap import Engine, build_engine
from nlweb.core.config import Config
from nlweb.core.logger import logger


def format_sources(response: NLWebResponse) -> str:
    lines: list[str] = []
    for i, r in enumerate(response.results, start=1):
        lines.append(f"{i}. {r.name} ({r.score:.2f})")
        lines.append(f"   {r.url}")
    return "\n".join(lines) or "No results."


def format_response(response: NLWebResponse) -> str:
    if response.error:
        return f"Error: {response.error}"
    text = response.generated_response or response.summary
    if text:
        return f"{text}\n\n{format_sources(response)}"
    return format_sources(response)


async def run_oneshot(
    query: str,
    mode: QueryMode | str = QueryMode.LIST,
    site: str | None = None,
    max_results: int | None = None,
    prev: str | None = None,
    stream: bool = False,
    as_json: bool = False,
    engine: Engine | None = None,
) -> int:
    text = (query or "").strip()
    if not text:
        print("Error: query must not be empty")
        return 2

    owns_engine = engine is None
    if engine is None:
        cfg = Config.load()
        logger.configure(cfg.log_level, cfg.log_file)
        engine = build_engine(cfg)
    request = NLWebRequest(
        query=text,
        mode=QueryMode(mode),
        site=site,
        max_results=max_results,
        prev=prev or [],
    )
    try:
        if stream:
            final: NLWebResponse | None = None
            printed = ""
            async for chunk in engine.orchestrator.process_stream(request):
                final = chunk
                current = chunk.generated_response or chunk.summary or ""
                if not as_json and current.startswith(printed) and current != printed:
                    print(current[len(printed) :], end="", flush=True)
                    printed = current
            if final is None:
                return 1
            if as_json:
                print(json.dumps(final.to_wire(), indent=2))
            elif printed:
                print("\n")
                print(format_sources(final))
            else:
                print(format_response(final))
            return 1 if final.error else 0

        response = await engine.orchestrator.process(request)
        if as_json:
            print(json.dumps(response.to_wire(), indent=2))
        else:
            print(format_response(response))
        return 1 if response.error else 0
    finally:
        if owns_engine:
            await engine.close()


def main(
    query: str,
    mode: str = "list",
    site: str | None = None,
    max_results: int | None = None,
    prev: str | None = None,
    stream: bool = False,
    as_json: bool = False,
) -> int:
    return asyncio.run(
        run_oneshot(
            query=query,
            mode=mode,
            site=site,
            max_results=max_results,
            prev=prev,
            stream=stream,
            as_json=as_json,
        )
    )
