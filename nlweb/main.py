"""Entry point: oneshot | tools | backends | mcp."""

import argparse
import asyncio
import json
import sys


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nlweb")
    sub = parser.add_subparsers(dest="command", required=True)

    oneshot = sub.add_parser("oneshot", help="Run one query and print the response")
    oneshot.add_argument("query", nargs="*", help="Query text (stdin when omitted)")
    oneshot.add_argument(
        "--mode", choices=["list", "summarize", "generate"], default=None
    )
    oneshot.add_argument("--site")
    oneshot.add_argument("--max-results", type=int)
    oneshot.add_argument("--prev", help="Earlier queries, comma separated")
    oneshot.add_argument("--stream", action="store_true")
    oneshot.add_argument("--json", action="store_true", dest="as_json")

    sub.add_parser("tools", help="List registered tool handlers")
    sub.add_parser("backends", help="Describe configured backends")

    mcp = sub.add_parser("mcp", help="Answer one MCP call and print the JSON result")
    mcp.add_argument(
        "action", choices=["list-tools", "list-prompts", "call-tool", "get-prompt"]
    )
    mcp.add_argument("name", nargs="?", help="Tool or prompt name")
    mcp.add_argument("--args", default="{}", dest="arguments", help="JSON object of arguments")
    return parser


async def _mcp(action: str, name: str | None, arguments: str) -> int:
    from nlweb.contracts.mcp_v1 import McpCallToolRequest, McpGetPromptRequest
    from nlweb.core.bootstrap import build_engine
    from nlweb.interfaces.mcp import McpService

    if action in ("call-tool", "get-prompt") and not name:
        print(f"Error: {action} needs a name")
        return 2
    try:
        parsed = json.loads(arguments)
    except ValueError as e:
        print(f"Error: --args is not valid JSON: {e}")
        return 2
    if not isinstance(parsed, dict):
        print("Error: --args must be a JSON object")
        return 2

    engine = build_engine()
    service = McpService(engine.orchestrator)
    try:
        if action == "list-tools":
            result = await service.list_tools()
        elif action == "list-prompts":
            result = await service.list_prompts()
        elif action == "call-tool":
            result = await service.call_tool(McpCallToolRequest(name=name, arguments=parsed))
        else:
            result = await service.get_prompt(McpGetPromptRequest(name=name, arguments=parsed))
        print(json.dumps(result.model_dump(by_alias=True), indent=2))
        return 1 if getattr(result, "is_error", False) else 0
    finally:
        await engine.close()


async def _describe(command: str) -> int:
    from nlweb.core.bootstrap import build_engine

    engine = build_engine()
    try:
        if command == "tools":
            items = [t.model_dump(by_alias=True) for t in engine.tools.list_tools()]
        else:
            items = [b.model_dump(by_alias=True) for b in engine.search.get_backend_info()]
        print(json.dumps(items, indent=2))
        return 0
    finally:
        await engine.close()


def main():
    args = _parser().parse_args()

    if args.command == "oneshot":
        from nlweb.core.config import Config
        from nlweb.interfaces.oneshot import main as run_oneshot_main

        query = " ".join(args.query).strip() or sys.stdin.read().strip()
        mode = args.mode or Config.load().settings.default_mode
        sys.exit(
            run_oneshot_main(
                query=query,
                mode=mode,
                site=args.site,
                max_results=args.max_results,
                prev=args.prev,
                stream=args.stream,
                as_json=args.as_json,
            )
        )

    if args.command == "mcp":
        sys.exit(asyncio.run(_mcp(args.action, args.name, args.arguments)))

    sys.exit(asyncio.run(_describe(args.command)))


if __name__ == "__main__":
    main()
