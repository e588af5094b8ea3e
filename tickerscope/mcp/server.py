"""MCP server wiring: tool schemas, the timeframe resources and the briefing prompt.

Only stdio transport is served; the debug HTTP app in ``tickerscope.dev`` is
for local development.
"""

from __future__ import annotations

import asyncio
import json
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Prompt, PromptArgument, PromptMessage, Resource, TextContent, Tool

from tickerscope.config import settings
from tickerscope.errors import SnapshotError
from tickerscope.mcp.tools import (
    _error_response,
    handle_get_snapshot,
    handle_list_timeframes,
    handle_resolve_symbol,
)
from tickerscope.schemas.timeframe import TimeframeLabel
from tickerscope.services.timeframes import list_policies, resolve_policy

logger = logging.getLogger("mcp.server")

TIMEFRAME_VALUES = [label.value for label in TimeframeLabel]
TIMEFRAMES_URI = "tickerscope://timeframes"


def _query_property() -> dict:
    return {
        "type": "string",
        "description": "Ticker symbol or company name, e.g. 'AAPL' or 'apple'",
        "minLength": 1,
        "maxLength": settings.max_query_length,
    }


TOOL_DEFINITIONS: list[Tool] = [
    Tool(
        name="get_snapshot",
        description=(
            "Resolve a ticker or company name and return a chart-ready price series for "
            "a timeframe, with previous close, day and 52-week range, volume, average "
            "volume, percent change and company fundamentals."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "query": _query_property(),
                "timeframe": {
                    "type": "string",
                    "enum": TIMEFRAME_VALUES,
                    "description": "Chart timeframe",
                    "default": TimeframeLabel.ONE_DAY.value,
                },
                "view": {
                    "type": "string",
                    "description": (
                        "Optional view/slot key. A newer request for the same view "
                        "cancels an older one still in flight."
                    ),
                },
            },
            "required": ["query"],
        },
    ),
    Tool(
        name="resolve_symbol",
        description="Find the provider's top-ranked symbol and company name for a query.",
        inputSchema={
            "type": "object",
            "properties": {"query": _query_property()},
            "required": ["query"],
        },
    ),
    Tool(
        name="list_timeframes",
        description=(
            "List supported timeframes with their upstream endpoint, window rule "
            "and chart axis settings."
        ),
        inputSchema={"type": "object", "properties": {}},
    ),
]

TOOL_HANDLERS = {
    "get_snapshot": handle_get_snapshot,
    "resolve_symbol": handle_resolve_symbol,
    "list_timeframes": handle_list_timeframes,
}


def read_timeframes_resource(uri: str) -> str:
    """JSON for ``tickerscope://timeframes`` or ``tickerscope://timeframes/<label>``."""
    if uri == TIMEFRAMES_URI:
        return json.dumps(
            {"timeframes": [p.model_dump(mode="json") for p in list_policies()]}, indent=2
        )
    prefix = TIMEFRAMES_URI + "/"
    if uri.startswith(prefix):
        try:
            policy = resolve_policy(uri[len(prefix):])
        except SnapshotError as exc:
            raise ValueError(f"Unknown resource: {uri}") from exc
        return json.dumps(policy.model_dump(mode="json"), indent=2)
    raise ValueError(f"Unknown resource: {uri}")


def briefing_text(query: str, timeframe: str) -> str:
    return (
        f"Brief me on {query} over the {timeframe} timeframe:\n\n"
        f"1. Use get_snapshot with query={query!r} and timeframe={timeframe!r}\n"
        "2. Report the latest price and the percent change\n"
        "3. Compare the price with the day's range and the 52-week range\n"
        "4. Compare today's volume with the average volume\n"
        "5. Mention PE ratio, beta and the analyst target if known\n\n"
        "If meta.used_fallback is true, say the chart shows the most recent regular "
        "session(s) rather than the requested window. Say 'unknown' for any value "
        "returned as null; never treat it as zero."
    )


def create_mcp_server() -> Server:
    server = Server(settings.mcp_server_name)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return TOOL_DEFINITIONS

    @server.call_tool()
    async def call_tool(name: str, arguments: dict | None) -> list[TextContent]:
        handler = TOOL_HANDLERS.get(name)
        if handler is None:
            result = _error_response(
                name,
                "UNKNOWN_TOOL",
                f"Tool '{name}' is not registered",
                0.0,
                hint=f"Available tools: {sorted(TOOL_HANDLERS)}",
            )
        else:
            result = await handler(arguments or {})
        return [TextContent(type="text", text=json.dumps(result, default=str))]

    @server.list_resources()
    async def list_resources() -> list[Resource]:
        resources = [
            Resource(
                uri=TIMEFRAMES_URI,
                name="Timeframe Policies",
                description="Upstream endpoint, window rule and chart settings per timeframe",
                mimeType="application/json",
            )
        ]
        resources.extend(
            Resource(
                uri=f"{TIMEFRAMES_URI}/{label}",
                name=f"Timeframe {label}",
                description=f"Policy for the {label} chart",
                mimeType="application/json",
            )
            for label in TIMEFRAME_VALUES
        )
        return resources

    @server.read_resource()
    async def read_resource(uri: str) -> str:
        return read_timeframes_resource(str(uri))

    @server.list_prompts()
    async def list_prompts() -> list[Prompt]:
        return [
            Prompt(
                name="stock_briefing",
                description="Summarise how a stock traded over a timeframe",
                arguments=[
                    PromptArgument(
                        name="query",
                        description="Ticker symbol or company name",
                        required=True,
                    ),
                    PromptArgument(
                        name="timeframe",
                        description=f"One of {', '.join(TIMEFRAME_VALUES)} (default 1Y)",
                        required=False,
                    ),
                ],
            ),
        ]

    @server.get_prompt()
    async def get_prompt(name: str, arguments: dict | None = None) -> list[PromptMessage]:
        if name != "stock_briefing":
            raise ValueError(f"Unknown prompt: {name}")
        args = arguments or {}
        text = briefing_text(args.get("query", "AAPL"), args.get("timeframe", "1Y"))
        return [PromptMessage(role="user", content=TextContent(type="text", text=text))]

    return server


async def run_mcp_server() -> None:
    server = create_mcp_server()
    logger.info(
        "Starting MCP server '%s' v%s (stdio)",
        settings.mcp_server_name,
        settings.mcp_server_version,
    )
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Console script ``tickerscope-mcp``."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    asyncio.run(run_mcp_server())


if __name__ == "__main__":
    main()
