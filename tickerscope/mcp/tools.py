"""MCP tool handlers – the bridge between MCP protocol and service layer."""

from __future__ import annotations

import logging
import time

from tickerscope.errors import SnapshotError
from tickerscope.middleware.request_gate import RequestSuperseded, request_gate
from tickerscope.schemas.common import ErrorDetail, Meta, ToolResponse
from tickerscope.services import snapshot_service, symbol_service, timeframes
from tickerscope.services.upstream import open_client
from tickerscope.utils.formatting import stat_rows

logger = logging.getLogger("mcp.tools")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _elapsed(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000, 2)


def _error_response(
    tool: str,
    code: str,
    message: str,
    elapsed: float,
    hint: str | None = None,
    symbol: str | None = None,
    upstream_calls: int | None = None,
) -> dict:
    return ToolResponse(
        tool=tool,
        ok=False,
        data=None,
        error=ErrorDetail(error_code=code, message=message, hint=hint, symbol=symbol),
        meta=Meta(execution_ms=elapsed, row_count=0, upstream_calls=upstream_calls),
    ).model_dump()


def _snapshot_failure(
    tool: str,
    query: str,
    exc: SnapshotError,
    elapsed: float,
    upstream_calls: int | None = None,
) -> dict:
    """Error envelope naming the query and the underlying cause."""
    logger.warning("%s query=%s failed code=%s: %s", tool, query, exc.error_code, exc)
    return _error_response(
        tool,
        exc.error_code,
        f'Could not fetch data for "{query}": {exc}',
        elapsed,
        hint=exc.hint,
        symbol=exc.symbol,
        upstream_calls=upstream_calls,
    )


def _ok(tool: str, data, elapsed: float, row_count: int | None = None, **meta) -> dict:
    return ToolResponse(
        tool=tool,
        ok=True,
        data=data,
        error=None,
        meta=Meta(execution_ms=elapsed, row_count=row_count, **meta),
    ).model_dump()


# ---------------------------------------------------------------------------
# Tool implementations
# ---------------------------------------------------------------------------


async def handle_get_snapshot(arguments: dict) -> dict:
    """Build a stock snapshot for a query and timeframe.

    Args:
        arguments: {"query": str, "timeframe": str (default "1D"),
                    "view": str | None (slot key for latest-request-wins)}
    """
    t0 = time.perf_counter()

    query = arguments.get("query") or ""
    timeframe = arguments.get("timeframe") or "1D"

    try:
        view = arguments.get("view") or symbol_service.normalize_query(query)
        timeframes.resolve_policy(timeframe)
    except SnapshotError as exc:
        return _error_response(
            "get_snapshot", exc.error_code, str(exc), _elapsed(t0), hint=exc.hint, symbol=exc.symbol
        )

    calls = {"upstream": 0}

    async def _fetch():
        async with open_client() as client:
            try:
                return await snapshot_service.get_snapshot(query, timeframe, client=client)
            finally:
                calls["upstream"] = client.calls

    try:
        snapshot = await request_gate.run(view, _fetch)
    except RequestSuperseded as exc:
        return _error_response(
            "get_snapshot",
            "SUPERSEDED",
            str(exc),
            _elapsed(t0),
            hint="A newer request for this view replaced this one.",
            symbol=view,
            upstream_calls=calls["upstream"],
        )
    except SnapshotError as exc:
        return _snapshot_failure(
            "get_snapshot", query, exc, _elapsed(t0), upstream_calls=calls["upstream"]
        )

    elapsed = _elapsed(t0)
    logger.info(
        "get_snapshot query=%s timeframe=%s points=%d calls=%d ms=%.1f",
        query,
        timeframe,
        len(snapshot.series),
        calls["upstream"],
        elapsed,
    )
    data = snapshot.model_dump(mode="json")
    data["stats_display"] = stat_rows(snapshot)
    return _ok(
        "get_snapshot",
        data,
        elapsed,
        row_count=len(snapshot.series),
        upstream_calls=calls["upstream"],
        used_fallback=snapshot.used_fallback,
    )


async def handle_resolve_symbol(arguments: dict) -> dict:
    """Resolve a free-text query to the provider's top-ranked symbol.

    Args:
        arguments: {"query": str}
    """
    t0 = time.perf_counter()

    query = arguments.get("query") or ""

    try:
        symbol_service.normalize_query(query)
        async with open_client() as client:
            match = await symbol_service.resolve_symbol(client, query)
    except SnapshotError as exc:
        return _snapshot_failure("resolve_symbol", query, exc, _elapsed(t0))

    elapsed = _elapsed(t0)
    logger.info("resolve_symbol query=%s symbol=%s ms=%.1f", query, match.symbol, elapsed)
    return _ok(
        "resolve_symbol",
        match.model_dump(mode="json"),
        elapsed,
        row_count=1,
        upstream_calls=client.calls,
    )


async def handle_list_timeframes(arguments: dict) -> dict:
    """Return the timeframe policy table.

    Args:
        arguments: {} (no arguments)
    """
    t0 = time.perf_counter()
    policies = [p.model_dump(mode="json") for p in timeframes.list_policies()]
    elapsed = _elapsed(t0)
    logger.info("list_timeframes count=%d ms=%.1f", len(policies), elapsed)
    return _ok(
        "list_timeframes", {"timeframes": policies}, elapsed, row_count=len(policies), upstream_calls=0
    )
