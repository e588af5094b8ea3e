"""Developer HTTP wrapper around the MCP tool handlers.

Each ``/debug/<tool>`` route returns exactly the ToolResponse envelope the MCP
tool would, so a browser dashboard or curl can exercise the engine without an
MCP client.  Failures are envelopes too: the status code is always 200.

Run with:
    tickerscope-debug
    # → http://localhost:8000/debug/get_snapshot?query=AAPL&timeframe=1M
    # → http://localhost:8000/docs  (Swagger UI)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tickerscope.config import settings
from tickerscope.mcp.tools import (
    handle_get_snapshot,
    handle_list_timeframes,
    handle_resolve_symbol,
)
from tickerscope.middleware.request_gate import request_gate
from tickerscope.middleware.security import SecurityHeadersMiddleware, parse_cors_origins

logger = logging.getLogger("tickerscope.dev.debug_server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Debug server up (env=%s, upstream=%s)", settings.app_env, settings.alpha_vantage_base_url
    )
    yield
    await request_gate.reset()
    logger.info(
        "Debug server down (%d superseded snapshot requests)", request_gate.superseded_count
    )


app = FastAPI(
    title="Ticker Snapshot – debug HTTP",
    description="Developer-only HTTP wrapper around the MCP tool handlers.",
    version=settings.mcp_server_version,
    lifespan=lifespan,
)

# Read-only API: GET is the only verb any route accepts.
app.add_middleware(
    CORSMiddleware,
    allow_origins=parse_cors_origins(settings.allowed_origins),
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(SecurityHeadersMiddleware)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "version": settings.mcp_server_version,
        "server": settings.mcp_server_name,
    }


@app.get("/debug/get_snapshot")
async def debug_get_snapshot(
    query: str = Query(..., description="Ticker symbol or company name"),
    timeframe: str = Query("1D", description="1D, 5D, 1M, 6M, YTD, 1Y, 5Y or ALL"),
    view: str | None = Query(None, description="Slot key; a newer request cancels an older one"),
):
    return JSONResponse(
        content=await handle_get_snapshot({"query": query, "timeframe": timeframe, "view": view})
    )


@app.get("/debug/resolve_symbol")
async def debug_resolve_symbol(query: str = Query(..., description="Ticker or company name")):
    return JSONResponse(content=await handle_resolve_symbol({"query": query}))


@app.get("/debug/list_timeframes")
async def debug_list_timeframes():
    return JSONResponse(content=await handle_list_timeframes({}))


def serve() -> None:
    """Run the debug app under uvicorn with the configured host and port."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        "tickerscope.dev.debug_server:app",
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        reload=(settings.app_env == "development"),
    )


if __name__ == "__main__":
    serve()
