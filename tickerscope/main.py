"""Console entry point for the debug HTTP server.

The MCP server (``tickerscope-mcp``, stdio) is the primary interface; this
module only exposes ``app`` for ``uvicorn tickerscope.main:app`` and the
``tickerscope-debug`` script.
"""

from tickerscope.dev.debug_server import app, serve  # noqa: F401


def main() -> None:
    serve()


if __name__ == "__main__":
    main()
