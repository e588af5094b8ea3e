"""Response hardening for the debug HTTP server.

Every response gets the OWASP baseline headers, ``Cache-Control: no-store``
(a snapshot is only valid for the moment it was built) and an
``X-Request-ID`` that matches the id in the log lines for that request.
"""

from __future__ import annotations

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from tickerscope.config import settings

SECURITY_HEADERS = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    # Swagger UI at /docs loads its assets from jsDelivr.
    "Content-Security-Policy": (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "img-src 'self' data: https://fastapi.tiangolo.com; "
        "frame-ancestors 'none'"
    ),
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cache-Control": "no-store",
}

MAX_REQUEST_ID_LENGTH = 128


def _request_id(request: Request) -> str:
    """Client-supplied ``X-Request-ID`` when usable, otherwise a fresh uuid4."""
    supplied = request.headers.get("X-Request-ID", "").strip()
    if supplied and len(supplied) <= MAX_REQUEST_ID_LENGTH and supplied.isprintable():
        return supplied
    return str(uuid.uuid4())


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach ``SECURITY_HEADERS`` and a request id to every response.

    Headers a route already set are left alone.  With
    ``settings.enable_security_headers`` off only the request id is added.
    """

    def __init__(self, app: Callable, enabled: bool = True):
        super().__init__(app)
        self.headers = SECURITY_HEADERS if enabled and settings.enable_security_headers else {}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = _request_id(request)
        request.state.request_id = request_id

        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        response.headers["X-Request-ID"] = request_id
        return response


def parse_cors_origins(origins_string: str) -> list[str]:
    """Split the ``ALLOWED_ORIGINS`` setting, dropping blanks and repeats.

    >>> parse_cors_origins("https://dash.example.com, http://localhost:3000,")
    ['https://dash.example.com', 'http://localhost:3000']
    >>> parse_cors_origins(" * ")
    ['*']
    """
    origins: list[str] = []
    for origin in origins_string.split(","):
        origin = origin.strip()
        if origin == "*":
            return ["*"]
        if origin and origin not in origins:
            origins.append(origin)
    return origins
