"""Alpha Vantage HTTP client – the only module that talks to the network."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tickerscope.config import settings
from tickerscope.errors import TransportFailure

logger = logging.getLogger("tickerscope.upstream")

# Keys the provider uses instead of data when a call is throttled or refused.
RATE_LIMIT_KEYS = ("Note", "Information")
ERROR_KEY = "Error Message"


class AlphaVantageClient:
    """Thin async wrapper around the provider's single ``query`` endpoint.

    Usage:
        async with AlphaVantageClient(api_key="...") as client:
            payload = await client.query("SYMBOL_SEARCH", keywords="AAPL")
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.alphavantage.co/query",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)
        self.calls = 0

    async def __aenter__(self) -> AlphaVantageClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def query(self, function: str, **params: Any) -> dict:
        """Call *function* and return the decoded JSON object.

        Raises:
            TransportFailure: network error, non-2xx status, or a body that
                is not a JSON object.
        """
        query_params = {"function": function, **params, "apikey": self.api_key}
        self.calls += 1
        try:
            response = await self._http.get(self.base_url, params=query_params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise TransportFailure(
                f"{function} returned HTTP {exc.response.status_code}",
                symbol=params.get("symbol") or params.get("keywords"),
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(
                f"{function} request failed: {exc}",
                symbol=params.get("symbol") or params.get("keywords"),
            ) from exc
        except ValueError as exc:
            raise TransportFailure(
                f"{function} returned a body that is not valid JSON",
                symbol=params.get("symbol") or params.get("keywords"),
            ) from exc

        if not isinstance(payload, dict):
            raise TransportFailure(
                f"{function} returned {type(payload).__name__}, expected a JSON object",
                symbol=params.get("symbol") or params.get("keywords"),
            )
        logger.debug("upstream %s params=%s keys=%s", function, params, list(payload))
        return payload


def rate_limit_notice(payload: dict) -> str | None:
    """Return the provider's throttling notice, if the payload is one."""
    for key in RATE_LIMIT_KEYS:
        if key in payload:
            return str(payload[key])
    return None


def open_client() -> AlphaVantageClient:
    """Build a client from application settings."""
    return AlphaVantageClient(
        api_key=settings.alpha_vantage_api_key,
        base_url=settings.alpha_vantage_base_url,
        timeout=settings.upstream_timeout_seconds,
    )
