"""Symbol search: free-text query → canonical (symbol, name)."""

from __future__ import annotations

import logging

from tickerscope.config import settings
from tickerscope.errors import InvalidQuery, NoMatchFound, RateLimited
from tickerscope.schemas.series import SymbolMatch
from tickerscope.services.upstream import ERROR_KEY, AlphaVantageClient, rate_limit_notice

logger = logging.getLogger("tickerscope.symbols")


def normalize_query(query: str | None, max_length: int | None = None) -> str:
    """Strip and upper-case *query*, rejecting input the search cannot use.

    Raises:
        InvalidQuery: empty, longer than *max_length* (defaults to
            ``settings.max_query_length``), or containing control characters.
    """
    limit = max_length or settings.max_query_length
    if not isinstance(query, str) or not query.strip():
        raise InvalidQuery("Please enter a valid stock symbol.")
    cleaned = query.strip().upper()
    if len(cleaned) > limit:
        raise InvalidQuery(
            f"Query {cleaned!r} is longer than {limit} characters.", symbol=cleaned
        )
    if not cleaned.isprintable():
        raise InvalidQuery("Query contains unprintable characters.", symbol=cleaned)
    return cleaned


async def resolve_symbol(client: AlphaVantageClient, query: str) -> SymbolMatch:
    """Return the provider's top-ranked match for *query*.

    The provider's ordering is taken as-is; the first entry wins.

    Raises:
        InvalidQuery: see ``normalize_query``.
        NoMatchFound: the search returned no matches.
        RateLimited: the search was throttled.
        TransportFailure: propagated from the client.
    """
    keywords = normalize_query(query)
    payload = await client.query("SYMBOL_SEARCH", keywords=keywords)

    notice = rate_limit_notice(payload)
    if notice:
        raise RateLimited(notice, symbol=keywords)
    if ERROR_KEY in payload:
        raise NoMatchFound(
            f'No matches found for symbol "{keywords}": {payload[ERROR_KEY]}', symbol=keywords
        )

    matches = payload.get("bestMatches") or []
    if not matches:
        raise NoMatchFound(f'No matches found for symbol "{keywords}"', symbol=keywords)

    best = matches[0]
    symbol = best.get("1. symbol")
    if not symbol:
        raise NoMatchFound(f'Top match for "{keywords}" has no symbol', symbol=keywords)

    match = SymbolMatch(
        symbol=symbol,
        name=best.get("2. name") or symbol,
        region=best.get("4. region"),
        currency=best.get("8. currency"),
    )
    logger.info("resolve_symbol query=%s symbol=%s matches=%d", keywords, match.symbol, len(matches))
    return match
