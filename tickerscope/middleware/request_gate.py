"""Latest-request-wins gate for snapshot requests.

When a user switches timeframe while the previous snapshot for the same view
is still loading, the older request is cancelled so a stale response can
never overwrite a newer one.

Each view key (a dashboard slot, or the symbol when no slot is given) holds at
most one in-flight task.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, TypeVar

T = TypeVar("T")


class RequestSuperseded(Exception):
    """Raised to the caller whose request was replaced by a newer one."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Request for '{key}' was superseded by a newer request")
        self.key = key


class LatestRequestGate:
    """Run one coroutine per key, cancelling whatever it replaces.

    Attributes:
        superseded_count: How many in-flight requests were cancelled.
    """

    def __init__(self) -> None:
        # view key -> in-flight task
        self._inflight: Dict[str, asyncio.Task] = {}
        self._lock = asyncio.Lock()
        self.superseded_count = 0

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Start ``factory()`` for *key*, cancelling the previous request for *key*.

        Raises:
            RequestSuperseded: a newer ``run`` for the same key started
                before this one finished.
        """
        async with self._lock:
            previous = self._inflight.get(key)
            if previous is not None and not previous.done():
                previous.cancel()
                self.superseded_count += 1
            task = asyncio.ensure_future(factory())
            self._inflight[key] = task

        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and self._inflight.get(key) is not task:
                raise RequestSuperseded(key) from None
            raise
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]

    def in_flight(self, key: str) -> bool:
        task = self._inflight.get(key)
        return task is not None and not task.done()

    async def reset(self) -> None:
        """Cancel every in-flight request."""
        async with self._lock:
            for task in self._inflight.values():
                task.cancel()
            self._inflight.clear()


# Module-level singleton used by tool handlers.
request_gate = LatestRequestGate()
