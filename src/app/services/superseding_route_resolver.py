from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from src.domain.exceptions import RouteRequestSuperseded
from src.domain.models import RouteOptions, RouteResult

from .route_resolver import RouteResolver

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SupersedingRouteResolver:
    """Keeps at most one in-flight route request per caller key.

    A newer request for the same key cancels the older one; the older
    caller gets RouteRequestSuperseded instead of a stale result.
    """

    resolver: RouteResolver

    _in_flight: dict[str, asyncio.Task] = field(
        default_factory=dict, init=False, repr=False
    )

    async def resolve(
        self,
        *,
        key: str,
        start: Any,
        end: Any,
        options: RouteOptions | None = None,
    ) -> RouteResult:
        previous = self._in_flight.get(key)
        if previous is not None and not previous.done():
            logger.info("Cancelling superseded route request for %s", key)
            previous.cancel()

        task = asyncio.create_task(self.resolver.resolve_route(start, end, options))
        self._in_flight[key] = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                # The caller itself is being cancelled.
                raise
            raise RouteRequestSuperseded(key) from None
        finally:
            if self._in_flight.get(key) is task:
                del self._in_flight[key]

    def in_flight(self) -> int:
        return sum(1 for t in self._in_flight.values() if not t.done())
