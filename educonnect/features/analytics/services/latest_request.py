"""
Latest-request-wins bookkeeping for analytics consumers.

Every filter change starts a new fetch. Only the most recently started one
may publish its result; anything that finishes after a newer request began,
or after the consumer went away, is dropped without side effects.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from educonnect.features.analytics.services.analytics_service import (
    LOAD_FAILED_MESSAGE,
    AnalyticsLoadError,
    AnalyticsService,
)
from educonnect.infrastructure.observability.logging import get_logger
from educonnect.models.api.analytics_request import AnalyticsQuery
from educonnect.models.api.analytics_response import AnalyticsSnapshotResponse

logger = get_logger(__name__)

SendCallable = Callable[[dict[str, Any]], Awaitable[None]]


class LatestRequestGate:
    def __init__(self) -> None:
        self._latest = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def begin(self) -> int:
        """Start a request and return its ticket; earlier tickets become stale."""
        self._latest += 1
        return self._latest

    def is_current(self, ticket: int) -> bool:
        return not self._closed and ticket == self._latest

    def close(self) -> None:
        self._closed = True


class AnalyticsLiveSession:
    """
    One connected dashboard.

    submit() schedules a load for the new filters; results are sent through
    ``send`` only while their ticket is still current.
    """

    def __init__(self, owner_id: str, service: AnalyticsService, send: SendCallable):
        self._owner_id = owner_id
        self._service = service
        self._send = send
        self._gate = LatestRequestGate()
        self._tasks: set[asyncio.Task] = set()

    @property
    def gate(self) -> LatestRequestGate:
        return self._gate

    def submit(self, query: AnalyticsQuery) -> asyncio.Task:
        ticket = self._gate.begin()
        task = asyncio.create_task(self._run(ticket, query))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, ticket: int, query: AnalyticsQuery) -> None:
        try:
            await self._publish(ticket, query)
        except Exception:
            logger.exception(
                "Analytics live update failed", owner_id=self._owner_id, ticket=ticket
            )
            await self._send_error(ticket, LOAD_FAILED_MESSAGE)

    async def _publish(self, ticket: int, query: AnalyticsQuery) -> None:
        try:
            snapshot = await self._service.load_snapshot(self._owner_id, query)
        except AnalyticsLoadError as e:
            if self._gate.is_current(ticket):
                await self._send({"type": "error", "detail": str(e)})
            return

        if not self._gate.is_current(ticket):
            logger.debug("Discarding stale analytics result", owner_id=self._owner_id, ticket=ticket)
            return

        payload = AnalyticsSnapshotResponse.from_domain(snapshot).model_dump(mode="json")
        await self._send({"type": "snapshot", "data": payload})

    async def _send_error(self, ticket: int, detail: str) -> None:
        if not self._gate.is_current(ticket):
            return
        try:
            await self._send({"type": "error", "detail": detail})
        except Exception as e:
            # Peer already gone; the failure above is logged
            logger.warning(
                "Could not deliver analytics error", owner_id=self._owner_id, error=str(e)
            )

    async def close(self) -> None:
        """Tear down: nothing in flight may publish after this returns."""
        self._gate.close()
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
