# Studio Hub Event Broadcaster
# SPDX-License-Identifier: Apache-2.0
#
# Bounded event ring with long-poll fan-out to observers

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Callable

from studiohub.hub.models import Event, EventKind
from studiohub.lib.types import EpochMillis, JsonObject
from studiohub.lib.utils import Generate

DEFAULT_MAX_EVENTS = 100


class EventBroadcaster:
    """
    Best-effort, at-least-once event channel for UI observers.

    Observers poll with a watermark; events newer than it are returned at
    once, otherwise the poll parks until the next publish or its timeout.
    """

    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS,
                 clock: Callable[[], int] = Generate.time_stamp):
        self._events: deque[Event] = deque(maxlen=max_events)
        self._subscribers: set[asyncio.Future] = set()
        self._clock = clock
        self._last_timestamp = 0
        self.logger = logging.getLogger(f'{__name__}.EventBroadcaster')

    def _next_timestamp(self) -> EpochMillis:
        # Strictly increasing so a watermark never hides a same-millisecond event
        ts = max(int(self._clock()), self._last_timestamp + 1)
        self._last_timestamp = ts
        return EpochMillis(ts)

    def publish(self, kind: EventKind | str, payload: JsonObject) -> Event:
        event = Event(kind=kind, payload=payload, timestamp=self._next_timestamp())
        self._events.append(event)

        waiting, self._subscribers = self._subscribers, set()
        for future in waiting:
            if not future.done():
                future.set_result([event])

        self.logger.debug(f"Published {event.to_dict()['type']} to {len(waiting)} subscriber(s)")
        return event

    def events_since(self, since: int) -> list[Event]:
        return [event for event in self._events if event.timestamp > since]

    async def subscribe(self, since: int, timeout: float) -> list[Event]:
        """Return events newer than ``since``, waiting up to ``timeout`` seconds for one."""
        newer = self.events_since(since)
        if newer:
            return newer

        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        timer = loop.call_later(max(timeout, 0), self._expire, future)
        self._subscribers.add(future)
        try:
            return await future
        finally:
            timer.cancel()
            self._subscribers.discard(future)

    @staticmethod
    def _expire(future: asyncio.Future) -> None:
        if not future.done():
            future.set_result([])

    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def __len__(self) -> int:
        return len(self._events)
