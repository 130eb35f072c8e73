# Studio Hub Liveness Monitor
# SPDX-License-Identifier: Apache-2.0
#
# Periodic sweep evicting agents whose heartbeat went stale

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from studiohub.hub.broadcaster import EventBroadcaster
from studiohub.hub.correlator import ResultCorrelator
from studiohub.hub.dispatcher import CommandDispatcher
from studiohub.hub.models import EventKind
from studiohub.hub.registry import AgentRegistry
from studiohub.lib.types import AgentId

DEFAULT_HEARTBEAT_TIMEOUT = 35.0
DEFAULT_SWEEP_INTERVAL = 10.0
AGENT_DISCONNECTED_ERROR = "Agent disconnected"


class LivenessMonitor:
    """Fixed-period sweep with a fixed staleness threshold."""

    def __init__(self,
                 registry: AgentRegistry,
                 dispatcher: CommandDispatcher,
                 broadcaster: EventBroadcaster,
                 correlator: Optional[ResultCorrelator] = None,
                 heartbeat_timeout: float = DEFAULT_HEARTBEAT_TIMEOUT,
                 sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
                 clock: Callable[[], float] = time.time):
        self.registry = registry
        self.dispatcher = dispatcher
        self.broadcaster = broadcaster
        self.correlator = correlator
        self.heartbeat_timeout = heartbeat_timeout
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._task: Optional[asyncio.Task] = None
        self.logger = logging.getLogger(f'{__name__}.LivenessMonitor')

    def sweep(self, now: Optional[float] = None) -> list[AgentId]:
        """Evict every stale agent once. Returns the evicted ids."""
        now = self._clock() if now is None else now
        evicted: list[AgentId] = []
        for agent in self.registry.get_all():
            if now - agent.last_heartbeat <= self.heartbeat_timeout:
                continue
            self.logger.info(f"Agent timeout, removing: {agent.agent_id}")
            self.registry.unregister(agent.agent_id)
            dropped = self.dispatcher.discard(agent.agent_id)
            if dropped:
                self.logger.warning(f"Dropped {dropped} undelivered command(s) for {agent.agent_id}")
            if self.correlator is not None:
                self.correlator.fail_agent(agent.agent_id, AGENT_DISCONNECTED_ERROR)
            self.broadcaster.publish(EventKind.AGENT_DISCONNECTED, {'agentId': agent.agent_id})
            evicted.append(agent.agent_id)
        return evicted

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                self.sweep()
            except Exception as e:
                self.logger.error(f"Liveness sweep failed: {e}")

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.ensure_future(self._run())
        self.logger.info(
            f"Liveness monitor started (timeout={self.heartbeat_timeout}s, interval={self.sweep_interval}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self.logger.info("Liveness monitor stopped")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
