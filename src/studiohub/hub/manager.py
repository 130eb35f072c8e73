# Studio Hub Manager
# SPDX-License-Identifier: Apache-2.0
#
# Owns hub state and exposes the operations the HTTP routes call

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

from studiohub.hub.broadcaster import DEFAULT_MAX_EVENTS, EventBroadcaster
from studiohub.hub.correlator import ResultCorrelator
from studiohub.hub.dispatcher import CommandDispatcher
from studiohub.hub.exceptions import AgentNotFoundError, HubValidationError
from studiohub.hub.liveness import DEFAULT_HEARTBEAT_TIMEOUT, DEFAULT_SWEEP_INTERVAL, LivenessMonitor
from studiohub.hub.models import (
    Agent,
    AgentIdentity,
    CommandKind,
    Event,
    EventKind,
    ExecuteMode,
    LogEntry,
    PendingCommand,
)
from studiohub.hub.registry import DEFAULT_MAX_LOGS, AgentRegistry
from studiohub.lib.types import AgentId, JsonObject

logger = logging.getLogger(__name__)

POLL_HOLD_HEADROOM = 5.0


class HubManager:
    """Single owner of the registry, queues, correlation table and event ring."""

    def __init__(self,
                 max_logs: int = DEFAULT_MAX_LOGS,
                 max_events: int = DEFAULT_MAX_EVENTS,
                 heartbeat_timeout: float = DEFAULT_HEARTBEAT_TIMEOUT,
                 sweep_interval: float = DEFAULT_SWEEP_INTERVAL):
        self.registry = AgentRegistry(max_logs=max_logs)
        self.broadcaster = EventBroadcaster(max_events=max_events)
        self.correlator = ResultCorrelator()
        self.dispatcher = CommandDispatcher(self.registry, on_connect=self._on_connect)
        self.monitor = LivenessMonitor(
            self.registry,
            self.dispatcher,
            self.broadcaster,
            correlator=self.correlator,
            heartbeat_timeout=heartbeat_timeout,
            sweep_interval=sweep_interval,
        )
        self.started_at = time.time()
        self.logger = logging.getLogger(f'{__name__}.HubManager')

    def _on_connect(self, agent: Agent) -> None:
        self.broadcaster.publish(EventKind.AGENT_CONNECTED, {'agent': agent.to_dict()})

    def start(self) -> None:
        self.monitor.start()

    async def stop(self) -> None:
        await self.monitor.stop()

    # ==================== Agent side ====================

    @property
    def max_poll_hold(self) -> float:
        """Longest a poll may park while still heartbeating inside the liveness window."""
        heartbeat_timeout = self.monitor.heartbeat_timeout
        return max(heartbeat_timeout - POLL_HOLD_HEADROOM, heartbeat_timeout / 2)

    async def poll(self, identity: AgentIdentity, timeout: float) -> tuple[AgentId, list[PendingCommand]]:
        """
        Long-poll for commands; doubles as registration and heartbeat.

        ``timeout`` is clamped to ``max_poll_hold`` so a parked agent is
        never evicted by the liveness sweep.
        """
        agent_id = identity.agent_id()
        hold = min(timeout, self.max_poll_hold)
        commands = await self.dispatcher.poll(agent_id, identity, hold)
        return agent_id, commands

    def submit_result(self, correlation_id: str, payload: Any) -> bool:
        if not correlation_id:
            raise HubValidationError("id is required")
        return self.correlator.submit(correlation_id, payload)

    def append_logs(self, agent_ref: str, entries: list[LogEntry],
                    correlation_id: Optional[str] = None) -> int:
        """Record agent log lines, also attaching them to an in-flight result."""
        agent = self.require_agent(agent_ref)
        for entry in entries:
            self.registry.append_log(agent.agent_id, entry)
            if correlation_id:
                self.correlator.append_log(correlation_id, {
                    'timestamp': entry.timestamp,
                    'level': entry.level,
                    'message': entry.message,
                })
        return len(entries)

    # ==================== Client side ====================

    def require_agent(self, agent_ref: str) -> Agent:
        if not agent_ref or not agent_ref.strip():
            raise HubValidationError("agentId is required")
        agent_id = self.registry.resolve_agent_id(agent_ref)
        agent = self.registry.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        return agent

    async def execute(self, agent_ref: str, code: str, mode: str = ExecuteMode.EVAL.value,
                      timeout: float = 30.0) -> JsonObject:
        """
        Dispatch code to an agent and wait for its result.

        Returns the agent's payload on success, or a failure outcome when the
        deadline passes or the agent is evicted first.
        """
        if not code:
            raise HubValidationError("code is required")
        try:
            exec_mode = ExecuteMode(mode)
        except ValueError as e:
            raise HubValidationError(f"Invalid mode: {mode}") from e

        agent = self.require_agent(agent_ref)

        correlation_id, future = self.correlator.open(timeout, agent_id=agent.agent_id)
        command = PendingCommand(
            command_id=correlation_id,
            kind=CommandKind.EXECUTE,
            payload={'code': code, 'mode': exec_mode.value, 'timeout': timeout},
        )
        self.dispatcher.enqueue(agent.agent_id, command)
        self.logger.info(f"Sent {exec_mode.value} command {correlation_id} to {agent.agent_id}")

        try:
            return await future
        except asyncio.CancelledError:
            self.correlator.cancel(correlation_id)
            raise
        finally:
            # Nobody is waiting any more, so the agent should not pick it up
            self.dispatcher.withdraw(agent.agent_id, correlation_id)

    def list_agents(self) -> list[Agent]:
        return self.registry.get_all()

    def get_logs(self, agent_ref: str, limit: int = 100) -> list[LogEntry]:
        agent_id = self.registry.resolve_agent_id(agent_ref)
        return self.registry.get_logs(agent_id, limit)

    # ==================== Observer side ====================

    async def subscribe(self, since: int, timeout: float) -> list[Event]:
        return await self.broadcaster.subscribe(since, timeout)

    def counts(self) -> dict[str, int]:
        return {
            'agents': len(self.registry),
            'pendingResults': self.correlator.pending_count(),
            'subscribers': self.broadcaster.subscriber_count(),
            'events': len(self.broadcaster),
        }

    @property
    def uptime(self) -> float:
        return time.time() - self.started_at


# Global instance
_hub_manager: Optional[HubManager] = None


def get_hub_manager() -> Optional[HubManager]:
    """Get the hub manager instance."""
    return _hub_manager


def init_hub_manager(**kwargs: Any) -> HubManager:
    """Initialize the hub manager."""
    global _hub_manager
    if _hub_manager is None:
        _hub_manager = HubManager(**kwargs)
        logger.info("Hub manager initialized")
    return _hub_manager


def reset_hub_manager() -> None:
    """Drop the global instance so the next init starts from empty state."""
    global _hub_manager
    _hub_manager = None
