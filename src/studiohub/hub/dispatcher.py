# Studio Hub Command Dispatcher
# SPDX-License-Identifier: Apache-2.0
#
# Per-agent command queues delivered over long-poll requests

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional

from studiohub.hub.models import Agent, AgentIdentity, CommandKind, PendingCommand
from studiohub.hub.registry import AgentRegistry
from studiohub.lib.types import AgentId


@dataclass
class _SuspendedPoll:
    future: asyncio.Future
    timer: Optional[asyncio.TimerHandle] = None

    def resolve(self, commands: list[PendingCommand]) -> bool:
        """First resolution wins; later attempts are no-ops."""
        if self.timer is not None:
            self.timer.cancel()
        if self.future.done():
            return False
        self.future.set_result(commands)
        return True


class CommandDispatcher:
    """
    Emulates push delivery over long-polling.

    Each agent owns a FIFO queue and at most one suspended poll. A command
    enqueued while the agent is parked is handed to that poll directly.
    """

    def __init__(self, registry: AgentRegistry, on_connect: Optional[Callable[[Agent], None]] = None):
        self.registry = registry
        self.on_connect = on_connect
        self._queues: dict[AgentId, deque[PendingCommand]] = {}
        self._waiting: dict[AgentId, _SuspendedPoll] = {}
        self.logger = logging.getLogger(f'{__name__}.CommandDispatcher')

    def enqueue(self, agent_id: str, command: PendingCommand) -> bool:
        """
        Hand a command to the agent.

        Returns True when it went straight to a suspended poll, False when
        it was queued for the next poll.
        """
        agent_id = AgentId(agent_id)
        slot = self._waiting.pop(agent_id, None)
        if slot is not None:
            queue = self._queues.pop(agent_id, deque())
            batch = [*queue, command]
            if slot.resolve(batch):
                self.logger.debug(f"Delivered {command.command_id} to waiting poll: {agent_id}")
                return True
            # The waiter was already gone; keep everything for the next poll
            self._queues[agent_id] = deque(batch)
            return False

        self._queues.setdefault(agent_id, deque()).append(command)
        self.logger.debug(f"Queued {command.command_id} for {agent_id}")
        return False

    async def poll(self, agent_id: str, identity: AgentIdentity, timeout: float) -> list[PendingCommand]:
        """
        Serve one long-poll for ``agent_id``.

        Supersedes any older suspended poll for the same id, registers or
        heartbeats the agent, then either drains the queue or parks until a
        command arrives or ``timeout`` seconds pass (keepalive, empty list).
        """
        agent_id = AgentId(agent_id)

        existing = self._waiting.pop(agent_id, None)
        if existing is not None and not existing.future.done():
            self.logger.info(f"New poll replacing old poll: {agent_id}")
            existing.resolve([PendingCommand.replacement_notice()])

        if self.registry.get(agent_id) is None:
            self._queues.pop(agent_id, None)
            agent = self.registry.register(identity)
            self.logger.info(f"Agent registered via poll: {agent_id}")
            if self.on_connect is not None:
                self.on_connect(agent)
        else:
            self.registry.heartbeat(agent_id)

        queue = self._queues.pop(agent_id, None)
        if queue:
            return list(queue)

        loop = asyncio.get_running_loop()
        slot = _SuspendedPoll(future=loop.create_future())
        slot.timer = loop.call_later(max(timeout, 0), slot.resolve, [])
        self._waiting[agent_id] = slot

        try:
            return await slot.future
        except asyncio.CancelledError:
            self._restore_undelivered(agent_id, slot)
            raise
        finally:
            if slot.timer is not None:
                slot.timer.cancel()
            if self._waiting.get(agent_id) is slot:
                del self._waiting[agent_id]

    def _restore_undelivered(self, agent_id: AgentId, slot: _SuspendedPoll) -> None:
        """Requeue commands handed to a poll whose client went away."""
        if not slot.future.done() or slot.future.cancelled():
            return
        commands = [c for c in slot.future.result() if c.kind != CommandKind.DISCONNECT]
        if not commands:
            return
        queue = self._queues.setdefault(agent_id, deque())
        queue.extendleft(reversed(commands))
        self.logger.info(f"Requeued {len(commands)} undelivered command(s) for {agent_id}")

    def discard(self, agent_id: str) -> int:
        """
        Drop the agent's queue and detach its suspended poll.

        A detached poll still completes with an empty list at its deadline.
        Returns the number of dropped commands.
        """
        agent_id = AgentId(agent_id)
        self._waiting.pop(agent_id, None)
        queue = self._queues.pop(agent_id, None)
        return len(queue) if queue else 0

    def withdraw(self, agent_id: str, command_id: str) -> bool:
        """Remove a not-yet-delivered command. Returns False once it has left the queue."""
        agent_id = AgentId(agent_id)
        queue = self._queues.get(agent_id)
        if not queue:
            return False
        for command in queue:
            if command.command_id == command_id:
                queue.remove(command)
                if not queue:
                    del self._queues[agent_id]
                self.logger.debug(f"Withdrew {command_id} from {agent_id}")
                return True
        return False

    def queue_depth(self, agent_id: str) -> int:
        queue = self._queues.get(AgentId(agent_id))
        return len(queue) if queue else 0

    def is_waiting(self, agent_id: str) -> bool:
        slot = self._waiting.get(AgentId(agent_id))
        return slot is not None and not slot.future.done()
