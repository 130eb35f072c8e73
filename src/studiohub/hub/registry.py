# Studio Hub Agent Registry
# SPDX-License-Identifier: Apache-2.0
#
# Tracks agent identity, presence and bounded log history

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from studiohub.hub.models import Agent, AgentIdentity, AgentKind, LogEntry
from studiohub.lib.types import AgentId

DEFAULT_MAX_LOGS = 500


class AgentRegistry:
    """In-memory registry of agents keyed by their identity-derived id."""

    def __init__(self, max_logs: int = DEFAULT_MAX_LOGS, clock: Callable[[], float] = time.time):
        self.max_logs = max_logs
        self._clock = clock
        self._agents: dict[AgentId, Agent] = {}
        self._place_id_index: dict[int, AgentId] = {}
        self._place_name_index: dict[str, AgentId] = {}
        self.logger = logging.getLogger(f'{__name__}.AgentRegistry')

    @staticmethod
    def resolve_agent_id(ref: str) -> AgentId:
        """
        Map a client-supplied agent reference to a canonical id.

        "place:42" and "local:Demo" pass through; a bare "42" is a place id,
        anything else is a local place name.
        """
        ref = ref.strip()
        if ':' in ref:
            return AgentId(ref)
        try:
            return AgentId(f"place:{int(ref)}")
        except ValueError:
            return AgentId(f"local:{ref}")

    def register(self, identity: AgentIdentity) -> Agent:
        """Register an agent, replacing any prior session with the same id."""
        agent = Agent.from_identity(identity, self.max_logs)
        now = self._clock()
        agent.connected_at = now
        agent.last_heartbeat = now

        previous = self._agents.get(agent.agent_id)
        if previous is not None:
            self._drop_index(previous)

        self._agents[agent.agent_id] = agent
        if agent.kind == AgentKind.PLACE and agent.place_id:
            self._place_id_index[agent.place_id] = agent.agent_id
        else:
            self._place_name_index[agent.place_name] = agent.agent_id

        self.logger.info(f"Registered: {agent.agent_id}")
        return agent

    def unregister(self, agent_id: str) -> Optional[Agent]:
        """Remove an agent by id. Returns the removed agent, if any."""
        agent = self._agents.pop(AgentId(agent_id), None)
        if agent is None:
            return None
        self._drop_index(agent)
        self.logger.info(f"Unregistered: {agent_id}")
        return agent

    def _drop_index(self, agent: Agent) -> None:
        if agent.kind == AgentKind.PLACE and agent.place_id:
            if self._place_id_index.get(agent.place_id) == agent.agent_id:
                del self._place_id_index[agent.place_id]
        elif self._place_name_index.get(agent.place_name) == agent.agent_id:
            del self._place_name_index[agent.place_name]

    def heartbeat(self, agent_id: str) -> bool:
        agent = self._agents.get(AgentId(agent_id))
        if agent is None:
            return False
        agent.last_heartbeat = self._clock()
        return True

    def get(self, agent_id: str) -> Optional[Agent]:
        return self._agents.get(AgentId(agent_id))

    def get_by_place_id(self, place_id: int) -> Optional[Agent]:
        agent_id = self._place_id_index.get(place_id)
        return self._agents.get(agent_id) if agent_id else None

    def get_by_place_name(self, place_name: str) -> Optional[Agent]:
        """Look up a local (non-cloud) agent by its place name."""
        agent_id = self._place_name_index.get(place_name)
        return self._agents.get(agent_id) if agent_id else None

    def get_all(self) -> list[Agent]:
        return list(self._agents.values())

    def __len__(self) -> int:
        return len(self._agents)

    def append_log(self, agent_id: str, entry: LogEntry) -> bool:
        """Append a log entry; the oldest entry is evicted past capacity."""
        agent = self._agents.get(AgentId(agent_id))
        if agent is None:
            return False
        agent.logs.append(entry)
        return True

    def get_logs(self, agent_id: str, limit: int = 100) -> list[LogEntry]:
        """Return the most recent ``limit`` log entries, oldest first."""
        agent = self._agents.get(AgentId(agent_id))
        if agent is None or limit <= 0:
            return []
        logs = list(agent.logs)
        return logs[-limit:]
