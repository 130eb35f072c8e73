# Studio Hub Exceptions
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations


class HubError(Exception):
    """Base class for hub failures surfaced to HTTP callers."""


class HubValidationError(HubError, ValueError):
    """Malformed or missing identity or request fields."""


class AgentNotFoundError(HubError, LookupError):
    """The referenced agent is not registered."""

    def __init__(self, agent_id: str) -> None:
        super().__init__(f"Agent not found: {agent_id}")
        self.agent_id = agent_id
