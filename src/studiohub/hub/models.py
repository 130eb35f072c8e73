# Studio Hub Models
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from studiohub.hub.exceptions import HubValidationError
from studiohub.lib.types import AgentId, CorrelationId, EpochMillis, JsonObject, StringEnum
from studiohub.lib.utils import Generate

REPLACED_REASON = "Replaced by new connection"


class AgentKind(StringEnum):
    PLACE = "place"
    LOCAL = "local"


class ExecuteMode(StringEnum):
    EVAL = "eval"
    RUN  = "run"
    PLAY = "play"


class CommandKind(StringEnum):
    EXECUTE    = "execute"
    DISCONNECT = "disconnect"


class EventKind(StringEnum):
    AGENT_CONNECTED    = "agent_connected"
    AGENT_DISCONNECTED = "agent_disconnected"


@dataclass(frozen=True)
class AgentIdentity:
    """Identity descriptor an agent sends with every poll."""
    place_name: str
    place_id: int = 0
    creator_name: Optional[str] = None
    creator_type: Optional[str] = None
    game_id: int = 0
    user_id: int = 0
    local_path: Optional[str] = None

    @property
    def kind(self) -> AgentKind:
        return AgentKind.PLACE if self.place_id > 0 else AgentKind.LOCAL

    def agent_id(self) -> AgentId:
        """
        Derive the stable agent id.

        Cloud places are keyed by place id; local files by path when the
        plugin reports one, otherwise by display name.
        """
        if self.place_id > 0:
            return AgentId(f"place:{self.place_id}")
        if self.local_path:
            return AgentId(f"path:{self.local_path}")
        if not self.place_name:
            raise HubValidationError("placeName is required")
        return AgentId(f"local:{self.place_name}")


@dataclass(frozen=True)
class LogEntry:
    timestamp: EpochMillis
    source: str
    level: str
    message: str

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp,
            'source': self.source,
            'level': self.level,
            'message': self.message,
        }


@dataclass
class Agent:
    """Represents a registered remote agent."""
    agent_id: AgentId
    kind: AgentKind
    place_name: str
    place_id: Optional[int] = None
    creator_name: Optional[str] = None
    creator_type: Optional[str] = None
    game_id: Optional[int] = None
    user_id: Optional[int] = None
    local_path: Optional[str] = None
    connected_at: float = field(default_factory=time.time)
    last_heartbeat: float = field(default_factory=time.time)
    logs: deque[LogEntry] = field(default_factory=deque)

    @classmethod
    def from_identity(cls, identity: AgentIdentity, max_logs: int) -> Agent:
        return cls(
            agent_id=identity.agent_id(),
            kind=identity.kind,
            place_name=identity.place_name,
            place_id=identity.place_id if identity.place_id > 0 else None,
            creator_name=identity.creator_name,
            creator_type=identity.creator_type,
            game_id=identity.game_id if identity.game_id > 0 else None,
            user_id=identity.user_id if identity.user_id > 0 else None,
            local_path=identity.local_path or None,
            logs=deque(maxlen=max_logs),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            'id': self.agent_id,
            'type': self.kind.value,
            'placeId': self.place_id,
            'placeName': self.place_name,
            'creatorName': self.creator_name,
            'creatorType': self.creator_type,
            'gameId': self.game_id,
            'userId': self.user_id,
            'localPath': self.local_path,
            'connectedAt': datetime.fromtimestamp(self.connected_at, tz=timezone.utc).isoformat(),
            'lastHeartbeat': int(self.last_heartbeat * 1000),
        }


@dataclass(frozen=True)
class PendingCommand:
    """A command waiting for delivery to its agent's poll."""
    command_id: CorrelationId
    kind: CommandKind
    payload: Any
    created_at: EpochMillis = field(default_factory=Generate.time_stamp)

    @classmethod
    def replacement_notice(cls) -> PendingCommand:
        return cls(
            command_id=Generate.correlation_id(),
            kind=CommandKind.DISCONNECT,
            payload={'reason': REPLACED_REASON},
        )

    def to_dict(self) -> dict:
        return {
            'id': self.command_id,
            'type': self.kind.value,
            'payload': self.payload,
            'createdAt': self.created_at,
        }


@dataclass(frozen=True)
class Event:
    kind: EventKind | str
    payload: JsonObject
    timestamp: EpochMillis

    def to_dict(self) -> dict:
        return {
            'type': self.kind.value if isinstance(self.kind, EventKind) else self.kind,
            'data': self.payload,
            'timestamp': self.timestamp,
        }
