from __future__ import annotations

# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from studiohub.hub.models import AgentIdentity, LogEntry
from studiohub.lib.utils import Generate


class AgentInfo(BaseModel):
    """
    Identity descriptor sent by an agent with every poll.

    Cloud places carry a positive ``placeId``; local files report ``placeId``
    0 and are keyed by ``localPath`` when present, otherwise by ``placeName``.
    """
    model_config = ConfigDict(populate_by_name=True)

    place_id: int           = Field(default=0, alias="placeId", description="Cloud place id, 0 for local files")
    place_name: str         = Field(..., alias="placeName", min_length=1, description="Place or local file display name")
    creator_name: str | None = Field(default=None, alias="creatorName", description="Creator display name")
    creator_type: str | None = Field(default=None, alias="creatorType", description="Creator type: User or Group")
    game_id: int            = Field(default=0, alias="gameId", description="Universe id, 0 when unknown")
    user_id: int            = Field(default=0, alias="userId", description="Logged-in user id, 0 when unknown")
    local_path: str | None   = Field(default=None, alias="localPath", description="Local file path, if any")

    def to_identity(self) -> AgentIdentity:
        return AgentIdentity(
            place_name=self.place_name,
            place_id=self.place_id,
            creator_name=self.creator_name,
            creator_type=self.creator_type,
            game_id=self.game_id,
            user_id=self.user_id,
            local_path=self.local_path,
        )


class PollResponse(BaseModel):
    agentId: str                    = Field(..., description="Resolved agent id")
    commands: list[dict[str, Any]]  = Field(default_factory=list, description="Commands to run, empty on keepalive")


class ResultRequest(BaseModel):
    id: str | None  = Field(default=None, description="Correlation id of the command being answered")
    payload: Any    = Field(default=None, description="Opaque result payload")


class LogEntryModel(BaseModel):
    timestamp: int | None   = Field(default=None, description="Epoch milliseconds; defaults to arrival time")
    source: str             = Field(default="plugin", description="Emitting side, e.g. server or client")
    level: str              = Field(default="info", description="Log level")
    message: str            = Field(..., description="Log line")

    def to_entry(self) -> LogEntry:
        return LogEntry(
            timestamp=self.timestamp if self.timestamp is not None else Generate.time_stamp(),
            source=self.source,
            level=self.level,
            message=self.message,
        )


class LogRequest(BaseModel):
    agentId: str | None         = Field(default=None, description="Agent id the lines belong to")
    correlationId: str | None   = Field(default=None, description="In-flight command the lines belong to")
    entries: list[LogEntryModel] = Field(default_factory=list)


class AckResponse(BaseModel):
    success: bool   = True
    accepted: int | None = None
