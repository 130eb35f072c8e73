from __future__ import annotations

# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia
from typing import Any

from pydantic import BaseModel, Field


class EventModel(BaseModel):
    type: str               = Field(..., description="agent_connected or agent_disconnected")
    data: dict[str, Any]    = Field(default_factory=dict)
    timestamp: int          = Field(..., description="Epoch milliseconds; use the largest seen as the next watermark")


class EventsResponse(BaseModel):
    events: list[EventModel] = Field(default_factory=list)


class InitResponse(BaseModel):
    agents: list[dict[str, Any]] = Field(default_factory=list)
