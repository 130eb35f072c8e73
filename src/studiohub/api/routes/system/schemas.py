from __future__ import annotations

# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia
from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    version: str            = Field(..., description="Hub version")
    port: int               = Field(..., description="Configured listening port")
    uptime: float           = Field(..., description="Seconds since the hub started")
    platform: str           = Field(..., description="Host platform")
    pythonVersion: str      = Field(..., description="Interpreter version")
    agents: int             = Field(default=0, description="Registered agents")
    pendingResults: int     = Field(default=0, description="Commands awaiting a result")
    subscribers: int        = Field(default=0, description="Parked observer polls")
    events: int             = Field(default=0, description="Events held in the ring")
