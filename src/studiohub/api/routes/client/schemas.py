from __future__ import annotations

# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia
from typing import Any

from pydantic import BaseModel, Field

from studiohub.hub.models import ExecuteMode


class ExecuteRequest(BaseModel):
    """
    Run code on one agent and wait for its result.

    Attributes:
        agentId (str): Canonical id ("place:42", "local:Demo") or a bare place id / name.
        code (str): Source to run inside the agent.
        mode (ExecuteMode): eval, run or play.
        timeout (float, optional): Seconds to wait for the result; hub default when omitted.
    """
    agentId: str | None     = Field(default=None, description="Target agent id or bare place id / name")
    code: str | None        = Field(default=None, description="Code to execute")
    mode: str               = Field(default=ExecuteMode.EVAL.value, description="Execution mode: eval, run or play")
    timeout: float | None   = Field(default=None, gt=0, description="Seconds to wait for the result")


class AgentSummary(BaseModel):
    id: str
    type: str
    placeId: int | None     = None
    placeName: str
    creatorName: str | None = None
    creatorType: str | None = None
    gameId: int | None      = None
    userId: int | None      = None
    localPath: str | None   = None
    connectedAt: str
    lastHeartbeat: int


class AgentListResponse(BaseModel):
    agents: list[AgentSummary]  = Field(default_factory=list)
    count: int                  = 0


class LogsResponse(BaseModel):
    logs: list[dict[str, Any]]  = Field(default_factory=list)
