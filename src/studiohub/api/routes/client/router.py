from __future__ import annotations

# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia
import logging
from enum import Enum
from http import HTTPStatus
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from studiohub.api.routes.client.schemas import (
    AgentListResponse,
    AgentSummary,
    ExecuteRequest,
    LogsResponse,
)
from studiohub.api.utils.long_poll import hold_until_resolved
from studiohub.config.system_config_settings import SystemConfigSettings
from studiohub.hub.exceptions import AgentNotFoundError, HubValidationError
from studiohub.hub.manager import HubManager, get_hub_manager
from studiohub.lib.fastapi_constants import FAST_API_RESPONSE


class ClientRouter:
    """
    FastAPI router for client-facing endpoints:
      - GET  /api/agents            : List registered agents
      - GET  /api/agents/{id}       : Agent detail
      - GET  /api/agents/{id}/logs  : Recent agent log lines
      - POST /api/execute           : Run code on an agent and wait for the result
    """
    def __init__(
        self,
        prefix: str = "/api",
        tags: list[str | Enum] = None) -> None:
        if tags is None:
            tags = ["client"]
        self.router = APIRouter(prefix=prefix, tags=tags)
        self.logger = logging.getLogger(__name__)
        self._register_routes()

    @staticmethod
    def _hub() -> HubManager:
        hub = get_hub_manager()
        if hub is None:
            raise HTTPException(status_code=HTTPStatus.SERVICE_UNAVAILABLE, detail="Hub manager not initialized")
        return hub

    def _register_routes(self) -> None:
        @self.router.get("/agents", response_model=AgentListResponse, summary="List registered agents")
        async def list_agents() -> AgentListResponse:
            agents = [AgentSummary(**a.to_dict()) for a in self._hub().list_agents()]
            return AgentListResponse(agents=agents, count=len(agents))

        @self.router.get("/agents/{agent_ref:path}/logs", response_model=LogsResponse,
                         summary="Recent agent log lines", responses=FAST_API_RESPONSE)
        async def agent_logs(agent_ref: str,
                             limit: int = Query(default=100, ge=1, description="Most recent N lines")) -> LogsResponse:
            logs = self._hub().get_logs(agent_ref, limit)
            return LogsResponse(logs=[entry.to_dict() for entry in logs])

        @self.router.get("/agents/{agent_ref:path}", response_model=AgentSummary,
                         summary="Agent detail", responses=FAST_API_RESPONSE)
        async def get_agent(agent_ref: str) -> AgentSummary:
            try:
                agent = self._hub().require_agent(agent_ref)
            except (HubValidationError, AgentNotFoundError) as exc:
                raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc)) from exc
            return AgentSummary(**agent.to_dict())

        @self.router.post("/execute",
                          summary="Execute code on an agent",
                          description="Dispatches code to the agent's next poll and waits for its result.",
                          responses=FAST_API_RESPONSE)
        async def execute(request: Request, body: ExecuteRequest) -> dict[str, Any]:
            """
            **Execute Code On A Connected Agent**

            The call returns the agent's result payload (``success``, ``result``,
            ``logs``, ``errors``) plus ``runtimeLogs`` streamed while it ran. When
            no result arrives in time the outcome is ``success: false`` with
            ``error: "Execution timeout"``; that is a normal response, not an HTTP error.
            """
            hub = self._hub()
            timeout = body.timeout or SystemConfigSettings.execute_timeout()
            try:
                return await hold_until_resolved(
                    request, hub.execute(body.agentId or "", body.code or "", body.mode, timeout))
            except HubValidationError as exc:
                raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(exc)) from exc
            except AgentNotFoundError as exc:
                self.logger.warning(str(exc))
                raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(exc)) from exc

router = ClientRouter().router
