# Studio Hub Agent API Routes
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import logging
from http import HTTPStatus

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import ValidationError

from studiohub.api.routes.agent.schemas import (
    AckResponse,
    AgentInfo,
    LogRequest,
    PollResponse,
    ResultRequest,
)
from studiohub.api.utils.long_poll import hold_until_resolved
from studiohub.config.system_config_settings import SystemConfigSettings
from studiohub.hub.exceptions import AgentNotFoundError, HubValidationError
from studiohub.hub.manager import HubManager, get_hub_manager
from studiohub.lib.fastapi_constants import FAST_API_RESPONSE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agent", tags=["agent"])


def _hub() -> HubManager:
    hub = get_hub_manager()
    if hub is None:
        raise HTTPException(status_code=HTTPStatus.SERVICE_UNAVAILABLE, detail="Hub manager not initialized")
    return hub


def _parse_agent_info(raw: str | None) -> AgentInfo:
    if not raw:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail="agentInfo is required")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail="Invalid agentInfo JSON") from e
    if not isinstance(data, dict) or not data.get("placeName"):
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail="placeName is required")
    try:
        return AgentInfo.model_validate(data)
    except ValidationError as e:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=f"Invalid agentInfo: {e.errors()[0]['msg']}") from e


@router.get("/poll", response_model=PollResponse, responses=FAST_API_RESPONSE)
async def poll(request: Request,
               agentInfo: str | None = Query(default=None, description="JSON-encoded agent identity"),
               timeout: int | None = Query(default=None, ge=0, description="Seconds to hold the request")):
    """
    Long-poll for commands.

    Doubles as registration and heartbeat. A newer poll for the same agent
    completes this one with a ``disconnect`` command; a quiet period returns
    an empty command list.
    """
    hub = _hub()
    info = _parse_agent_info(agentInfo)
    hold = timeout if timeout else SystemConfigSettings.poll_timeout()

    try:
        identity = info.to_identity()
        agent_id, commands = await hold_until_resolved(request, hub.poll(identity, hold))
    except HubValidationError as e:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(e)) from e

    return PollResponse(agentId=agent_id, commands=[c.to_dict() for c in commands])


@router.post("/result", response_model=AckResponse, responses=FAST_API_RESPONSE)
async def submit_result(body: ResultRequest) -> AckResponse:
    """
    Post the result of a command.

    Always acknowledged: results for unknown, expired or already answered
    commands are dropped silently.
    """
    hub = _hub()
    try:
        hub.submit_result(body.id or "", body.payload)
    except HubValidationError as e:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(e)) from e
    return AckResponse(success=True)


@router.post("/log", response_model=AckResponse, responses=FAST_API_RESPONSE)
async def submit_log(body: LogRequest) -> AckResponse:
    """Append log lines to an agent's history and, optionally, to a running command."""
    hub = _hub()
    try:
        accepted = hub.append_logs(body.agentId or "",
                                   [e.to_entry() for e in body.entries],
                                   correlation_id=body.correlationId)
    except HubValidationError as e:
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(e)) from e
    except AgentNotFoundError as e:
        logger.warning(f"Log lines for unknown agent dropped: {e.agent_id}")
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=str(e)) from e
    return AckResponse(success=True, accepted=accepted)
