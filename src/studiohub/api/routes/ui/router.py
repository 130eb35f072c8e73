# Studio Hub Observer API Routes
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from http import HTTPStatus

from fastapi import APIRouter, HTTPException, Query, Request

from studiohub.api.routes.ui.schemas import EventModel, EventsResponse, InitResponse
from studiohub.api.utils.long_poll import hold_until_resolved
from studiohub.config.system_config_settings import SystemConfigSettings
from studiohub.hub.manager import HubManager, get_hub_manager

router = APIRouter(prefix="/api/ui", tags=["ui"])


def _hub() -> HubManager:
    hub = get_hub_manager()
    if hub is None:
        raise HTTPException(status_code=HTTPStatus.SERVICE_UNAVAILABLE, detail="Hub manager not initialized")
    return hub


@router.get("/poll", response_model=EventsResponse)
async def poll_events(request: Request,
                      since: int = Query(default=0, description="Watermark: last event timestamp seen"),
                      timeout: int | None = Query(default=None, ge=0, description="Seconds to hold the request")):
    """Long-poll for hub events newer than ``since``."""
    hub = _hub()
    hold = timeout if timeout else SystemConfigSettings.poll_timeout()
    events = await hold_until_resolved(request, hub.subscribe(since, hold))
    return EventsResponse(events=[EventModel(**e.to_dict()) for e in events])


@router.get("/init", response_model=InitResponse)
async def init_snapshot() -> InitResponse:
    """Snapshot of registered agents for a freshly loaded observer."""
    return InitResponse(agents=[a.to_dict() for a in _hub().list_agents()])
