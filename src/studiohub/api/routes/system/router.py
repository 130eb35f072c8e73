from __future__ import annotations

# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia
import logging
import platform
import sys
from enum import Enum
from http import HTTPStatus

from fastapi import APIRouter, HTTPException

from studiohub.api.routes.system.schemas import StatusResponse
from studiohub.config.system_config_settings import SystemConfigSettings
from studiohub.hub.manager import get_hub_manager
from studiohub.version import __version__


class SystemRouter:
    """
    FastAPI router for hub status:
      - GET /api/status : Version, port, uptime and state counts
    """
    def __init__(
        self,
        prefix: str = "/api",
        tags: list[str | Enum] = None) -> None:
        if tags is None:
            tags = ["system"]
        self.router = APIRouter(prefix=prefix, tags=tags)
        self.logger = logging.getLogger(__name__)
        self._register_routes()

    def _register_routes(self) -> None:
        @self.router.get("/status", response_model=StatusResponse, summary="Hub status")
        async def status() -> StatusResponse:
            hub = get_hub_manager()
            if hub is None:
                raise HTTPException(status_code=HTTPStatus.SERVICE_UNAVAILABLE, detail="Hub manager not initialized")
            return StatusResponse(
                version=__version__,
                port=SystemConfigSettings.port(),
                uptime=round(hub.uptime, 3),
                platform=sys.platform,
                pythonVersion=platform.python_version(),
                **hub.counts(),
            )

router = SystemRouter().router
