# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import Response

from studiohub.api.utils.auto_load import RouterRegistrar
from studiohub.api.utils.long_poll import ClientDisconnected
from studiohub.config.system_config_settings import SystemConfigSettings
from studiohub.hub.manager import get_hub_manager, init_hub_manager
from studiohub.startup.startup import StartUp
from studiohub.version import __version__

StartUp.initialize()

init_hub_manager(
    max_logs=SystemConfigSettings.max_logs(),
    max_events=SystemConfigSettings.max_events(),
    heartbeat_timeout=SystemConfigSettings.heartbeat_timeout(),
    sweep_interval=SystemConfigSettings.sweep_interval(),
)

fast_api_description = """
**Studio Hub: long-poll command dispatch for remote editor agents**

Agents (editor plugins) long-poll the hub for commands and post results back;
clients execute code against a chosen agent and wait for its result; observers
long-poll a bounded event stream to follow agents connecting and leaving.

**Core capabilities include:**
- Agent registry keyed by cloud place id or local file, with bounded log history
- Push-style command delivery emulated over HTTP long-polling
- Correlation of asynchronous results with per-call execution deadlines
- Heartbeat-based liveness sweep reclaiming agents that vanish
"""


@asynccontextmanager
async def lifespan(_app: FastAPI):
    hub = get_hub_manager()
    if hub is not None:
        hub.start()
    yield
    hub = get_hub_manager()
    if hub is not None:
        await hub.stop()


app = FastAPI(
    title="Studio Hub REST API",
    version=__version__,
    description=fast_api_description,
    openapi_url="/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    """Lightweight health endpoint for probes."""
    return {"status": "ok", "version": __version__}


@app.exception_handler(ClientDisconnected)
async def client_disconnected(_request: Request, _exc: ClientDisconnected) -> Response:
    # Nobody is listening any more; the body is never read
    return Response(status_code=HTTPStatus.NO_CONTENT)

app.add_middleware(GZipMiddleware, minimum_size=100_000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

RouterRegistrar().register(app)
