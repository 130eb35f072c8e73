# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from starlette.requests import Request

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ClientDisconnected(Exception):
    """The HTTP client went away before the long-poll resolved."""


async def _wait_for_disconnect(request: Request) -> None:
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


async def hold_until_resolved(request: Request, work: Awaitable[T]) -> T:
    """
    Await ``work`` while watching the client connection.

    If the client disconnects first, ``work`` is cancelled so the hub can
    release its parked state, and ClientDisconnected is raised.
    """
    work_task = asyncio.ensure_future(work)
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        done, _ = await asyncio.wait({work_task, watcher}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work_task.cancel()
        watcher.cancel()
        raise

    if work_task in done:
        watcher.cancel()
        return work_task.result()

    work_task.cancel()
    try:
        await work_task
    except asyncio.CancelledError:
        pass
    logger.debug(f"Client disconnected from {request.url.path}")
    raise ClientDisconnected(request.url.path)
