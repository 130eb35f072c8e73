# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import asyncio
from http import HTTPStatus
from types import SimpleNamespace
from typing import Any

import pytest

from studiohub.api.utils.long_poll import ClientDisconnected, hold_until_resolved
from studiohub.hub.manager import HubManager
from studiohub.hub.models import AgentIdentity

DEMO = AgentIdentity(place_name="Demo", place_id=42)


class FakeRequest:
    """Minimal ASGI request whose client hangs up when ``hang_up()`` is called."""

    def __init__(self, path: str) -> None:
        self.url = SimpleNamespace(path=path)
        self._gone = asyncio.Event()

    def hang_up(self) -> None:
        self._gone.set()

    async def receive(self) -> dict[str, Any]:
        await self._gone.wait()
        return {"type": "http.disconnect"}


@pytest.mark.asyncio
async def test_disconnect_cancels_parked_poll() -> None:
    """
    Verify A Dropped Agent Connection Releases Its Suspended Poll.
    """
    hub = HubManager()
    request = FakeRequest("/api/agent/poll")

    held = asyncio.create_task(hold_until_resolved(request, hub.poll(DEMO, timeout=5)))
    await asyncio.sleep(0.01)
    assert hub.dispatcher.is_waiting("place:42")

    request.hang_up()
    with pytest.raises(ClientDisconnected):
        await asyncio.wait_for(held, 1)

    assert not hub.dispatcher.is_waiting("place:42")
    assert "place:42" not in hub.dispatcher._waiting


@pytest.mark.asyncio
async def test_disconnect_cancels_execute_and_withdraws_command() -> None:
    """
    Verify A Dropped Client Releases The Correlation And The Queued Command.
    """
    hub = HubManager()
    await hub.poll(DEMO, timeout=0.01)
    request = FakeRequest("/api/execute")

    held = asyncio.create_task(hold_until_resolved(request, hub.execute("place:42", "return 1", timeout=5)))
    await asyncio.sleep(0.01)
    assert hub.correlator.pending_count() == 1
    assert hub.dispatcher.queue_depth("place:42") == 1

    request.hang_up()
    with pytest.raises(ClientDisconnected):
        await asyncio.wait_for(held, 1)

    assert hub.correlator.pending_count() == 0
    assert hub.dispatcher.queue_depth("place:42") == 0


@pytest.mark.asyncio
async def test_result_is_returned_while_client_stays_connected() -> None:
    request = FakeRequest("/api/agent/poll")

    async def work() -> str:
        return "done"

    assert await hold_until_resolved(request, work()) == "done"


@pytest.mark.asyncio
async def test_dropped_client_gets_no_content_response() -> None:
    from studiohub.api.main import client_disconnected

    response = await client_disconnected(FakeRequest("/api/execute"), ClientDisconnected("/api/execute"))

    assert response.status_code == HTTPStatus.NO_CONTENT
