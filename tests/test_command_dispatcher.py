# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import asyncio

import pytest

from studiohub.hub.dispatcher import CommandDispatcher
from studiohub.hub.models import (
    REPLACED_REASON,
    Agent,
    AgentIdentity,
    CommandKind,
    PendingCommand,
)
from studiohub.hub.registry import AgentRegistry
from studiohub.lib.types import CorrelationId

DEMO = AgentIdentity(place_name="Demo", place_id=42)
OTHER = AgentIdentity(place_name="Other", place_id=7)


def _command(name: str) -> PendingCommand:
    return PendingCommand(command_id=CorrelationId(name), kind=CommandKind.EXECUTE, payload={"code": name})


@pytest.fixture()
def dispatcher() -> CommandDispatcher:
    return CommandDispatcher(AgentRegistry())


@pytest.mark.asyncio
async def test_poll_registers_agent_and_notifies_once() -> None:
    connected: list[Agent] = []
    registry = AgentRegistry()
    dispatcher = CommandDispatcher(registry, on_connect=connected.append)

    assert await dispatcher.poll("place:42", DEMO, timeout=0.01) == []
    assert await dispatcher.poll("place:42", DEMO, timeout=0.01) == []

    assert registry.get("place:42") is not None
    assert [a.agent_id for a in connected] == ["place:42"]


@pytest.mark.asyncio
async def test_queued_commands_drain_per_agent_in_order(dispatcher: CommandDispatcher) -> None:
    """
    Commands For Distinct Agents Never Cross; Each Sees Its Own In Submission Order.
    """
    await dispatcher.poll("place:42", DEMO, timeout=0.01)
    await dispatcher.poll("place:7", OTHER, timeout=0.01)

    for name in ("a1", "b1", "a2", "b2", "a3"):
        target = "place:42" if name.startswith("a") else "place:7"
        assert dispatcher.enqueue(target, _command(name)) is False

    a_batch = await dispatcher.poll("place:42", DEMO, timeout=1)
    b_batch = await dispatcher.poll("place:7", OTHER, timeout=1)

    assert [c.command_id for c in a_batch] == ["a1", "a2", "a3"]
    assert [c.command_id for c in b_batch] == ["b1", "b2"]
    assert dispatcher.queue_depth("place:42") == 0


@pytest.mark.asyncio
async def test_enqueue_wakes_suspended_poll(dispatcher: CommandDispatcher) -> None:
    task = asyncio.create_task(dispatcher.poll("place:42", DEMO, timeout=5))
    await asyncio.sleep(0)
    assert dispatcher.is_waiting("place:42")

    command = _command("wake")
    assert dispatcher.enqueue("place:42", command) is True

    assert await asyncio.wait_for(task, 1) == [command]
    assert not dispatcher.is_waiting("place:42")
    assert dispatcher.queue_depth("place:42") == 0


@pytest.mark.asyncio
async def test_suspended_poll_times_out_with_keepalive(dispatcher: CommandDispatcher) -> None:
    assert await dispatcher.poll("place:42", DEMO, timeout=0.05) == []
    assert not dispatcher.is_waiting("place:42")


@pytest.mark.asyncio
async def test_new_poll_replaces_suspended_poll(dispatcher: CommandDispatcher) -> None:
    """
    A Second Poll Completes The First With A Replacement Notice, Then Proceeds Normally.
    """
    old = asyncio.create_task(dispatcher.poll("place:42", DEMO, timeout=5))
    await asyncio.sleep(0)

    new = asyncio.create_task(dispatcher.poll("place:42", DEMO, timeout=5))
    replaced = await asyncio.wait_for(old, 1)

    assert len(replaced) == 1
    assert replaced[0].kind == CommandKind.DISCONNECT
    assert replaced[0].payload == {"reason": REPLACED_REASON}

    await asyncio.sleep(0)
    assert dispatcher.is_waiting("place:42")
    command = _command("after-replace")
    dispatcher.enqueue("place:42", command)
    assert await asyncio.wait_for(new, 1) == [command]


@pytest.mark.asyncio
async def test_cancelled_poll_releases_suspension(dispatcher: CommandDispatcher) -> None:
    task = asyncio.create_task(dispatcher.poll("place:42", DEMO, timeout=5))
    await asyncio.sleep(0)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert not dispatcher.is_waiting("place:42")
    assert dispatcher.enqueue("place:42", _command("late")) is False
    assert dispatcher.queue_depth("place:42") == 1


@pytest.mark.asyncio
async def test_commands_handed_to_cancelled_poll_are_requeued(dispatcher: CommandDispatcher) -> None:
    await dispatcher.poll("place:42", DEMO, timeout=0.01)
    dispatcher.enqueue("place:42", _command("queued"))
    # Drain so the next poll parks
    await dispatcher.poll("place:42", DEMO, timeout=1)

    task = asyncio.create_task(dispatcher.poll("place:42", DEMO, timeout=5))
    await asyncio.sleep(0)
    dispatcher.enqueue("place:42", _command("in-flight"))
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    dispatcher.enqueue("place:42", _command("next"))
    batch = await dispatcher.poll("place:42", DEMO, timeout=1)
    assert [c.command_id for c in batch] == ["in-flight", "next"]


@pytest.mark.asyncio
async def test_discard_drops_queue_and_detaches_poll(dispatcher: CommandDispatcher) -> None:
    await dispatcher.poll("place:7", OTHER, timeout=0.01)
    dispatcher.enqueue("place:7", _command("x"))
    dispatcher.enqueue("place:7", _command("y"))
    assert dispatcher.discard("place:7") == 2
    assert dispatcher.queue_depth("place:7") == 0

    task = asyncio.create_task(dispatcher.poll("place:42", DEMO, timeout=0.05))
    await asyncio.sleep(0)
    dispatcher.discard("place:42")
    assert not dispatcher.is_waiting("place:42")
    assert await asyncio.wait_for(task, 1) == []


@pytest.mark.asyncio
async def test_withdraw_removes_only_the_named_command(dispatcher: CommandDispatcher) -> None:
    await dispatcher.poll("place:42", DEMO, timeout=0.01)
    for name in ("a", "b", "c"):
        dispatcher.enqueue("place:42", _command(name))

    assert dispatcher.withdraw("place:42", "b") is True
    assert dispatcher.withdraw("place:42", "b") is False
    assert dispatcher.withdraw("place:7", "a") is False

    commands = await dispatcher.poll("place:42", DEMO, timeout=0.01)
    assert [c.command_id for c in commands] == ["a", "c"]
