# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import pytest

from studiohub.hub.exceptions import HubValidationError
from studiohub.hub.models import AgentIdentity, AgentKind, LogEntry
from studiohub.hub.registry import AgentRegistry


def _entry(i: int) -> LogEntry:
    return LogEntry(timestamp=i, source="server", level="info", message=f"line {i}")


def test_place_id_takes_priority_over_path_and_name() -> None:
    """
    Verify Cloud Places Are Keyed By Place Id Even When A Path Is Reported.
    """
    identity = AgentIdentity(place_name="Demo", place_id=42, local_path="/tmp/demo.rbxl")
    assert identity.agent_id() == "place:42"
    assert identity.kind == AgentKind.PLACE


def test_local_agents_keyed_by_path_then_name() -> None:
    assert AgentIdentity(place_name="Demo", local_path="/tmp/demo.rbxl").agent_id() == "path:/tmp/demo.rbxl"
    assert AgentIdentity(place_name="Demo").agent_id() == "local:Demo"
    assert AgentIdentity(place_name="Demo").kind == AgentKind.LOCAL


def test_identity_without_any_key_is_rejected() -> None:
    with pytest.raises(HubValidationError):
        AgentIdentity(place_name="").agent_id()


@pytest.mark.parametrize(
    "ref, expected",
    [
        ("place:42", "place:42"),
        ("42", "place:42"),
        (" 42 ", "place:42"),
        ("Demo", "local:Demo"),
        ("local:Demo", "local:Demo"),
        ("path:/tmp/demo.rbxl", "path:/tmp/demo.rbxl"),
    ],
)
def test_resolve_agent_id(ref: str, expected: str) -> None:
    assert AgentRegistry.resolve_agent_id(ref) == expected


def test_register_and_lookup_indexes() -> None:
    """
    Ensure Registered Agents Are Reachable By Id, Place Id And Place Name.
    """
    registry = AgentRegistry()
    cloud = registry.register(AgentIdentity(place_name="Cloud", place_id=7, game_id=99, creator_name="Builder"))
    local = registry.register(AgentIdentity(place_name="Scratch"))

    assert registry.get("place:7") is cloud
    assert registry.get_by_place_id(7) is cloud
    assert registry.get_by_place_name("Scratch") is local
    assert registry.get_by_place_name("Cloud") is None
    assert cloud.game_id == 99
    assert cloud.user_id is None
    assert {a.agent_id for a in registry.get_all()} == {"place:7", "local:Scratch"}


def test_register_overwrites_prior_session_and_discards_logs() -> None:
    registry = AgentRegistry()
    first = registry.register(AgentIdentity(place_name="Demo", place_id=42))
    registry.append_log("place:42", _entry(1))

    second = registry.register(AgentIdentity(place_name="Demo renamed", place_id=42))

    assert second is not first
    assert registry.get("place:42") is second
    assert registry.get_logs("place:42") == []
    assert len(registry) == 1


def test_heartbeat_updates_only_liveness() -> None:
    now = [1000.0]
    registry = AgentRegistry(clock=lambda: now[0])
    agent = registry.register(AgentIdentity(place_name="Demo", place_id=42))

    now[0] = 1010.0
    assert registry.heartbeat("place:42") is True
    assert agent.last_heartbeat == 1010.0
    assert agent.connected_at == 1000.0
    assert registry.heartbeat("place:404") is False


def test_unregister_removes_agent_and_indexes() -> None:
    registry = AgentRegistry()
    registry.register(AgentIdentity(place_name="Demo", place_id=42))

    removed = registry.unregister("place:42")

    assert removed is not None and removed.agent_id == "place:42"
    assert registry.get("place:42") is None
    assert registry.get_by_place_id(42) is None
    assert registry.unregister("place:42") is None


def test_log_history_keeps_latest_500_in_order() -> None:
    """
    After 501 Appends Exactly The Most Recent 500 Entries Remain, Oldest First.
    """
    registry = AgentRegistry()
    registry.register(AgentIdentity(place_name="Demo", place_id=42))

    for i in range(501):
        registry.append_log("place:42", _entry(i))

    logs = registry.get_logs("place:42", limit=1000)
    assert len(logs) == 500
    assert [e.timestamp for e in logs] == list(range(1, 501))


def test_get_logs_limit_returns_tail() -> None:
    registry = AgentRegistry()
    registry.register(AgentIdentity(place_name="Demo"))
    for i in range(10):
        registry.append_log("local:Demo", _entry(i))

    assert [e.timestamp for e in registry.get_logs("local:Demo", limit=3)] == [7, 8, 9]
    assert registry.get_logs("local:Missing") == []


def test_append_log_to_unknown_agent_is_noop() -> None:
    registry = AgentRegistry()
    assert registry.append_log("place:1", _entry(0)) is False
