# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import requests

from studiohub import cli


class FakeResponse:
    def __init__(self, status_code: int, body: dict[str, Any]) -> None:
        self.status_code = status_code
        self._body = body
        self.text = str(body)

    def json(self) -> dict[str, Any]:
        return self._body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(str(self.status_code))


def test_exec_posts_script_and_reports_success(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    script = tmp_path / "hello.lua"
    script.write_text("return 1 + 1", encoding="utf-8")
    sent: dict[str, Any] = {}

    def fake_post(url: str, json: dict[str, Any], timeout: float) -> FakeResponse:
        sent.update(url=url, body=json, timeout=timeout)
        return FakeResponse(200, {"success": True, "result": 2, "logs": {"server": ["ok"]}})

    monkeypatch.setattr(requests, "post", fake_post)

    args = cli.build_parser().parse_args(["--port", "4000", "exec", "place:42", str(script), "-m", "run"])
    assert args.func(args) == 0

    assert sent["url"] == "http://127.0.0.1:4000/api/execute"
    assert sent["body"] == {"agentId": "place:42", "code": "return 1 + 1", "mode": "run", "timeout": 30.0}
    out = capsys.readouterr().out
    assert "Execution succeeded" in out
    assert "ok" in out


def test_exec_reports_timeout_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    script = tmp_path / "spin.lua"
    script.write_text("while true do end", encoding="utf-8")
    monkeypatch.setattr(
        requests, "post",
        lambda url, json, timeout: FakeResponse(200, {"success": False, "error": "Execution timeout"}),
    )

    args = cli.build_parser().parse_args(["exec", "42", str(script)])
    assert args.func(args) == 1


def test_exec_missing_file(tmp_path: Path) -> None:
    args = cli.build_parser().parse_args(["exec", "42", str(tmp_path / "missing.lua")])
    assert args.func(args) == 1


def test_status_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(url: str, timeout: float) -> FakeResponse:
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "get", fake_get)
    args = cli.build_parser().parse_args(["status"])
    assert args.func(args) == 1


def test_invalid_mode_is_rejected() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["exec", "42", "file.lua", "-m", "debug"])
