#!/usr/bin/env python3
# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

import requests
import uvicorn

from studiohub.version import __version__ as HUB_VERSION

HOST_DEFAULT = "127.0.0.1"
PORT_DEFAULT = int(os.environ.get("STUDIO_HUB_PORT", "35888"))


def _hub_url(args: argparse.Namespace, path: str) -> str:
    return f"http://{args.host}:{args.port}{path}"


def serve(args: argparse.Namespace) -> int:
    print(f"🌐 Launching Studio Hub on http://{args.host}:{args.port}")

    # The app reads its port from the environment for /api/status
    os.environ["STUDIO_HUB_PORT"] = str(args.port)

    uvicorn_args = {
        "app": "studiohub.api.main:app",
        "host": args.host,
        "port": args.port,
        # Keep-alive must outlive the longest long-poll hold
        "timeout_keep_alive": 120,
        "log_level": args.log_level,
        "access_log": not args.no_access_log,
    }

    if args.reload:
        reload_dirs = args.reload_dirs or ["src"]
        uvicorn_args.update(
            {
                "reload": True,
                "reload_dirs": reload_dirs,
            }
        )
        print(f"🔁 Auto-reload enabled. Watching: {', '.join(reload_dirs)}")

    uvicorn.run(**uvicorn_args)
    return 0


def status(args: argparse.Namespace) -> int:
    try:
        response = requests.get(_hub_url(args, "/api/status"), timeout=5)
        response.raise_for_status()
    except requests.RequestException as e:
        print(f"❌ Hub not reachable on port {args.port}: {e}", file=sys.stderr)
        return 1

    info = response.json()
    print(f"""
Studio Hub v{info['version']}

  Port:            {info['port']}
  Uptime:          {info['uptime']:.0f}s
  Agents:          {info['agents']}
  Pending results: {info['pendingResults']}
""")
    return 0


def execute(args: argparse.Namespace) -> int:
    path = Path(args.file).expanduser().resolve()
    if not path.exists():
        print(f"❌ File not found: {path}", file=sys.stderr)
        return 1

    code = path.read_text(encoding="utf-8")
    print(f"📤 Executing {path.name} on {args.agent_id} (mode: {args.mode})")

    body = {"agentId": args.agent_id, "code": code, "mode": args.mode, "timeout": args.timeout}
    try:
        # Leave headroom over the hub-side deadline
        response = requests.post(_hub_url(args, "/api/execute"), json=body, timeout=args.timeout + 10)
    except requests.RequestException as e:
        print(f"❌ Request failed: {e}", file=sys.stderr)
        print("   Make sure the Studio Hub service is running", file=sys.stderr)
        return 1

    result = response.json()
    if response.status_code != 200:
        print(f"❌ {result.get('detail', response.text)}", file=sys.stderr)
        return 1

    if not result.get("success"):
        print("❌ Execution failed", file=sys.stderr)
        if result.get("error"):
            print(f"   {result['error']}", file=sys.stderr)
        for side, message in (result.get("errors") or {}).items():
            print(f"\n{side} error:\n  {message}", file=sys.stderr)
        return 1

    print("✅ Execution succeeded")
    if result.get("result") is not None:
        print("\nResult:")
        print(json.dumps(result["result"], indent=2))
    for side, lines in (result.get("logs") or {}).items():
        if lines:
            print(f"\n{side} logs:")
            for line in lines:
                print(f"  {line}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="studio-hub",
        description="Run or talk to the Studio Hub long-poll command service."
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"{HUB_VERSION}",
        help="Show Studio Hub version and exit.",
    )
    parser.add_argument("--host", default=HOST_DEFAULT, help=f"Hub host (default: {HOST_DEFAULT})")
    parser.add_argument("--port", default=PORT_DEFAULT, type=int, help=f"Hub port (default: {PORT_DEFAULT})")

    sub = parser.add_subparsers(dest="command", required=True)

    serve_p = sub.add_parser("serve", help="Run the hub in the foreground.")
    serve_p.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Uvicorn log level (default: info).",
    )
    serve_p.add_argument("--no-access-log", action="store_true", help="Disable Uvicorn access log.")
    serve_p.add_argument("--reload", action="store_true", help="Enable auto-reload on file changes (dev only).")
    serve_p.add_argument(
        "--reload-dir",
        dest="reload_dirs",
        action="append",
        default=[],
        help="Directory to watch for changes. Can be passed multiple times. Default: src (when --reload)",
    )
    serve_p.set_defaults(func=serve)

    status_p = sub.add_parser("status", help="Show status of a running hub.")
    status_p.set_defaults(func=status)

    exec_p = sub.add_parser("exec", help="Execute a script file on a connected agent.")
    exec_p.add_argument("agent_id", help="Target agent, e.g. place:123456 or local:MyGame")
    exec_p.add_argument("file", help="Script file to execute")
    exec_p.add_argument("-m", "--mode", default="eval", choices=["eval", "run", "play"],
                        help="Execution mode (default: eval)")
    exec_p.add_argument("-t", "--timeout", default=30.0, type=float,
                        help="Seconds to wait for the result (default: 30)")
    exec_p.set_defaults(func=execute)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
