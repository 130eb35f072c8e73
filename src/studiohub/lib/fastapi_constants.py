# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

from typing import Any, cast

from studiohub.lib.types import HttpRtnCode

FAST_API_RESPONSE: dict[int | str, dict[str, Any]] = {
    cast(HttpRtnCode, 200): {
        "description": "JSON payload (command batch, event batch, execution outcome or projection)",
        "content": {
            "application/json": {},
        },
    },
    cast(HttpRtnCode, 400): {
        "description": "Bad request (missing or malformed identity or request fields)",
    },
    cast(HttpRtnCode, 404): {
        "description": "Agent not found (unknown or already evicted agent id)",
    },
    cast(HttpRtnCode, 500): {
        "description": "Server error",
    },
}
