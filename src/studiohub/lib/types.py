# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import NewType, TypeAlias

# Hub identifiers
AgentId         = NewType("AgentId", str)
CorrelationId   = NewType("CorrelationId", str)

# Wall-clock values
EpochMillis     = NewType("EpochMillis", int)

HttpRtnCode     = NewType("HttpRtnCode", int)

# Enum String Type
class StringEnum(str, Enum):
    """Py3.10-compatible StrEnum shim."""
    pass

# JSON payloads
JsonScalar: TypeAlias   = str | int | float | bool | None
JsonValue: TypeAlias    = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias   = dict[str, JsonValue]

# ────────────────────────────────────────────────────────────────────────────────
# Paths / filesystem
# ────────────────────────────────────────────────────────────────────────────────
PathLike        = str | Path
FileNameStr     = NewType("FileNameStr", str)
