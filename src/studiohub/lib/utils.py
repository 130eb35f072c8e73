# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia

from __future__ import annotations

import time
import uuid
from enum import Enum

from studiohub.lib.types import CorrelationId, EpochMillis


class TimeUnit(Enum):
    SECONDS      = "s"
    MILLISECONDS = "ms"


class Generate:

    @staticmethod
    def time_stamp(unit: TimeUnit = TimeUnit.MILLISECONDS) -> EpochMillis:
        """
        Return The Current Wall-Clock Timestamp In The Specified Unit.
        """
        return EpochMillis(
            time.time_ns() // 1_000_000
            if unit == TimeUnit.MILLISECONDS
            else int(time.time())
        )

    @staticmethod
    def correlation_id() -> CorrelationId:
        """
        Generate A Globally Unique, Single-Use Correlation Identifier (uuid4).
        """
        return CorrelationId(str(uuid.uuid4()))
