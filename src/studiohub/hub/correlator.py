# Studio Hub Result Correlator
# SPDX-License-Identifier: Apache-2.0
#
# Matches asynchronous agent results to the callers awaiting them

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from studiohub.lib.types import AgentId, CorrelationId, JsonObject
from studiohub.lib.utils import Generate

EXECUTION_TIMEOUT_ERROR = "Execution timeout"


@dataclass
class PendingResult:
    """An in-flight command awaiting its result."""
    correlation_id: CorrelationId
    future: asyncio.Future
    timer: Optional[asyncio.TimerHandle] = None
    agent_id: Optional[AgentId] = None
    runtime_logs: list[JsonObject] = field(default_factory=list)


class ResultCorrelator:
    """
    Correlation table of pending results.

    Every entry resolves exactly once: by ``submit``, by its deadline, or by
    ``fail_agent``. Anything arriving afterwards is ignored.
    """

    def __init__(self) -> None:
        self._pending: dict[CorrelationId, PendingResult] = {}
        self.logger = logging.getLogger(f'{__name__}.ResultCorrelator')

    def open(self, timeout: float, agent_id: Optional[str] = None) -> tuple[CorrelationId, asyncio.Future]:
        """Mint a correlation id with a deadline and return the future to await."""
        loop = asyncio.get_running_loop()
        correlation_id = Generate.correlation_id()
        entry = PendingResult(
            correlation_id=correlation_id,
            future=loop.create_future(),
            agent_id=AgentId(agent_id) if agent_id else None,
        )
        entry.timer = loop.call_later(max(timeout, 0), self._expire, correlation_id)
        self._pending[correlation_id] = entry
        return correlation_id, entry.future

    def _resolve(self, correlation_id: str, outcome: JsonObject) -> bool:
        entry = self._pending.pop(CorrelationId(correlation_id), None)
        if entry is None:
            return False
        if entry.timer is not None:
            entry.timer.cancel()
        if entry.future.done():
            return False
        entry.future.set_result(outcome)
        return True

    def _expire(self, correlation_id: CorrelationId) -> None:
        entry = self._pending.get(correlation_id)
        if entry is None:
            return
        self.logger.warning(f"Execution timeout: {correlation_id}")
        self._resolve(correlation_id, {
            'success': False,
            'error': EXECUTION_TIMEOUT_ERROR,
            'runtimeLogs': list(entry.runtime_logs),
        })

    def submit(self, correlation_id: str, payload: Any) -> bool:
        """
        Resolve a pending result with the agent's payload.

        Unknown, expired or already-resolved ids are ignored. Returns True
        only when this call resolved the future.
        """
        entry = self._pending.get(CorrelationId(correlation_id))
        if entry is None:
            self.logger.debug(f"Result for unknown correlation id ignored: {correlation_id}")
            return False
        outcome: JsonObject = dict(payload) if isinstance(payload, dict) else {'result': payload}
        outcome['runtimeLogs'] = list(entry.runtime_logs)
        resolved = self._resolve(correlation_id, outcome)
        if resolved:
            self.logger.info(f"Result received: {correlation_id}")
        return resolved

    def append_log(self, correlation_id: str, entry: JsonObject) -> bool:
        pending = self._pending.get(CorrelationId(correlation_id))
        if pending is None:
            return False
        pending.runtime_logs.append(entry)
        return True

    def cancel(self, correlation_id: str) -> bool:
        """Release an entry whose caller stopped waiting."""
        entry = self._pending.pop(CorrelationId(correlation_id), None)
        if entry is None:
            return False
        if entry.timer is not None:
            entry.timer.cancel()
        if not entry.future.done():
            entry.future.cancel()
        return True

    def fail_agent(self, agent_id: str, error: str) -> int:
        """Fail every in-flight result owned by ``agent_id``."""
        owned = [cid for cid, entry in self._pending.items() if entry.agent_id == agent_id]
        for correlation_id in owned:
            entry = self._pending[correlation_id]
            self._resolve(correlation_id, {
                'success': False,
                'error': error,
                'runtimeLogs': list(entry.runtime_logs),
            })
        return len(owned)

    def is_pending(self, correlation_id: str) -> bool:
        return CorrelationId(correlation_id) in self._pending

    def pending_count(self) -> int:
        return len(self._pending)
