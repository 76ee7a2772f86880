from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)


class EventWaiter:
    """Single-shot "wait for one of N controls" registrations for one session.

    Contract:
      - `await_one(ids)` arms a fresh registration per id and suspends until one fires.
      - `fire(id)` resolves the wait for the first id only; later fires in the same race are no-ops.
      - once the race ends (or the waiting task is cancelled) every registration it made is removed.

    Form values (e.g. the name text box) travel with a fire and are read back with `field()`.
    """

    def __init__(self) -> None:
        self._waiting: dict[str, asyncio.Future[str]] = {}
        self._fields: dict[str, str] = {}

    @property
    def pending_ids(self) -> frozenset[str]:
        # A fired race stays registered until its waiter resumes; it is no longer pending.
        return frozenset(k for k, f in self._waiting.items() if not f.done())

    def field(self, name: str, default: str = "") -> str:
        return self._fields.get(name, default)

    def clear_fields(self) -> None:
        self._fields.clear()

    async def await_one(self, candidate_ids: Iterable[str]) -> str:
        ids = set(candidate_ids)
        if not ids:
            raise ValueError("await_one needs at least one candidate id")

        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        for trigger_id in ids:
            self._waiting[trigger_id] = future

        try:
            return await future
        finally:
            for trigger_id in ids:
                if self._waiting.get(trigger_id) is future:
                    del self._waiting[trigger_id]

    def fire(self, trigger_id: str, fields: Mapping[str, str] | None = None) -> bool:
        """Deliver one click. Returns True if it resolved a pending wait."""

        future = self._waiting.get(trigger_id)
        if future is None or future.done():
            logger.debug("Ignoring trigger %r (no pending wait)", trigger_id)
            return False

        # Only an accepted click may change form values.
        if fields:
            self._fields.update({str(k): str(v) for k, v in fields.items()})
        future.set_result(trigger_id)
        return True
