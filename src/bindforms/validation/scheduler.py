"""Per-field scheduling of the custom asynchronous check.

Every request first applies the synchronous result. The custom check is then throttled
per field with a leading and a trailing call: the first request in a window runs at once,
and the last one received during the window runs when it closes. Each request gets a
sequence number. A result that comes back after a newer request for the same field is
still applied, flagged as superseded, so the store can mark its async entries stale.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from bindforms import logger
from bindforms.async_runner import schedule
from bindforms.typing.models import FieldValidated
from bindforms.validation.rules import pre_validate, validate

if TYPE_CHECKING:
    from collections.abc import Callable

    from bindforms.typing.models import FormAction, FormItemValidations
    from bindforms.typing.protocol import CustomValidator


@dataclass(frozen=True)
class _Request:
    sequence: int
    generation: int
    rules: FormItemValidations
    check: CustomValidator
    value: Any


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class AsyncValidationScheduler:
    """Runs field validations and feeds their results back through ``dispatch``."""

    def __init__(self, dispatch: Callable[[FormAction], Any]) -> None:
        """Initialize the scheduler.

        Args:
            dispatch: Store entry point receiving ``FieldValidated`` actions.
        """
        self._dispatch = dispatch
        self._sequences: dict[str, int] = {}
        self._generations: dict[str, int] = {}
        self._last_started: dict[str, float] = {}
        self._pending: dict[str, _Request] = {}
        self._trailing: dict[str, asyncio.Task[None]] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    def latest_sequence(self, path: str) -> int:
        """Return the sequence number of the newest request for ``path`` (0 when none)."""
        return self._sequences.get(path, 0)

    def request(
        self,
        path: str,
        rules: FormItemValidations,
        check: CustomValidator | None,
        value: Any,
        *,
        wait_seconds: float = 0.0,
    ) -> None:
        """Validate ``value`` for the field at ``path``.

        The synchronous result is dispatched before this call returns. The custom check,
        when present, is scheduled for exactly this value.

        Args:
            path: Field path.
            rules: Field rule set.
            check: Custom asynchronous check, if any.
            value: Value captured at request time.
            wait_seconds: Throttle window of the field; 0 runs every request.
        """
        self._dispatch(FieldValidated(path=path, result=pre_validate(rules, check, value)))
        if check is None:
            return

        sequence = self.latest_sequence(path) + 1
        self._sequences[path] = sequence
        pending = _Request(
            sequence=sequence,
            generation=self._generations.get(path, 0),
            rules=rules,
            check=check,
            value=value,
        )

        loop = _running_loop()
        if loop is None or wait_seconds <= 0:
            self._start(path, pending)
            return

        elapsed = loop.time() - self._last_started.get(path, float("-inf"))
        if elapsed >= wait_seconds and path not in self._trailing:
            self._start(path, pending)
            return

        self._pending[path] = pending
        if path not in self._trailing:
            delay = max(wait_seconds - elapsed, 0.0)
            task = loop.create_task(self._run_trailing(path, delay))
            self._trailing[path] = task
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    def _start(self, path: str, pending: _Request) -> None:
        loop = _running_loop()
        if loop is not None:
            self._last_started[path] = loop.time()
        schedule(self._run(path, pending), tracked=self._tasks)

    async def _run_trailing(self, path: str, delay: float) -> None:
        await asyncio.sleep(delay)
        self._trailing.pop(path, None)
        pending = self._pending.pop(path, None)
        if pending is None:
            return
        self._last_started[path] = asyncio.get_running_loop().time()
        await self._run(path, pending)

    async def _run(self, path: str, pending: _Request) -> None:
        result = await validate(pending.rules, pending.check, pending.value)
        if pending.generation != self._generations.get(path, 0):
            logger.debug("Discarding validation for a cancelled field", extra={"path": path})
            return
        superseded = pending.sequence < self.latest_sequence(path)
        if superseded:
            logger.debug(
                "Applying superseded validation result",
                extra={"path": path, "sequence": pending.sequence, "latest": self._sequences[path]},
            )
        self._dispatch(FieldValidated(path=path, result=result, superseded=superseded))

    def cancel(self, path: str) -> None:
        """Drop pending work for ``path``; results still in flight are discarded."""
        self._generations[path] = self._generations.get(path, 0) + 1
        self._pending.pop(path, None)
        self._last_started.pop(path, None)
        trailing = self._trailing.pop(path, None)
        if trailing is not None:
            trailing.cancel()

    def cancel_all(self) -> None:
        """Drop pending work for every field."""
        for path in set(self._sequences) | set(self._trailing):
            self.cancel(path)

    async def drain(self) -> None:
        """Wait until no scheduled validation is left."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
