"""Helpers to run form coroutines from sync or async contexts."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from bindforms.exceptions import AsyncExecutionError

if TYPE_CHECKING:
    from collections.abc import Coroutine


def run_async[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion from synchronous code and return its result.

    The CLI drives whole checks and submissions through this helper. A running loop
    cannot be blocked on, so callers that already have one must await instead.

    Args:
        coro: The coroutine to run.

    Raises:
        AsyncExecutionError: If called while an event loop is running in this thread.

    Returns:
        The result of the coroutine.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    coro.close()
    raise AsyncExecutionError(
        result=RuntimeError("await the coroutine instead"),
        message="Cannot block inside a running event loop",
    )


def schedule(coro: Coroutine[Any, Any, None], *, tracked: set[asyncio.Task[None]]) -> asyncio.Task[None] | None:
    """Start a fire-and-forget coroutine.

    With a running loop the coroutine becomes a task kept in ``tracked`` until it
    finishes. Without one, it runs to completion before this call returns.

    Args:
        coro: Coroutine whose effects are applied through dispatch.
        tracked: Registry of in-flight tasks owned by the caller.

    Returns:
        asyncio.Task[None] | None: The created task, or None when run inline.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        run_async(coro)
        return None

    task = loop.create_task(coro)
    tracked.add(task)
    task.add_done_callback(tracked.discard)
    return task
