# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Linked cancellation for a single send.

The effective cancellation of a send is whichever fires first: the builder's
per-request timeout or the caller's :class:`asyncio.Event`. Neither touches the
transport's own timeout configuration.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from contextlib import suppress
from typing import Any, TypeVar

from ..errors import RequestCancelledError, RequestTimeoutError

T = TypeVar("T")


async def run_with_cancellation(
    operation: Coroutine[Any, Any, T],
    *,
    timeout: float | None = None,
    cancellation: asyncio.Event | None = None,
) -> T:
    """Await ``operation``, cancelling it on timeout or when ``cancellation`` is set."""
    if timeout is None and cancellation is None:
        return await operation

    if cancellation is not None and cancellation.is_set():
        operation.close()
        raise RequestCancelledError("The request was cancelled before it was sent.")

    task = asyncio.ensure_future(operation)
    waiter = asyncio.ensure_future(cancellation.wait()) if cancellation is not None else None
    pending = {task} if waiter is None else {task, waiter}
    try:
        done, _ = await asyncio.wait(pending, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        if waiter is not None:
            waiter.cancel()

    if task in done:
        return task.result()

    task.cancel()
    with suppress(asyncio.CancelledError):
        await task

    if waiter is not None and waiter in done:
        raise RequestCancelledError("The request was cancelled by the caller.")
    raise RequestTimeoutError(timeout)


__all__ = ["run_with_cancellation"]
