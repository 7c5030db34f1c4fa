"""Cooperative cancellation for network calls.

A ``CancellationToken`` is a one-way "stop" signal. ``combine_signals``
derives a child token that fires when either the parent token fires or a
timeout elapses, and hands back a ``CancellationScope`` whose ``dispose``
must run on every exit path. Use the scope as a context manager::

    with combine_signals(token, timeout_ms=25_000) as scope:
        response = await run_with_token(client.send(request), scope.token)

``run_with_token`` races an awaitable against a token and raises
``OperationCancelledError`` when the token wins.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from webtools.exceptions import OperationCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[], None]


class CancelReason(str, Enum):
    """Why a token was cancelled."""

    CANCELLED = "cancelled"
    TIMEOUT = "timeout"


class CancellationToken:
    """Cancellation signal that transitions to cancelled exactly once.

    Listeners are one-shot: each fires at most once, when the token is
    cancelled, and is then forgotten.
    """

    def __init__(self) -> None:
        self._reason: CancelReason | None = None
        self._listeners: list[Listener] = []
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has happened."""
        return self._reason is not None

    @property
    def reason(self) -> CancelReason | None:
        return self._reason

    @property
    def listener_count(self) -> int:
        """Number of listeners still registered."""
        return len(self._listeners)

    def cancel(self, reason: CancelReason = CancelReason.CANCELLED) -> None:
        """Cancel the token. Later calls are ignored."""
        if self._reason is not None:
            return
        self._reason = reason
        listeners, self._listeners = self._listeners, []
        self._event.set()
        for listener in listeners:
            listener()

    def add_listener(self, listener: Listener) -> None:
        """Register a one-shot listener called on cancellation."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        """Detach a listener. Unknown listeners are ignored."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        """Raise ``OperationCancelledError`` if the token was cancelled."""
        if self._reason is not None:
            raise OperationCancelledError(self._reason.value)


@dataclass
class CancellationScope:
    """A derived token plus the disposer that releases its timer and listener.

    Attributes:
        token: Token that fires on timeout or parent cancellation.
        dispose: Clears the timer and detaches from the parent token.
        timeout_ms: The timeout the token was derived with.
    """

    token: CancellationToken
    dispose: Callable[[], None]
    timeout_ms: int
    _disposed: bool = field(default=False, repr=False)

    @property
    def timed_out(self) -> bool:
        return self.token.reason is CancelReason.TIMEOUT

    def close(self) -> None:
        """Dispose the scope once; repeated calls are no-ops."""
        if self._disposed:
            return
        self._disposed = True
        self.dispose()

    def __enter__(self) -> "CancellationScope":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def combine_signals(
    parent: CancellationToken | None,
    timeout_ms: int,
) -> CancellationScope:
    """Derive a token that fires on timeout or when ``parent`` fires.

    Must be called from inside a running event loop; the timer is scheduled
    on it. An already-cancelled parent cancels the child immediately, but
    the timer is still scheduled and released by ``dispose``.

    Args:
        parent: Optional caller token.
        timeout_ms: Timeout in milliseconds.

    Returns:
        CancellationScope owning the derived token.
    """
    loop = asyncio.get_running_loop()
    child = CancellationToken()
    timer = loop.call_later(timeout_ms / 1000, child.cancel, CancelReason.TIMEOUT)

    if parent is None:
        return CancellationScope(token=child, dispose=timer.cancel, timeout_ms=timeout_ms)

    if parent.cancelled:
        child.cancel(CancelReason.CANCELLED)
        return CancellationScope(token=child, dispose=timer.cancel, timeout_ms=timeout_ms)

    def on_parent_cancel() -> None:
        child.cancel(CancelReason.CANCELLED)

    parent.add_listener(on_parent_cancel)

    def dispose() -> None:
        timer.cancel()
        parent.remove_listener(on_parent_cancel)

    return CancellationScope(token=child, dispose=dispose, timeout_ms=timeout_ms)


async def run_with_token(awaitable: Awaitable[T], token: CancellationToken) -> T:
    """Await ``awaitable`` unless ``token`` is cancelled first.

    When the token wins, the pending work is cancelled and awaited before
    ``OperationCancelledError`` is raised.

    Raises:
        OperationCancelledError: If the token fires before completion.
    """
    if token.cancelled:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        token.raise_if_cancelled()

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()

    # A finished task wins unless it failed after the token fired.
    if task.done() and not task.cancelled():
        if not token.cancelled or task.exception() is None:
            return task.result()

    await asyncio.gather(task, return_exceptions=True)
    reason = token.reason or CancelReason.CANCELLED
    logger.debug(f"Operation aborted by cancellation token ({reason.value})")
    raise OperationCancelledError(reason.value)
