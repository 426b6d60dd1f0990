"""
Cooperative cancellation signal threaded through a dispatch call.

A single token is handed to every responder that declares a trailing
``CancellationToken`` parameter. Cancellation is advisory: the dispatcher
does not stop running responders when the token is cancelled, each responder
decides how to react.

Example:
    >>> async def on_message(
    ...     event: MessageCreated, ct: CancellationToken
    ... ) -> None:
    ...     ct.raise_if_cancellation_requested()
    ...     await do_work()
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable

from delegatedispatch.exceptions import OperationCancelledError

logger = logging.getLogger(__name__)


def _noop() -> None:
    pass


class CancellationToken:
    """
    Thread-safe, one-way cancellation flag.

    Once cancelled a token stays cancelled. Callbacks registered with
    ``register`` run once, on the thread that calls ``cancel`` (or
    immediately if the token is already cancelled).
    """

    def __init__(self, *, cancelled: bool = False, can_be_cancelled: bool = True) -> None:
        self._lock = threading.Lock()
        self._cancelled = cancelled
        self._can_be_cancelled = can_be_cancelled or cancelled
        self._callbacks: list[Callable[[], None]] = []

    @classmethod
    def none(cls) -> CancellationToken:
        """Return a token that can never be cancelled."""
        return cls(can_be_cancelled=False)

    @classmethod
    def cancelled(cls) -> CancellationToken:
        """Return a token that is already cancelled."""
        return cls(cancelled=True)

    @property
    def is_cancellation_requested(self) -> bool:
        """Whether cancel() has been called."""
        return self._cancelled

    @property
    def can_be_cancelled(self) -> bool:
        """False for the token returned by ``CancellationToken.none()``."""
        return self._can_be_cancelled

    def cancel(self) -> None:
        """
        Request cancellation and run registered callbacks.

        Raises:
            RuntimeError: If the token was created with ``none()``
        """
        if not self._can_be_cancelled:
            raise RuntimeError("This token cannot be cancelled")

        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Cancellation callback %r failed", callback)

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Run ``callback`` when the token is cancelled.

        Returns:
            A function that removes the callback again. Calling it after the
            callback has run (or more than once) does nothing.
        """
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        callback()
        return _noop

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            with contextlib.suppress(ValueError):
                self._callbacks.remove(callback)

    def raise_if_cancellation_requested(self) -> None:
        """
        Raise if cancellation has been requested.

        Raises:
            OperationCancelledError: If the token is cancelled
        """
        if self._cancelled:
            raise OperationCancelledError()

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        if self._cancelled:
            return

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()

        def _wake() -> None:
            if not waiter.done():
                waiter.set_result(None)

        unregister = self.register(lambda: loop.call_soon_threadsafe(_wake))
        try:
            await waiter
        finally:
            unregister()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"CancellationToken({state})"


__all__ = ["CancellationToken"]
