"""Per-request cancellation signal and deadline."""

import threading
import time
from collections.abc import Callable
from typing import Protocol


class RequestContext(Protocol):
    """
    What the service layer needs to know about the inbound request.

    grpc.ServicerContext already satisfies this; the HTTP gateway uses CallContext.
    """

    def is_active(self) -> bool: ...

    def time_remaining(self) -> float | None: ...

    def add_callback(self, callback: Callable[[], None]) -> bool: ...


class CallContext:
    """Cancellation flag plus an optional deadline for one gateway request."""

    def __init__(self, timeout: float | None = None) -> None:
        self._cancelled = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    def cancel(self) -> None:
        """Mark the request cancelled and run registered callbacks once."""
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def add_callback(self, callback: Callable[[], None]) -> bool:
        """
        Run ``callback`` when the context is cancelled.

        Returns False without registering when it is already cancelled, like
        grpc.ServicerContext.add_callback after the RPC has terminated.
        """
        with self._lock:
            if self._cancelled.is_set():
                return False
            self._callbacks.append(callback)
            return True

    def time_remaining(self) -> float | None:
        """Seconds left before the deadline (never negative), or None without one."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def is_active(self) -> bool:
        if self._cancelled.is_set():
            return False
        remaining = self.time_remaining()
        return remaining is None or remaining > 0


def ensure_active(
    ctx: RequestContext,
    *,
    canceled: type[Exception],
    deadline_exceeded: type[Exception],
) -> None:
    """
    Non-blocking check at the start of an operation.

    Raises ``deadline_exceeded`` when the deadline has passed, ``canceled`` when the
    request is otherwise no longer active. Each layer passes its own error classes.
    """
    remaining = ctx.time_remaining()
    if remaining is not None and remaining <= 0:
        raise deadline_exceeded()
    if not ctx.is_active():
        raise canceled()
