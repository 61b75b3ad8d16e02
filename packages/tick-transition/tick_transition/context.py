"""Context - cancellation and deadline value threaded to every hook."""
from __future__ import annotations

import time
from typing import Any, Callable

from tick_transition.types import CancelledError


class Context:
    """Cooperative cancellation handle.

    The engine never inspects a context; it only passes it to hooks. Hooks
    that care call ``raise_if_cancelled()`` or read ``cancelled``.
    """

    def __init__(
        self,
        deadline: float | None = None,
        values: dict[str, Any] | None = None,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self._deadline = deadline
        self._values: dict[str, Any] = dict(values or {})
        self._now = now
        self._cancelled = False

    @classmethod
    def with_timeout(
        cls,
        seconds: float,
        values: dict[str, Any] | None = None,
        now: Callable[[], float] = time.monotonic,
    ) -> Context:
        if seconds < 0:
            raise ValueError("timeout must be non-negative")
        return cls(deadline=now() + seconds, values=values, now=now)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def expired(self) -> bool:
        return self._deadline is not None and self._now() >= self._deadline

    @property
    def cancelled(self) -> bool:
        """True once ``cancel()`` was called or the deadline has passed."""
        return self._cancelled or self.expired

    def cancel(self) -> None:
        self._cancelled = True

    def remaining(self) -> float | None:
        """Seconds until the deadline, clamped at 0. None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._now())

    def value(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise CancelledError("context cancelled")
        if self.expired:
            raise CancelledError("context deadline exceeded")
