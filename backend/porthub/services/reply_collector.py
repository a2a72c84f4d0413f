"""Reply Collector — one-shot, time-bounded waits for a party's answer to a prompt.

Invariants:
    - At most one pending reply per key; expect() on a busy key cancels the older wait
    - A pending reply accepts exactly one value: offer() returns True once, then False
    - wait() returns the offered value, or None on timeout or cancellation
    - After wait() returns, the key is free again
    - Nothing here mutates job state: callers decide what a reply means

Design Decisions:
    - asyncio.Future per pending reply + asyncio.wait_for for the deadline: the
      waiter is a plain coroutine, no polling
    - Cancellation resolves the future with a sentinel instead of cancelling it,
      so the waiter's own task cancellation is never confused with a withdrawn prompt
    - Timeout is data on the PendingReply (defaults from config.feedback_timeout_seconds)
"""

import asyncio
import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

_WITHDRAWN = object()


class CancellationToken:
    """Flag plus callbacks, fired once."""

    def __init__(self):
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        for callback in self._callbacks:
            callback()
        self._callbacks.clear()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        if self._cancelled:
            callback()
        else:
            self._callbacks.append(callback)


@dataclass(eq=False)
class PendingReply:
    """An open prompt awaiting one answer."""
    key: Hashable
    timeout_seconds: float
    future: asyncio.Future
    token: CancellationToken = field(default_factory=CancellationToken)

    def __post_init__(self):
        self.token.on_cancel(self._withdraw)

    @property
    def settled(self) -> bool:
        return self.future.done()

    def offer(self, value: Any) -> bool:
        if self.future.done():
            return False
        self.future.set_result(value)
        return True

    def _withdraw(self) -> None:
        if not self.future.done():
            self.future.set_result(_WITHDRAWN)


class ReplyCollector:
    """Keyed registry of PendingReply waits."""

    def __init__(self, timeout_seconds: float = 60.0):
        self.timeout_seconds = timeout_seconds
        self._pending: dict[Hashable, PendingReply] = {}

    def expect(self, key: Hashable, timeout_seconds: float | None = None) -> PendingReply:
        """Open a wait for key. Must be called from inside the running event loop."""
        previous = self._pending.pop(key, None)
        if previous is not None:
            logger.info(f"Replacing pending reply for {key!r}")
            previous.token.cancel()
        pending = PendingReply(
            key=key,
            timeout_seconds=(
                self.timeout_seconds if timeout_seconds is None else timeout_seconds
            ),
            future=asyncio.get_running_loop().create_future(),
        )
        self._pending[key] = pending
        return pending

    def offer(self, key: Hashable, value: Any) -> bool:
        """Deliver an answer. False when nothing is waiting or it was already answered."""
        pending = self._pending.get(key)
        if pending is None:
            return False
        return pending.offer(value)

    def is_pending(self, key: Hashable) -> bool:
        pending = self._pending.get(key)
        return pending is not None and not pending.settled

    def cancel(self, key: Hashable) -> bool:
        pending = self._pending.pop(key, None)
        if pending is None:
            return False
        pending.token.cancel()
        return True

    def cancel_all(self) -> int:
        keys = list(self._pending)
        for key in keys:
            self.cancel(key)
        return len(keys)

    async def wait(self, pending: PendingReply) -> Any | None:
        """Block until answered, withdrawn, or timed out."""
        try:
            value = await asyncio.wait_for(pending.future, pending.timeout_seconds)
        except asyncio.TimeoutError:
            logger.info(f"No reply for {pending.key!r} within {pending.timeout_seconds}s")
            pending.token.cancel()
            return None
        finally:
            if self._pending.get(pending.key) is pending:
                del self._pending[pending.key]
        return None if value is _WITHDRAWN else value
