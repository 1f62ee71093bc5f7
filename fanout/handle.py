"""
Subscription Handles
====================

Handles returned by ``Subject.subscribe``. Both variants wrap a zero-argument
cancellation action and run it at most once, no matter how many times or from how
many threads they are triggered.

- Subscription: fires only when called. Dropping it leaves the subscriber active.
- AutoUnsubscribe: fires when called, when its ``with`` block exits, or when it is
  garbage-collected, whichever comes first.
"""

import threading
import weakref
from typing import Callable, Optional

Action = Callable[[], None]


class Subscription:
    """
    Manual cancellation handle.

    Example:
        handle = subject.subscribe(on_event)
        ...
        handle.unsubscribe()  # or handle()
    """

    __slots__ = ("_action", "_lock", "__weakref__")

    def __init__(self, action: Optional[Action] = None):
        self._action = action
        self._lock = threading.Lock()

    def _take(self) -> Optional[Action]:
        with self._lock:
            action, self._action = self._action, None
        return action

    def unsubscribe(self) -> None:
        """Run the cancellation action if it has not run yet."""
        action = self._take()
        if action is not None:
            action()

    __call__ = unsubscribe

    def release(self) -> Optional[Action]:
        """Detach and return the action without running it."""
        return self._take()

    @property
    def active(self) -> bool:
        return self._action is not None

    def __repr__(self) -> str:
        return f"Subscription(active={self.active})"


class AutoUnsubscribe:
    """
    Scoped cancellation handle.

    Takes ownership of a Subscription's action; the Subscription it was built from
    becomes inert. The action runs exactly once:

        with AutoUnsubscribe(subject.subscribe(on_event)):
            subject.notify(1)   # on_event runs
        subject.notify(2)       # on_event no longer subscribed

    Without ``with``, the action runs when the handle is garbage-collected.
    """

    __slots__ = ("_finalizer", "__weakref__")

    def __init__(self, subscription: Subscription):
        action = subscription.release()
        # finalize runs its callback at most once, even across threads
        self._finalizer = weakref.finalize(self, action or _noop)

    def unsubscribe(self) -> None:
        self._finalizer()

    __call__ = unsubscribe

    def release(self) -> Optional[Action]:
        """Detach and return the action without running it."""
        detached = self._finalizer.detach()
        if detached is None:
            return None
        _, action, _, _ = detached
        return None if action is _noop else action

    @property
    def active(self) -> bool:
        return self._finalizer.alive

    def __enter__(self) -> "AutoUnsubscribe":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.unsubscribe()

    def __repr__(self) -> str:
        return f"AutoUnsubscribe(active={self.active})"


def _noop() -> None:
    pass
