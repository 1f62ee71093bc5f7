"""
Subject - Tagged Heterogeneous Publish/Subscribe
================================================

A Subject stores subscriber callbacks of arbitrary signatures, optionally scoped by
a tag, and calls the matching ones synchronously when an event is published.

    subject = Subject()

    def on_total(x: int) -> None:
        print("got", x)

    handle = subject.subscribe(on_total)
    subject.notify(5)           # prints "got 5"
    subject.notify(5.0)         # nothing: (float,) does not match (int,)
    handle.unsubscribe()

Concurrency:
    The registry (tag -> FunctionCollection) is copy-on-write. Writers
    (subscribe, unsubscribe) serialize on a lock, build a complete replacement
    registry and publish it with a single atomic store. Readers (notify) load the
    published registry once, never take the lock, and work on that snapshot until
    they return. A subscribe or unsubscribe that commits while a notify is running
    is invisible to it and visible to every notify that starts afterwards.

    Callbacks are never called while the lock is held, so a callback may itself
    subscribe or unsubscribe.

Lifetime:
    Lock and published snapshot live in a SubjectState owned by the Subject.
    Handles reference that state weakly and never reference the Subject. Once
    the Subject is gone its state is collected and outstanding handles become
    no-ops; moving the state to a new Subject keeps them working.
"""

import logging
import threading
import weakref
from types import MappingProxyType
from typing import Any, Callable, Hashable, Iterable, Mapping, Optional

from .handle import Subscription
from .util.atomic import AtomicReference
from .util.function_collection import FunctionCollection
from .util.signature import (
    IncompatibleCallbackError,
    argument_signature,
    callback_signature,
)

Registry = Mapping[Hashable, FunctionCollection]

_EMPTY_REGISTRY: Registry = MappingProxyType({})

# Default for the tag keyword of notify; distinct from any tag a caller can pass
_UNTAGGED = object()


class SubjectState:
    """
    State shared between a Subject and the handles it hands out.

    Holds the writer lock and the atomically published registry snapshot. Only
    the Subject holds a strong reference; handles hold a ``weakref.ref``.
    """

    __slots__ = ("lock", "registry", "_next_id", "__weakref__")

    def __init__(self):
        self.lock = threading.Lock()
        # Ids are unique across all tags for the lifetime of the state, so an
        # id is never reused after its tag was dropped and recreated
        self._next_id = 0
        self.registry: AtomicReference[Registry] = AtomicReference(_EMPTY_REGISTRY)

    def snapshot(self) -> Registry:
        """The currently published registry. Never mutate it."""
        return self.registry.load()

    def add(self, tag: Hashable, signature, callback: Callable) -> int:
        with self.lock:
            current = self.registry.load()
            updated = dict(current)
            collection = current.get(tag)
            collection = collection.copy() if collection is not None else FunctionCollection()
            function_id = collection.insert(signature, callback, self._next_id)
            self._next_id += 1
            updated[tag] = collection
            self.registry.store(MappingProxyType(updated))
        return function_id

    def remove(self, tag: Hashable, function_id: int) -> bool:
        with self.lock:
            current = self.registry.load()
            collection = current.get(tag)
            if collection is None or function_id not in collection:
                return False

            updated = dict(current)
            collection = collection.copy()
            collection.remove(function_id)
            if len(collection):
                updated[tag] = collection
            else:
                del updated[tag]
            self.registry.store(MappingProxyType(updated))
        return True


def _unsubscriber(state: SubjectState, tag: Hashable, function_id: int) -> Callable[[], None]:
    state_ref = weakref.ref(state)

    def unsubscribe() -> None:
        live = state_ref()
        if live is None:
            logging.debug(f"Subject for tag {tag!r} is gone, nothing to unsubscribe")
            return
        if live.remove(tag, function_id):
            logging.debug(f"Unsubscribed callback {function_id} from tag {tag!r}")
        else:
            logging.debug(f"Callback {function_id} under tag {tag!r} already removed")

    return unsubscribe


class Subject:
    """
    Registry of tagged subscribers with lock-free, snapshot-isolated notify.

    Args:
        tag_type: Type of the tag values. ``tag_type()`` is the sentinel used for
            untagged subscribe and notify calls, so with the default ``str`` a
            subscription under ``""`` is an untagged one.

    All methods may be called from any thread without external locking.
    """

    def __init__(self, tag_type: Callable[[], Hashable] = str):
        self._tag_type = tag_type
        self._no_tag = tag_type()
        self._state = SubjectState()

    @property
    def no_tag(self) -> Hashable:
        """The sentinel tag used by untagged calls."""
        return self._no_tag

    def subscribe(
        self,
        tag_or_callback: Any,
        callback: Optional[Callable] = None,
        *,
        signature: Optional[Iterable[Any]] = None,
    ) -> Subscription:
        """
        Subscribe ``callback``, either untagged or under a tag.

            subject.subscribe(on_event)
            subject.subscribe("orders", on_event)
            subject.subscribe("orders", lambda n: seen.append(n), signature=(int,))

        Returns:
            A Subscription whose ``unsubscribe()`` removes the callback.

        Raises:
            IncompatibleCallbackError: If the callback returns a value, cannot be
                called with a fixed positional argument list, or has parameter
                types that cannot be matched exactly.
        """
        if callback is None:
            tag, callback = self._no_tag, tag_or_callback
        else:
            tag = tag_or_callback

        try:
            normalized = callback_signature(callback, signature)
        except IncompatibleCallbackError as e:
            logging.debug(f"Rejected subscriber for tag {tag!r}: {e}")
            raise

        state = self._state
        function_id = state.add(tag, normalized, callback)
        logging.debug(
            f"Subscribed callback {function_id} to tag {tag!r} with signature "
            f"({', '.join(t.__name__ for t in normalized)})"
        )
        return Subscription(_unsubscriber(state, tag, function_id))

    def notify(self, *args: Any, tag: Any = _UNTAGGED) -> None:
        """
        Call every subscriber of ``tag`` whose signature matches ``args`` exactly.

        Untagged when ``tag`` is omitted. Subscribers run on the calling thread in
        the order they subscribed. An exception raised by a subscriber propagates
        and the remaining subscribers are not called.
        """
        self.notify_tagged(self._no_tag if tag is _UNTAGGED else tag, *args)

    def notify_untagged(self, *args: Any) -> None:
        self.notify_tagged(self._no_tag, *args)

    def notify_tagged(self, tag: Hashable, *args: Any) -> None:
        collection = self._state.snapshot().get(tag)
        if collection is None:
            return
        collection.call_all(argument_signature(args), *args)

    def subscriber_count(self, tag: Any = _UNTAGGED) -> int:
        """Number of callbacks currently subscribed under ``tag`` (untagged by default)."""
        collection = self._state.snapshot().get(self._no_tag if tag is _UNTAGGED else tag)
        return len(collection) if collection is not None else 0

    def tags(self) -> frozenset:
        """Tags that currently have at least one subscriber."""
        return frozenset(self._state.snapshot())

    def move(self) -> "Subject":
        """
        Transfer this subject's subscribers to a new Subject.

        Outstanding handles follow the state to the new Subject. This Subject is
        left empty and can be used again as a fresh one.
        """
        moved = Subject.__new__(Subject)
        moved._tag_type = self._tag_type
        moved._no_tag = self._no_tag
        moved._state, self._state = self._state, SubjectState()
        return moved

    def __copy__(self):
        raise TypeError("Subject cannot be copied; use move() to relocate it")

    def __deepcopy__(self, memo):
        raise TypeError("Subject cannot be copied; use move() to relocate it")

    def __repr__(self) -> str:
        registry = self._state.snapshot()
        total = sum(len(collection) for collection in registry.values())
        return f"Subject(tags={len(registry)}, subscribers={total})"
