"""
Atomic Reference
================

A single reference cell with indivisible load and store.

Readers call ``load()`` once and keep working with the object they got back; they
never observe a half-built value because writers only ``store()`` objects that are
fully constructed. Rebinding one attribute is a single indivisible operation in
CPython, including free-threaded builds, so ``load()`` and ``store()`` need no lock.
Writers that read, modify and store must serialize among themselves.
"""

from typing import Generic, TypeVar

T = TypeVar("T")


class AtomicReference(Generic[T]):
    """Reference cell published by writers and read lock-free by readers."""

    __slots__ = ("_value",)

    def __init__(self, value: T):
        self._value = value

    def load(self) -> T:
        """Return the currently published object."""
        return self._value

    def store(self, value: T) -> None:
        """Publish ``value``, replacing the previous object."""
        self._value = value

    def __repr__(self) -> str:
        return f"AtomicReference({self._value!r})"
