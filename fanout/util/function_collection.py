"""
Function Collection
===================

This module provides FunctionCollection, the storage for the subscribers of one tag.

Callbacks of unrelated signatures live side by side, grouped by normalized
signature. Within a signature group callbacks keep insertion order, which is the
order ``call_all`` invokes them in:

    {(int,): {0: on_int, 2: other_int}, (str, float): {1: on_pair}}

The collection is not synchronized. Subject never mutates a collection that has
been published; it copies it, mutates the copy and publishes the copy.
"""

from typing import Any, Callable, Dict, Iterator, Optional

from .signature import Signature


class FunctionCollection:
    """
    Heterogeneous callback storage with exact-signature dispatch.

    Each inserted callback gets an id that is unique within the collection and its
    copies, so a copy made after ``insert`` can still ``remove`` by that id.
    """

    __slots__ = ("_groups", "_next_id", "_size")

    def __init__(self):
        self._groups: Dict[Signature, Dict[int, Callable]] = {}
        self._next_id = 0
        self._size = 0

    def insert(
        self, signature: Signature, function: Callable, function_id: Optional[int] = None
    ) -> int:
        """
        Store ``function`` under ``signature`` and return its id.

        Callers that hand out ids across several collections pass ``function_id``;
        the collection's own sequence then continues past it.
        """
        if function_id is None:
            function_id = self._next_id
        self._next_id = max(self._next_id, function_id + 1)
        self._groups.setdefault(signature, {})[function_id] = function
        self._size += 1
        return function_id

    def remove(self, function_id: int) -> bool:
        """Remove the callback with ``function_id``; False if it is not stored."""
        for signature, group in self._groups.items():
            if function_id in group:
                del group[function_id]
                if not group:
                    del self._groups[signature]
                self._size -= 1
                return True
        return False

    def call_all(self, signature: Signature, *args: Any) -> None:
        """Call every callback stored under exactly ``signature``, oldest first."""
        group = self._groups.get(signature)
        if not group:
            return
        for function in group.values():
            function(*args)

    def copy(self) -> "FunctionCollection":
        """Copy the storage; callbacks are shared, groups are not."""
        clone = FunctionCollection()
        clone._groups = {sig: dict(group) for sig, group in self._groups.items()}
        clone._next_id = self._next_id
        clone._size = self._size
        return clone

    def signatures(self) -> Iterator[Signature]:
        return iter(tuple(self._groups))

    def __len__(self) -> int:
        return self._size

    def __contains__(self, function_id: object) -> bool:
        return any(function_id in group for group in self._groups.values())

    def __repr__(self) -> str:
        return f"FunctionCollection(size={self._size}, signatures={len(self._groups)})"
