"""
Fanout Utils - Subject Building Blocks
======================================

This package contains the pieces the Subject is assembled from.

Classes:
- AtomicReference: reference cell for publishing registry snapshots
- FunctionCollection: heterogeneous callback storage with exact-signature dispatch

Functions:
- callback_signature: normalize and validate a subscriber callback
- argument_signature: normalize a notify argument list
"""

from .atomic import AtomicReference
from .function_collection import FunctionCollection
from .signature import (
    IncompatibleCallbackError,
    Signature,
    argument_signature,
    callback_signature,
    normalize_annotation,
)

__all__ = [
    "AtomicReference",
    "FunctionCollection",
    "IncompatibleCallbackError",
    "Signature",
    "argument_signature",
    "callback_signature",
    "normalize_annotation",
]
