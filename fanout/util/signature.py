"""
Callback Signatures
===================

This module turns a callback into the normalized signature used as the exact-match
key for dispatch, and rejects callbacks that can never be dispatched to.

A normalized signature is a tuple of classes, one per positional parameter:

- ``None`` becomes ``NoneType``
- ``Annotated[T, ...]`` becomes the normalized ``T``
- parameterized generics (``list[int]``) become their origin (``list``)
- plain classes are kept as they are

Arguments passed to ``notify`` are normalized with ``type()``. No conversions are
applied on either side: ``(int,)`` does not match ``(bool,)`` or ``(float,)``.
"""

import functools
import inspect
import threading
import types
import typing
from typing import Any, Callable, Iterable, Optional, Tuple

from cachetools import LRUCache, cached

Signature = Tuple[type, ...]

SIGNATURE_CACHE_SIZE = 1024

_NoneType = type(None)
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class IncompatibleCallbackError(TypeError):
    """Raised when a callback cannot be registered as a subscriber."""

    pass


def _normalize(annotation: Any) -> type:
    if annotation is None or annotation is _NoneType:
        return _NoneType

    origin = typing.get_origin(annotation)
    if origin is typing.Annotated:
        return normalize_annotation(typing.get_args(annotation)[0])
    if origin is typing.Union or origin is types.UnionType:
        raise IncompatibleCallbackError(
            f"Union annotation {annotation!r} cannot be matched exactly"
        )
    if origin is not None:
        if isinstance(origin, type):
            return origin
        raise IncompatibleCallbackError(
            f"Annotation {annotation!r} cannot be matched exactly"
        )

    if annotation is typing.Any:
        raise IncompatibleCallbackError("typing.Any cannot be matched exactly")
    if isinstance(annotation, type):
        return annotation

    # TypeVar, unresolved forward reference, NewType, literal values...
    raise IncompatibleCallbackError(
        f"Annotation {annotation!r} is not a class and cannot be matched exactly"
    )


_normalize_cached = cached(
    cache=LRUCache(maxsize=SIGNATURE_CACHE_SIZE), lock=threading.Lock()
)(_normalize)


def normalize_annotation(annotation: Any) -> type:
    """Normalize a single parameter annotation to the class it dispatches on."""
    try:
        hash(annotation)
    except TypeError:
        # Annotated[...] with unhashable metadata
        return _normalize(annotation)
    return _normalize_cached(annotation)


def argument_signature(args: Iterable[Any]) -> Signature:
    """Normalized signature of an argument list passed to notify."""
    return tuple(type(arg) for arg in args)


def _introspect(callback: Callable) -> Optional[inspect.Signature]:
    try:
        return inspect.signature(callback, eval_str=True)
    except NameError as e:
        raise IncompatibleCallbackError(
            f"Cannot resolve annotations of {callback!r}: {e}"
        ) from e
    except (ValueError, TypeError):
        # Builtins and some extension callables carry no signature
        return None


def _is_value_returning(callback: Callable) -> bool:
    target = callback.func if isinstance(callback, functools.partial) else callback
    if not inspect.isroutine(target) and hasattr(target, "__call__"):
        target = target.__call__
    return (
        inspect.iscoroutinefunction(target)
        or inspect.isgeneratorfunction(target)
        or inspect.isasyncgenfunction(target)
    )


def callback_signature(
    callback: Callable, signature: Optional[Iterable[Any]] = None
) -> Signature:
    """
    Compute the normalized signature of a subscriber callback.

    Args:
        callback: The function to register.
        signature: Explicit parameter types, for callbacks without annotations
            (lambdas, builtins). When the callback can be introspected, its
            positional arity must match.

    Returns:
        Tuple of classes, one per positional parameter.

    Raises:
        IncompatibleCallbackError: If the callback returns a value, takes
            parameters that cannot be bound from a positional argument tuple,
            or declares types that can never be matched exactly.
    """
    if not callable(callback):
        raise IncompatibleCallbackError(f"{callback!r} is not callable")

    if inspect.isclass(callback):
        raise IncompatibleCallbackError(
            f"Subscriber {callback!r} is a class; calling it returns an instance"
        )

    if _is_value_returning(callback):
        raise IncompatibleCallbackError(
            f"Subscriber {callback!r} cannot return a value "
            "(coroutine and generator functions are not allowed)"
        )

    sig = _introspect(callback)
    explicit = (
        tuple(normalize_annotation(t) for t in signature)
        if signature is not None
        else None
    )

    if sig is None:
        if explicit is None:
            raise IncompatibleCallbackError(
                f"Cannot introspect {callback!r}; pass signature= explicitly"
            )
        return explicit

    returns = sig.return_annotation
    if returns not in (inspect.Signature.empty, None, _NoneType):
        raise IncompatibleCallbackError(
            f"Subscriber {callback!r} cannot return a value (annotated {returns!r})"
        )

    positional = []
    for param in sig.parameters.values():
        if param.kind in _VARIADIC:
            raise IncompatibleCallbackError(
                f"Subscriber {callback!r} cannot take variadic parameter '{param.name}'"
            )
        if param.kind is inspect.Parameter.KEYWORD_ONLY:
            if param.default is inspect.Parameter.empty:
                raise IncompatibleCallbackError(
                    f"Subscriber {callback!r} has required keyword-only "
                    f"parameter '{param.name}'"
                )
            continue
        positional.append(param)

    if explicit is not None:
        if len(explicit) != len(positional):
            raise IncompatibleCallbackError(
                f"Explicit signature has {len(explicit)} types but {callback!r} "
                f"takes {len(positional)} positional parameters"
            )
        return explicit

    result = []
    for param in positional:
        if param.annotation is inspect.Parameter.empty:
            raise IncompatibleCallbackError(
                f"Parameter '{param.name}' of {callback!r} has no annotation; "
                "annotate it or pass signature= explicitly"
            )
        result.append(normalize_annotation(param.annotation))
    return tuple(result)
