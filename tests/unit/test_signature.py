"""Unit tests for callback signature normalization and validation."""

from typing import Annotated, Any, List, Optional

import pytest

from fanout.util.signature import (
    IncompatibleCallbackError,
    argument_signature,
    callback_signature,
    normalize_annotation,
)


@pytest.mark.unit
def test_annotated_parameters_become_the_signature():
    """Parameter annotations in order form the normalized signature"""

    def callback(a: int, b: str, c: float) -> None:
        pass

    assert callback_signature(callback) == (int, str, float)


@pytest.mark.unit
def test_callback_without_parameters_has_empty_signature():
    def callback():
        pass

    assert callback_signature(callback) == ()


@pytest.mark.unit
def test_missing_return_annotation_is_accepted():
    def callback(x: int):
        pass

    assert callback_signature(callback) == (int,)


@pytest.mark.unit
def test_value_returning_callback_is_rejected():
    """A callback annotated to return a value cannot subscribe"""

    def callback(x: int) -> int:
        return x

    with pytest.raises(IncompatibleCallbackError, match="cannot return a value"):
        callback_signature(callback)


@pytest.mark.unit
def test_coroutine_function_is_rejected():
    async def callback(x: int) -> None:
        pass

    with pytest.raises(IncompatibleCallbackError):
        callback_signature(callback)


@pytest.mark.unit
def test_generator_function_is_rejected():
    def callback(x: int):
        yield x

    with pytest.raises(IncompatibleCallbackError):
        callback_signature(callback)


@pytest.mark.unit
@pytest.mark.parametrize(
    "source",
    [
        "def callback(*args: int) -> None: pass",
        "def callback(**kwargs: int) -> None: pass",
        "def callback(x: int, *, flag: bool) -> None: pass",
    ],
)
def test_parameters_not_bindable_from_a_tuple_are_rejected(source):
    """Variadic and required keyword-only parameters have no fixed positional shape"""
    namespace = {}
    exec(source, namespace)

    with pytest.raises(IncompatibleCallbackError):
        callback_signature(namespace["callback"])


@pytest.mark.unit
def test_keyword_only_parameter_with_default_is_ignored():
    def callback(x: int, *, verbose: bool = False) -> None:
        pass

    assert callback_signature(callback) == (int,)


@pytest.mark.unit
def test_unannotated_parameter_requires_explicit_signature():
    with pytest.raises(IncompatibleCallbackError, match="no annotation"):
        callback_signature(lambda x: None)


@pytest.mark.unit
def test_explicit_signature_is_used_for_lambdas():
    assert callback_signature(lambda x, y: None, signature=(int, str)) == (int, str)


@pytest.mark.unit
def test_explicit_signature_must_match_arity():
    with pytest.raises(IncompatibleCallbackError, match="positional parameters"):
        callback_signature(lambda x: None, signature=(int, str))


@pytest.mark.unit
def test_explicit_signature_overrides_annotations():
    def callback(x: int) -> None:
        pass

    assert callback_signature(callback, signature=(bool,)) == (bool,)


@pytest.mark.unit
def test_non_callable_is_rejected():
    with pytest.raises(IncompatibleCallbackError, match="not callable"):
        callback_signature(42)


@pytest.mark.unit
def test_callable_instance_uses_call_signature():
    class Handler:
        def __call__(self, message: str) -> None:
            pass

    assert callback_signature(Handler()) == (str,)


@pytest.mark.unit
def test_bound_method_excludes_self():
    class Listener:
        def on_event(self, count: int, name: str) -> None:
            pass

    assert callback_signature(Listener().on_event) == (int, str)


@pytest.mark.unit
def test_string_annotations_are_resolved():
    namespace = {}
    exec("def callback(x: 'int', y: 'str') -> 'None': pass", namespace)

    assert callback_signature(namespace["callback"]) == (int, str)


@pytest.mark.unit
def test_unresolvable_string_annotation_is_rejected():
    namespace = {}
    exec("def callback(x: 'DoesNotExist') -> None: pass", namespace)

    with pytest.raises(IncompatibleCallbackError, match="Cannot resolve"):
        callback_signature(namespace["callback"])


@pytest.mark.unit
def test_annotated_is_stripped_to_its_base_type():
    """Annotated metadata does not take part in matching"""
    assert normalize_annotation(Annotated[int, "positive"]) is int


@pytest.mark.unit
def test_annotated_with_unhashable_metadata_is_normalized():
    assert normalize_annotation(Annotated[str, {"max": 3}]) is str


@pytest.mark.unit
def test_generic_alias_normalizes_to_origin():
    assert normalize_annotation(list[int]) is list
    assert normalize_annotation(List[int]) is list
    assert normalize_annotation(dict[str, int]) is dict


@pytest.mark.unit
def test_none_annotation_normalizes_to_none_type():
    assert normalize_annotation(None) is type(None)


@pytest.mark.unit
@pytest.mark.parametrize("annotation", [Any, Optional[int], int | None])
def test_inexact_annotations_are_rejected(annotation):
    with pytest.raises(IncompatibleCallbackError):
        normalize_annotation(annotation)


@pytest.mark.unit
def test_argument_signature_is_the_exact_types():
    assert argument_signature((1, "a", None, True, 2.0)) == (
        int,
        str,
        type(None),
        bool,
        float,
    )


@pytest.mark.unit
def test_argument_signature_of_no_arguments_is_empty():
    assert argument_signature(()) == ()


@pytest.mark.unit
def test_class_is_rejected_even_with_void_init():
    """Calling a class returns an instance, whatever __init__ declares"""

    class Event:
        def __init__(self, x: int) -> None:
            self.x = x

    with pytest.raises(IncompatibleCallbackError, match="is a class"):
        callback_signature(Event)
