"""Helpers for legacy fields whose layout drifted over time."""

from dataclasses import dataclass
from typing import Any, Generic, Optional, Tuple, Type, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Scalar(Generic[T]):
    """A field stored as a single value."""
    value: Any


@dataclass(frozen=True)
class SequenceOf(Generic[T]):
    """A field stored as a list of values."""
    items: Tuple[Any, ...]


Variant = Union[Scalar, SequenceOf]


def decode_variant(raw: Any) -> Optional[Variant]:
    """
    Tag a raw value as either a scalar or a sequence.

    Returns None for missing values. Mappings are not valid for either
    form and are treated as missing.
    """
    if raw is None or isinstance(raw, dict):
        return None
    if isinstance(raw, (list, tuple)):
        return SequenceOf(tuple(raw))
    return Scalar(raw)


def _matches(value: Any, expected: Type) -> bool:
    # bool is a subclass of int but a flag is never a count
    if expected is not bool and isinstance(value, bool):
        return False
    return isinstance(value, expected)


def resolve_variant(variant: Optional[Variant], expected: Type[T], zero: T) -> T:
    """
    Collapse a tagged value into a single value of the expected type.

    A scalar of the expected type is used directly. A non-empty sequence
    whose first element has the expected type yields that element.
    Anything else yields the zero value.
    """
    if isinstance(variant, Scalar):
        if _matches(variant.value, expected):
            return variant.value
        return zero
    if isinstance(variant, SequenceOf):
        if variant.items and _matches(variant.items[0], expected):
            return variant.items[0]
        return zero
    return zero


def first_non_empty(*values: Optional[str]) -> str:
    """Return the first non-empty value, preferring earlier (primary) names."""
    for value in values:
        if value:
            return value
    return ""
