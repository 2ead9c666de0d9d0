"""
Three-way field updates for PATCH requests.

A nullable column can be left alone, cleared, or set to a
new value. Plain Optional can't tell the first two apart,
so update requests are translated into one of these:

    Keep()        field was omitted, keep the current value
    Clear()       field was sent as null, store NULL
    Set(value)    field was sent with a value
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Keep:
    pass


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class Set(Generic[T]):
    value: T


FieldUpdate = Union[Keep, Clear, Set[T]]


def field_update(fields_set: set[str], name: str, value: Any) -> FieldUpdate:
    """Build a FieldUpdate from a pydantic model's fields_set and value."""
    if name not in fields_set:
        return Keep()
    if value is None:
        return Clear()
    return Set(value)


def resolve(update: FieldUpdate, current):
    """Return the value a field ends up with after applying update."""
    if isinstance(update, Keep):
        return current
    if isinstance(update, Clear):
        return None
    return update.value
