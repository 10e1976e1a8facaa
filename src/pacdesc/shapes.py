# Copyright (c) 2025 pacdesc
# SPDX-License-Identifier: MIT
"""Resolution of Python type annotations into decode shapes.

The decoder never sniffs the text to decide what a value is. Instead the
caller's annotation is resolved into one of a small, closed set of shapes
(scalar, optional, sequence, record, unit) and the decoder dispatches on it.
Kinds the line grammar cannot express resolve to :class:`UnsupportedShape`
and only fail when a value of that kind is actually requested.

Example:
    >>> resolve_shape(str)
    ScalarShape(kind='str', bits=64, signed=True)
    >>> resolve_shape(list[U8] | None).inner.items
    (ScalarShape(kind='int', bits=8, signed=False),)
    >>> resolve_shape(float)
    UnsupportedShape(kind='float')
"""

from __future__ import annotations

import collections.abc
import enum
import functools
import inspect
import types
from dataclasses import dataclass
from decimal import Decimal
from typing import Annotated, Any, Literal, Union, get_args, get_origin

from pydantic import BaseModel

# =============================================================================
# Annotation markers
# =============================================================================


@dataclass(frozen=True)
class IntWidth:
    """Marks an ``int`` annotation with a bit width and signedness."""

    bits: int
    signed: bool = True


@dataclass(frozen=True)
class CharScalar:
    """Marks a ``str`` annotation as a single character."""


@dataclass(frozen=True)
class TextScalar:
    """Marks any type as carried on the wire as one string line.

    Used for convenience types (dependency strings, for instance) whose
    conversion from text is left to a pydantic validator.
    """


CHAR = CharScalar()
TEXT = TextScalar()

I8 = Annotated[int, IntWidth(8)]
I16 = Annotated[int, IntWidth(16)]
I32 = Annotated[int, IntWidth(32)]
I64 = Annotated[int, IntWidth(64)]
U8 = Annotated[int, IntWidth(8, signed=False)]
U16 = Annotated[int, IntWidth(16, signed=False)]
U32 = Annotated[int, IntWidth(32, signed=False)]
U64 = Annotated[int, IntWidth(64, signed=False)]
Char = Annotated[str, CHAR]

# =============================================================================
# Shapes
# =============================================================================


@dataclass(frozen=True)
class ScalarShape:
    """A value occupying exactly one non-empty line."""

    kind: Literal["str", "char", "int"]
    bits: int = 64
    signed: bool = True


@dataclass(frozen=True)
class OptionalShape:
    """A value that may be absent (a blank line in place of the value)."""

    inner: Shape


@dataclass(frozen=True)
class SequenceShape:
    """Zero or more element lines terminated by a blank line.

    ``items`` holds one shape for homogeneous containers and one shape per
    position for fixed-length tuples (``variadic`` is then False).
    """

    items: tuple[Shape, ...]
    container: type = list
    variadic: bool = True

    def element(self, index: int) -> Shape | None:
        if self.variadic:
            return self.items[0]
        if index < len(self.items):
            return self.items[index]
        return None


@dataclass(frozen=True)
class RecordShape:
    """A field map: a pydantic model, or a ``dict[str, V]`` when ``model`` is None."""

    model: type[BaseModel] | None = None
    values: Shape | None = None

    def field_shape(self, key: str) -> Shape | None:
        """Shape of the value stored under ``key``, None for undeclared keys."""
        if self.model is None:
            return self.values
        return model_field_shapes(self.model).get(key)


@dataclass(frozen=True)
class UnitShape:
    """An empty value: a blank line or the end of the input."""


@dataclass(frozen=True)
class UnsupportedShape:
    """A kind the line grammar cannot express."""

    kind: str


Shape = Union[ScalarShape, OptionalShape, SequenceShape, RecordShape, UnitShape, UnsupportedShape]

SEQUENCE_ORIGINS: dict[Any, type] = {
    list: list,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}
MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)
FLOAT_TYPES = (float, Decimal, complex)
BYTES_TYPES = (bytes, bytearray, memoryview)

# =============================================================================
# Resolution
# =============================================================================


def _marker_shape(metadata: tuple[Any, ...]) -> Shape | None:
    """Return the scalar shape selected by an annotation marker, if any."""
    for item in metadata:
        if isinstance(item, IntWidth):
            return ScalarShape("int", item.bits, item.signed)
        if isinstance(item, CharScalar):
            return ScalarShape("char")
        if isinstance(item, TextScalar):
            return ScalarShape("str")
    return None


def _type_name(annotation: Any) -> str:
    return getattr(annotation, "__name__", None) or str(annotation)


def resolve_shape(annotation: Any, metadata: tuple[Any, ...] = ()) -> Shape:
    """Resolve a type annotation (plus ``Annotated`` metadata) into a shape.

    Args:
        annotation: The requested Python type.
        metadata: Extra ``Annotated`` metadata that applies to ``annotation``
            (pydantic strips top-level metadata off field annotations).

    Returns:
        The shape the decoder dispatches on.
    """
    marked = _marker_shape(metadata)
    if marked is not None:
        return marked

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Annotated:
        return resolve_shape(args[0], tuple(annotation.__metadata__) + tuple(metadata))

    if annotation is None or annotation is type(None):
        return UnitShape()
    if annotation is Any:
        return UnsupportedShape("any")

    # Primitive types; bool is an int subclass so it goes first
    if annotation is bool:
        return UnsupportedShape("boolean")
    if annotation is str:
        return ScalarShape("str")
    if annotation is int:
        return ScalarShape("int")
    if inspect.isclass(annotation):
        if issubclass(annotation, FLOAT_TYPES):
            return UnsupportedShape("float")
        if issubclass(annotation, BYTES_TYPES):
            return UnsupportedShape("bytes")
        if issubclass(annotation, enum.Enum):
            return UnsupportedShape("enum")
        if issubclass(annotation, BaseModel):
            return RecordShape(model=annotation)

    # Optional[T] or T | None
    if origin in (types.UnionType, Union):
        non_none_args = [arg for arg in args if arg is not type(None)]
        if len(non_none_args) != 1:
            return UnsupportedShape("union")
        inner = resolve_shape(non_none_args[0])
        if len(non_none_args) < len(args):
            return OptionalShape(inner)
        return inner

    if origin is Literal:
        return UnsupportedShape("literal")

    if annotation in SEQUENCE_ORIGINS or origin in SEQUENCE_ORIGINS:
        container = SEQUENCE_ORIGINS[origin if origin is not None else annotation]
        if not args:
            return SequenceShape((UnsupportedShape("any"),), container)
        if container is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            return SequenceShape(tuple(resolve_shape(arg) for arg in args), tuple, variadic=False)
        return SequenceShape((resolve_shape(args[0]),), container)

    if annotation in MAPPING_ORIGINS or origin in MAPPING_ORIGINS:
        if not args:
            return RecordShape(values=UnsupportedShape("any"))
        key_shape = resolve_shape(args[0])
        if key_shape != ScalarShape("str"):
            return UnsupportedShape("non-string keys")
        return RecordShape(values=resolve_shape(args[1]))

    return UnsupportedShape(_type_name(annotation))


def field_key(name: str, field: Any) -> str:
    """Wire key of a pydantic field: its validation alias, alias, or name."""
    if isinstance(field.validation_alias, str):
        return field.validation_alias
    if field.alias:
        return field.alias
    return name


@functools.lru_cache(maxsize=None)
def model_field_shapes(model: type[BaseModel]) -> dict[str, Shape]:
    """Map each wire key of ``model`` to the shape of its value, in declared order."""
    shapes: dict[str, Shape] = {}
    for name, field in model.model_fields.items():
        shapes[field_key(name, field)] = resolve_shape(field.annotation, tuple(field.metadata))
    return shapes
