# Copyright (c) 2025 pacdesc
# SPDX-License-Identifier: MIT
"""Decoder for the ``%FIELD%`` package description format.

A document is a record: a sequence of fields, each a ``%KEY%`` line, the
value lines, and one blank line. What the value lines mean is decided by the
type the caller asks for, never by the text itself.

Example:
    >>> from pydantic import BaseModel, Field
    >>> class Entry(BaseModel):
    ...     name: str = Field(alias="NAME")
    ...     depends: list[str] = Field(alias="DEPENDS")
    >>> decode("%NAME%\\nsample-pkg\\n\\n%DEPENDS%\\nlibfoo\\nlibbar\\n\\n", Entry)
    Entry(name='sample-pkg', depends=['libfoo', 'libbar'])
"""

from __future__ import annotations

import functools
import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .cursor import LineCursor
from .errors import (
    DelimiterExpected,
    MalformedFieldName,
    RecordValidationError,
    RootMustBeRecord,
    TrailingData,
    UnsupportedValueKind,
)
from .scalars import read_char, read_int, read_str
from .shapes import (
    OptionalShape,
    RecordShape,
    ScalarShape,
    SequenceShape,
    Shape,
    UnitShape,
    UnsupportedShape,
    resolve_shape,
)

logger = logging.getLogger(__name__)

FIELD_MARKER = "%"

# =============================================================================
# Field names
# =============================================================================


def parse_field_name(cursor: LineCursor) -> str:
    """Consume a ``%KEY%`` line and return ``KEY``.

    Raises:
        MalformedFieldName: If either marker is missing.
        UnexpectedEnd: If no input is left.
    """
    line_number = cursor.line_number
    line = cursor.next_line()
    if len(line) >= 2 and line.startswith(FIELD_MARKER) and line.endswith(FIELD_MARKER):
        return line[1:-1]
    raise MalformedFieldName(f"expected a %NAME% line, found {line!r}", line_number)


# =============================================================================
# Values
# =============================================================================


def _decode_scalar(cursor: LineCursor, shape: ScalarShape) -> str | int:
    line_number = cursor.line_number
    line = cursor.next_line()
    if shape.kind == "char":
        return read_char(line, line_number)
    if shape.kind == "int":
        return read_int(line, shape.bits, shape.signed, line_number)
    return read_str(line, line_number)


def _check_element(element: Shape, line_number: int) -> None:
    """Reject element shapes up front, so an empty sequence fails the same way."""
    if isinstance(element, OptionalShape):
        element = element.inner
    if isinstance(element, SequenceShape):
        raise UnsupportedValueKind("nested sequences are not supported", line_number)
    if isinstance(element, RecordShape):
        raise UnsupportedValueKind("records inside sequences are not supported", line_number)
    if isinstance(element, UnsupportedShape):
        raise UnsupportedValueKind(f"{element.kind} values are not supported", line_number)


def _decode_sequence(cursor: LineCursor, shape: SequenceShape) -> list[Any]:
    """Decode element lines up to (not including) the next blank line."""
    for element in shape.items:
        _check_element(element, cursor.line_number)
    items: list[Any] = []
    while not cursor.peek_is_blank():
        element = shape.element(len(items))
        if element is None:
            raise UnsupportedValueKind(
                f"tuple of {len(shape.items)} elements has more lines", cursor.line_number
            )
        items.append(decode_value(cursor, element, allow_sequence=False))
    return items


def decode_value(cursor: LineCursor, shape: Shape, allow_sequence: bool = True) -> Any:
    """Decode exactly one field value.

    Args:
        cursor: The cursor positioned at the first value line.
        shape: The requested shape of the value.
        allow_sequence: False while decoding a sequence element, so that a
            sequence of sequences can never be requested.

    Returns:
        The raw value: ``str``, ``int``, ``None``, ``list`` or ``dict``.
    """
    if isinstance(shape, ScalarShape):
        return _decode_scalar(cursor, shape)

    if isinstance(shape, OptionalShape):
        if cursor.peek_is_blank():
            cursor.consume_delimiter()
            return None
        return decode_value(cursor, shape.inner, allow_sequence)

    if isinstance(shape, SequenceShape):
        if not allow_sequence:
            raise UnsupportedValueKind("nested sequences are not supported", cursor.line_number)
        return _decode_sequence(cursor, shape)

    if isinstance(shape, RecordShape):
        # Its terminating blank line would also end the enclosing sequence
        if not allow_sequence:
            raise UnsupportedValueKind("records inside sequences are not supported", cursor.line_number)
        return decode_record(cursor, shape)

    if isinstance(shape, UnitShape):
        if not cursor.peek_is_blank():
            raise DelimiterExpected("expected an empty value", cursor.line_number)
        cursor.consume_delimiter()
        return None

    if isinstance(shape, UnsupportedShape):
        raise UnsupportedValueKind(f"{shape.kind} values are not supported", cursor.line_number)

    raise TypeError(f"unknown shape {shape!r}")


# =============================================================================
# Records
# =============================================================================


def _read_block(cursor: LineCursor) -> list[str]:
    """Consume the raw lines of a value whose shape is unknown."""
    lines = []
    while not cursor.peek_is_blank():
        lines.append(cursor.next_line())
    return lines


def _keeps_extra(shape: RecordShape) -> bool:
    if shape.model is None:
        return True
    return shape.model.model_config.get("extra") in ("allow", "forbid")


def decode_record(cursor: LineCursor, shape: RecordShape) -> dict[str, Any]:
    """Decode fields until a blank line or the end of the input.

    The blank line that ends the record is left for the enclosing layer.
    Keys are matched against the shape, so their order in the text is free.

    Returns:
        The raw field values keyed by wire name, not yet validated.
    """
    values: dict[str, Any] = {}
    while not cursor.peek_is_blank():
        line_number = cursor.line_number
        key = parse_field_name(cursor)
        field_shape = shape.field_shape(key)
        if field_shape is None:
            block = _read_block(cursor)
            if _keeps_extra(shape):
                values[key] = block
            else:
                logger.debug(f"Skipping undeclared field '{key}' at line {line_number} ({len(block)} lines)")
        else:
            if key in values:
                logger.warning(f"Field '{key}' repeated at line {line_number}, keeping the last value")
            values[key] = decode_value(cursor, field_shape, allow_sequence=True)
        cursor.consume_delimiter()
    return values


# =============================================================================
# Driver
# =============================================================================


@functools.lru_cache(maxsize=256)
def _type_adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def decode_raw(input_str: str, target: Any) -> dict[str, Any]:
    """Decode ``input_str`` against ``target`` without validating the result.

    Raises:
        RootMustBeRecord: If ``target`` is not a record shape.
        TrailingData: If input remains after the record.
        DescDecodeError: On any other malformed input.
    """
    shape = resolve_shape(target)
    if not isinstance(shape, RecordShape):
        raise RootMustBeRecord(f"the document root must be a record, not {target!r}")
    cursor = LineCursor(input_str)
    raw = decode_record(cursor, shape)
    if not cursor.is_exhausted:
        raise TrailingData(cursor.remaining, cursor.line_number)
    return raw


def decode(input_str: str, target: Any) -> Any:
    """Decode a package description into an instance of ``target``.

    Args:
        input_str: The full text of one record.
        target: A pydantic model class or a ``dict[str, V]`` type.

    Returns:
        The validated value.

    Raises:
        RecordValidationError: If the fields do not satisfy ``target``.
        DescDecodeError: If the text is malformed for the requested shape.
    """
    raw = decode_raw(input_str, target)
    try:
        return _type_adapter(target).validate_python(raw)
    except ValidationError as e:
        raise RecordValidationError(str(e)) from e


def decode_bytes(data: bytes, target: Any, encoding: str = "utf-8") -> Any:
    """Decode a package description held in ``data``."""
    return decode(data.decode(encoding), target)
