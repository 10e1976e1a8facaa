# Copyright (c) 2025 pacdesc
# SPDX-License-Identifier: MIT
"""Encoder for the ``%FIELD%`` package description format.

Fields are written in declaration order, each as a ``%KEY%`` line, its value
lines and one blank line. Absent values (``None``) are omitted entirely, and so
is an empty sequence in an optional model field with a default, which reads
back as absent. Other empty values in optional positions are rejected.

Example:
    >>> encode({"NAME": "sample-pkg", "DEPENDS": ["libfoo", "libbar"]})
    '%NAME%\\nsample-pkg\\n\\n%DEPENDS%\\nlibfoo\\nlibbar\\n\\n'
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from .decoder import FIELD_MARKER
from .errors import ValueNotEncodable
from .shapes import OptionalShape, RecordShape, Shape, field_key, resolve_shape

logger = logging.getLogger(__name__)

NEWLINE = "\n"

SEQUENCE_TYPES = (list, tuple, set, frozenset)


class LineWriter:
    """Collects output lines."""

    def __init__(self) -> None:
        self._lines: list[str] = []

    def push(self, content: str) -> None:
        self._lines.append(content)

    def to_string(self) -> str:
        if not self._lines:
            return ""
        return NEWLINE.join(self._lines) + NEWLINE


def encode_scalar(value: Any) -> str:
    """Render a scalar as one non-empty line."""
    if isinstance(value, bool):
        raise ValueNotEncodable("boolean values are not supported")
    if isinstance(value, enum.Enum):
        raise ValueNotEncodable(f"enum value {value!r} is not supported")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        if not value:
            raise ValueNotEncodable("empty strings cannot be encoded")
        if NEWLINE in value:
            raise ValueNotEncodable(f"value {value!r} contains a line break")
        return value
    raise ValueNotEncodable(f"{type(value).__name__} values are not supported")


def _is_empty_container(value: Any) -> bool:
    return isinstance(value, (Mapping, *SEQUENCE_TYPES)) and not value


def _is_empty_sequence(value: Any) -> bool:
    return isinstance(value, SEQUENCE_TYPES) and not value


def _optional_fields(shape: RecordShape | None) -> dict[str, bool]:
    """Whether each field of a model record may be left out of the text."""
    if shape is None or shape.model is None:
        return {}
    return {field_key(name, field): not field.is_required() for name, field in shape.model.model_fields.items()}


def _encode_value(value: Any, shape: Shape | None, writer: LineWriter) -> None:
    if isinstance(shape, OptionalShape):
        # A blank line right after the field name reads back as absent
        if _is_empty_container(value):
            raise ValueNotEncodable("an empty value in an optional position reads back as absent")
        shape = shape.inner
    if isinstance(value, BaseModel):
        shape = RecordShape(model=type(value))
        value = _dump_model(value)
    if isinstance(value, Mapping):
        _encode_record(value, shape if isinstance(shape, RecordShape) else None, writer)
    elif isinstance(value, SEQUENCE_TYPES):
        for item in value:
            if isinstance(item, (Mapping, BaseModel)):
                raise ValueNotEncodable("records inside sequences are not supported")
            if isinstance(item, SEQUENCE_TYPES):
                raise ValueNotEncodable("nested sequences are not supported")
            if item is None:
                raise ValueNotEncodable("sequences cannot hold absent values")
            writer.push(encode_scalar(item))
    else:
        writer.push(encode_scalar(value))


def _encode_record(record: Mapping[str, Any], shape: RecordShape | None, writer: LineWriter) -> None:
    omittable = _optional_fields(shape)
    for key, value in record.items():
        if value is None:
            continue
        if not isinstance(key, str) or NEWLINE in key:
            raise ValueNotEncodable(f"invalid field name {key!r}")
        field_shape = shape.field_shape(key) if shape is not None else None
        if isinstance(field_shape, OptionalShape) and _is_empty_sequence(value) and omittable.get(key):
            logger.debug(f"Writing empty optional field '{key}' as absent")
            continue
        writer.push(f"{FIELD_MARKER}{key}{FIELD_MARKER}")
        try:
            _encode_value(value, field_shape, writer)
        except ValueNotEncodable as e:
            raise ValueNotEncodable(f"field '{key}': {e}") from e
        writer.push("")


def _dump_model(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="python", by_alias=True, exclude_none=True)


def encode(value: BaseModel | Mapping[str, Any], target: Any = None) -> str:
    """Encode a record into package description text.

    Encoding follows the shape of the value's model, or of ``target`` for a
    plain mapping, down through nested records. A mapping without a target
    is written from its values alone.

    Args:
        value: A pydantic model instance (dumped by alias) or a mapping of
            wire names to values.
        target: The type the text will be decoded into, e.g.
            ``dict[str, list[str] | None]``.

    Returns:
        The record text, ending with a blank line after the last field.

    Raises:
        ValueNotEncodable: If a value has no line representation, or would
            not read back as itself.
    """
    shape: RecordShape | None = None
    if isinstance(value, BaseModel):
        shape = RecordShape(model=type(value))
        value = _dump_model(value)
    elif target is not None:
        resolved = resolve_shape(target)
        if not isinstance(resolved, RecordShape):
            raise ValueNotEncodable(f"the document root must be a record, not {target!r}")
        shape = resolved
    if not isinstance(value, Mapping):
        raise ValueNotEncodable(f"the document root must be a record, not {type(value).__name__}")
    writer = LineWriter()
    _encode_record(value, shape, writer)
    return writer.to_string()
