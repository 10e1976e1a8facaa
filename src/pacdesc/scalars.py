# Copyright (c) 2025 pacdesc
# SPDX-License-Identifier: MIT
"""Conversions from one consumed line to a scalar value."""

from __future__ import annotations

import re

from .errors import CharacterOverflow, EmptyValueNotAllowed, IntegerFormatError

SIGNED_INT_REGEX = re.compile(r"[+-]?[0-9]+")
UNSIGNED_INT_REGEX = re.compile(r"\+?[0-9]+")


def read_str(line: str, line_number: int | None = None) -> str:
    """Return a non-empty line as a string value."""
    if not line:
        raise EmptyValueNotAllowed("blank line where a value was expected", line_number)
    return line


def read_char(line: str, line_number: int | None = None) -> str:
    """Return a line holding exactly one character."""
    if not line:
        raise EmptyValueNotAllowed("blank line where a character was expected", line_number)
    if len(line) != 1:
        raise CharacterOverflow(f"expected a single character, found {line!r}", line_number)
    return line


def int_bounds(bits: int, signed: bool) -> tuple[int, int]:
    """Inclusive value range of an integer of the given width."""
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def read_int(line: str, bits: int = 64, signed: bool = True, line_number: int | None = None) -> int:
    """Parse a base-10 integer that fits ``bits`` (two's complement when signed).

    Raises:
        IntegerFormatError: On anything but optional sign and decimal digits,
            or a value outside the width.
    """
    pattern = SIGNED_INT_REGEX if signed else UNSIGNED_INT_REGEX
    kind = f"{'i' if signed else 'u'}{bits}"
    if not pattern.fullmatch(line):
        raise IntegerFormatError(f"{line!r} is not a valid {kind}", line_number)
    try:
        value = int(line)
    except ValueError as e:
        raise IntegerFormatError(f"{line!r} is not a valid {kind}", line_number) from e
    low, high = int_bounds(bits, signed)
    if not low <= value <= high:
        raise IntegerFormatError(f"{value} does not fit in {kind}", line_number)
    return value
