# Copyright (c) 2025 pacdesc
# SPDX-License-Identifier: MIT
"""Error taxonomy for the package description codec.

Every failure raised by the decoder, the encoder and the repository loader
derives from :class:`DescError`, so callers can catch one type per record.
"""

from __future__ import annotations


class DescError(Exception):
    """Base error for this package."""


# =============================================================================
# Decoding
# =============================================================================


class DescDecodeError(DescError):
    """A record could not be decoded.

    Attributes:
        line: 1-based line number the failure was detected at, when known.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        self.message = message
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class UnexpectedEnd(DescDecodeError):
    """A value or field name was requested but no input was left."""


class DelimiterExpected(DescDecodeError):
    """A blank line was required but a non-blank line was found."""


class MalformedFieldName(DescDecodeError):
    """A field name line was not wrapped in ``%`` markers."""


class EmptyValueNotAllowed(DescDecodeError):
    """A scalar value line was blank."""


class CharacterOverflow(DescDecodeError):
    """A single character was requested but the line holds more than one."""


class IntegerFormatError(DescDecodeError):
    """A line is not a base-10 integer that fits the requested width."""


class UnsupportedValueKind(DescDecodeError):
    """The requested shape cannot be expressed by the line grammar."""


class RootMustBeRecord(DescDecodeError):
    """A non-record shape was requested at the document root."""


class TrailingData(DescDecodeError):
    """Input remained after the root record was decoded."""

    def __init__(self, remaining: str, line: int | None = None) -> None:
        self.remaining = remaining
        super().__init__(f"{len(remaining)} unconsumed characters after record", line)


class RecordValidationError(DescDecodeError):
    """The decoded fields do not satisfy the target model."""


# =============================================================================
# Encoding
# =============================================================================


class DescEncodeError(DescError):
    """A value could not be encoded."""


class ValueNotEncodable(DescEncodeError):
    """A value has no representation in the line grammar."""


# =============================================================================
# Repository
# =============================================================================


class RepositoryError(DescError):
    """A repository database could not be loaded."""


class HttpStatusError(RepositoryError):
    """The server answered a database or package request with a non-2xx status."""

    def __init__(self, url: str, status_code: int) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"Server returned {status_code} status for {url}")
