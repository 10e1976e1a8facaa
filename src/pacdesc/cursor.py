# Copyright (c) 2025 pacdesc
# SPDX-License-Identifier: MIT
"""Line-at-a-time view over a package description buffer."""

from __future__ import annotations

from .errors import DelimiterExpected, UnexpectedEnd

NEWLINE = "\n"


class LineCursor:
    """Consumes an input string one line at a time.

    The cursor only ever moves forward. An empty line is the delimiter token
    of the grammar; the end of the input is treated like one for lookahead.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self._line = 1

    @property
    def line_number(self) -> int:
        """1-based number of the next unconsumed line."""
        return self._line

    @property
    def is_exhausted(self) -> bool:
        return self._pos >= len(self._text)

    @property
    def remaining(self) -> str:
        return self._text[self._pos :]

    def _line_end(self) -> int:
        return self._text.find(NEWLINE, self._pos)

    def next_line(self) -> str:
        """Consume and return the next line without its line break.

        Raises:
            UnexpectedEnd: If no input is left.
        """
        if self.is_exhausted:
            raise UnexpectedEnd("unexpected end of input", self._line)
        end = self._line_end()
        if end == -1:
            line = self._text[self._pos :]
            self._pos = len(self._text)
        else:
            line = self._text[self._pos : end]
            self._pos = end + 1
        self._line += 1
        return line

    def peek_is_blank(self) -> bool:
        """Report whether the next line is empty or the input is exhausted."""
        if self.is_exhausted:
            return True
        return self._text[self._pos] == NEWLINE

    def consume_delimiter(self) -> None:
        """Consume a blank line; a no-op at the end of the input.

        Raises:
            DelimiterExpected: If the next line is not blank.
        """
        if self.is_exhausted:
            return
        line_number = self._line
        line = self.next_line()
        if line:
            raise DelimiterExpected(f"expected blank line, found {line!r}", line_number)
