"""Errors raised by the transform passes."""

from __future__ import annotations


class TransformError(Exception):
    """A transform pass could not handle the file."""

    def __init__(self, msg: str, line: int = 0, col: int = 0):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        if line:
            super().__init__(msg + " at line " + str(line) + " col " + str(col))
        else:
            super().__init__(msg)


class UnsupportedShapeError(TransformError):
    """Source construct outside the shapes the passes model."""


class AmbiguousTypedefError(TransformError):
    """Two local typedefs in one file share a name."""

    def __init__(self, name: str, first_line: int, second_line: int):
        self.name: str = name
        self.first_line: int = first_line
        super().__init__(
            "local typedef '"
            + name
            + "' already defined at line "
            + str(first_line),
            second_line,
            1,
        )
