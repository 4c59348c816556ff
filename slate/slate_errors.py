# slate/slate_errors.py
from __future__ import annotations

from typing import Tuple

Shape = Tuple[int, int]


class SlateError(Exception):
    """
    Base class for every error raised by the slate core.

    The default (lenient) policy never raises these; they only surface
    when a caller opts into SlateShapePolicy.STRICT.
    """


class ShapeMismatchError(SlateError, ValueError):
    """
    Two operands (or a source grid and its declared shape) disagree.

    Attributes:
        op:    name of the operation that rejected the operands
        left:  (rows, cols) of the first operand / declared shape
        right: (rows, cols) of the second operand / source shape
    """

    def __init__(self, op: str, left: Shape, right: Shape) -> None:
        self.op = op
        self.left = (int(left[0]), int(left[1]))
        self.right = (int(right[0]), int(right[1]))
        super().__init__(
            f"{op}: shape mismatch "
            f"{self.left[0]}x{self.left[1]} vs {self.right[0]}x{self.right[1]}"
        )


class InvalidShapeError(SlateError, ValueError):
    """A dimension was negative, fractional, or not a number."""


class InvalidValueError(SlateError, ValueError):
    """A cell or scalar operand was not a finite real number."""
