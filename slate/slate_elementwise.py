# slate/slate_elementwise.py
from __future__ import annotations

import logging
import numbers
from typing import Callable

import numpy as np

from slate.slate_errors import InvalidValueError, ShapeMismatchError
from slate.slate_matrix import PolicyLike, SlateMatrix, coerce_cell
from slate.slate_shape_policy import SlateShapePolicy

logger = logging.getLogger(__name__)

Operand = SlateMatrix | float | int


# --------------------------------------------------
# Helpers
# --------------------------------------------------

def finite_or_zero(arr: np.ndarray) -> np.ndarray:
    """Replace NaN / +/-inf cells with 0.0 (nothing non-finite leaves the core)."""
    return np.where(np.isfinite(arr), arr, 0.0)


def align_to(data: np.ndarray, shape: tuple[int, int]) -> np.ndarray:
    """
    Crop / zero-pad `data` to `shape`.
    Cells the source does not have read as 0.0.
    """
    out = np.zeros(shape, dtype=np.float64)
    r = min(shape[0], data.shape[0])
    c = min(shape[1], data.shape[1])
    out[:r, :c] = data[:r, :c]
    return out


def aligned_operand(
    a: SlateMatrix,
    b: SlateMatrix,
    op: str,
    policy: PolicyLike = SlateShapePolicy.LENIENT,
) -> np.ndarray:
    """
    Return b's cells laid out in a's shape.

    LENIENT: mismatched shapes are cropped / zero-filled (with a warning).
    STRICT:  mismatched shapes raise ShapeMismatchError.
    """
    if b.shape == a.shape:
        return b.data

    if SlateShapePolicy.from_value(policy) is SlateShapePolicy.STRICT:
        raise ShapeMismatchError(op, a.shape, b.shape)

    logger.warning(
        "%s: shape mismatch %dx%d vs %dx%d, missing cells read as 0.0",
        op, a.rows, a.cols, b.rows, b.cols,
    )
    return align_to(b.data, a.shape)


def _operand(a: SlateMatrix, b: Operand, op: str, policy: PolicyLike) -> np.ndarray | float:
    if isinstance(b, SlateMatrix):
        return aligned_operand(a, b, op, policy)

    if SlateShapePolicy.from_value(policy) is SlateShapePolicy.STRICT and not isinstance(b, numbers.Real):
        raise InvalidValueError(f"{op}: expected a SlateMatrix or a real scalar, got {type(b).__name__}")

    return coerce_cell(b, SlateShapePolicy.from_value(policy))


def _apply(a: SlateMatrix, fn: Callable[[np.ndarray], np.ndarray]) -> SlateMatrix:
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        out = fn(a.data)
    return SlateMatrix._wrap(finite_or_zero(np.asarray(out, dtype=np.float64)))


# --------------------------------------------------
# Binary ops: matrix (op) matrix | scalar
# Output shape is ALWAYS a.shape.
# --------------------------------------------------

def add(a: SlateMatrix, b: Operand, policy: PolicyLike = SlateShapePolicy.LENIENT) -> SlateMatrix:
    rhs = _operand(a, b, "add", policy)
    return _apply(a, lambda x: x + rhs)


def subtract(a: SlateMatrix, b: Operand, policy: PolicyLike = SlateShapePolicy.LENIENT) -> SlateMatrix:
    rhs = _operand(a, b, "subtract", policy)
    return _apply(a, lambda x: x - rhs)


def multiply(a: SlateMatrix, b: Operand, policy: PolicyLike = SlateShapePolicy.LENIENT) -> SlateMatrix:
    """Hadamard product (matrix) or scalar broadcast (number)."""
    rhs = _operand(a, b, "multiply", policy)
    return _apply(a, lambda x: x * rhs)


def divide(a: SlateMatrix, b: Operand, policy: PolicyLike = SlateShapePolicy.LENIENT) -> SlateMatrix:
    """
    Elementwise / scalar division.

    A zero divisor yields 0.0 for that cell, never inf or NaN:

        [[1, 4]] / [[0, 2]]  ->  [[0, 2]]
    """
    rhs = _operand(a, b, "divide", policy)
    divisor = np.broadcast_to(np.asarray(rhs, dtype=np.float64), a.shape)

    def _safe_divide(x: np.ndarray) -> np.ndarray:
        out = np.zeros_like(x)
        np.divide(x, divisor, out=out, where=divisor != 0.0)
        return out

    return _apply(a, _safe_divide)


# --------------------------------------------------
# Unary ops
# --------------------------------------------------

def square(a: SlateMatrix) -> SlateMatrix:
    """Elementwise x**2 (L2 regularisation, squared errors)."""
    return _apply(a, lambda x: x * x)


def sqrt(a: SlateMatrix) -> SlateMatrix:
    """Elementwise square root. Negative cells yield 0.0 instead of NaN."""
    return _apply(a, lambda x: np.sqrt(np.maximum(x, 0.0)))


def map_values(a: SlateMatrix, fn: Callable[[float], float]) -> SlateMatrix:
    """
    Apply a scalar function to every cell, row-major.

    Results that are not finite real numbers are stored as 0.0.
    Exceptions raised by `fn` propagate to the caller.
    """
    out = np.zeros(a.shape, dtype=np.float64)
    for i in range(a.rows):
        for j in range(a.cols):
            out[i, j] = coerce_cell(fn(float(a.data[i, j])))
    return SlateMatrix._wrap(out)
