# slate/slate_matrix.py
from __future__ import annotations

import math
import numbers
from collections.abc import Sequence
from typing import Any, Callable, List, Optional, Tuple

import numpy as np

from slate.slate_errors import InvalidShapeError, InvalidValueError, ShapeMismatchError
from slate.slate_random import SlateRandom, current_rng
from slate.slate_shape_policy import SlateShapePolicy

PolicyLike = str | SlateShapePolicy
Scalar = float | int


# ===============================================================
# Coercion helpers
# ===============================================================

def _is_row_like(value: Any) -> bool:
    if isinstance(value, np.ndarray):
        return value.ndim >= 1
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def coerce_dimension(value: Any, name: str, policy: SlateShapePolicy) -> int:
    """
    LENIENT: floor to an int and clamp at 0 (2.7 -> 2, -3 -> 0, junk -> 0).
    STRICT:  only non-negative integral values are accepted.
    """
    if policy is SlateShapePolicy.STRICT:
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidShapeError(f"{name} must be a non-negative integer, got {value!r}")
        as_float = float(value)
        if not as_float.is_integer() or as_float < 0:
            raise InvalidShapeError(f"{name} must be a non-negative integer, got {value!r}")
        return int(as_float)

    if not isinstance(value, numbers.Real):
        return 0
    as_float = float(value)
    if not math.isfinite(as_float):
        return 0
    return max(0, math.floor(as_float))


def coerce_cell(value: Any, policy: SlateShapePolicy = SlateShapePolicy.LENIENT) -> float:
    """
    LENIENT: anything that is not a finite real number becomes 0.0.
    STRICT:  such values raise InvalidValueError.
    """
    if isinstance(value, numbers.Real):
        as_float = float(value)
        if math.isfinite(as_float):
            return as_float
    if policy is SlateShapePolicy.STRICT:
        raise InvalidValueError(f"Expected a finite real number, got {value!r}")
    return 0.0


def _grid_shape(source: Any) -> Tuple[int, int]:
    rows = len(source)
    cols = 0
    for row in source:
        if _is_row_like(row):
            cols = max(cols, len(row))
    return rows, cols


def _grid_to_array(source: Any, rows: int, cols: int, policy: SlateShapePolicy) -> np.ndarray:
    """
    Deep-copy a 2-D source into a (rows, cols) float64 array.

    LENIENT: extra rows/cells are dropped, missing rows/cells are 0.0.
    STRICT:  the source must be exactly (rows, cols).
    """
    if not _is_row_like(source):
        return np.zeros((rows, cols), dtype=np.float64)

    if policy is SlateShapePolicy.STRICT:
        if len(source) != rows or any(not _is_row_like(r) or len(r) != cols for r in source):
            raise ShapeMismatchError("SlateMatrix", (rows, cols), _grid_shape(source))

    out = np.zeros((rows, cols), dtype=np.float64)

    # Fast path: a clean numeric 2-D ndarray
    if isinstance(source, np.ndarray) and source.ndim == 2 and np.issubdtype(source.dtype, np.number):
        r = min(rows, source.shape[0])
        c = min(cols, source.shape[1])
        block = source[:r, :c].astype(np.float64)
        finite = np.isfinite(block)
        if policy is SlateShapePolicy.STRICT and not finite.all():
            raise InvalidValueError("SlateMatrix: source contains non-finite values")
        out[:r, :c] = np.where(finite, block, 0.0)
        return out

    for i in range(min(rows, len(source))):
        src_row = source[i]
        if not _is_row_like(src_row):
            # Fallback: a missing or invalid row stays all zeros
            continue
        for j in range(min(cols, len(src_row))):
            out[i, j] = coerce_cell(src_row[j], policy)
    return out


# ===============================================================
# SlateMatrix
# ===============================================================

class SlateMatrix:
    """
    Fixed-shape, row-major 2-D matrix of float64.

    Internal Rules:
    - data is ALWAYS a float64 np.ndarray of shape (rows, cols).
    - data NEVER holds NaN or +/-inf.
    - Every operation returns a NEW SlateMatrix; operands are never mutated.
      The only mutation is an explicit m[i, j] = v by the owner.

    Construction:
        SlateMatrix(2, 3)                  -> 2x3 of 0.0
        SlateMatrix(2, 3, 1.5)             -> 2x3 of 1.5
        SlateMatrix(2, 2, [[1, 2], [3]])   -> [[1, 2], [3, 0]]
        SlateMatrix.from_rows([[1, 2], [3, 4]])
    """

    __hash__ = None  # mutable via __setitem__

    def __init__(
        self,
        rows: Scalar,
        cols: Scalar,
        fill: Any = 0.0,
        policy: PolicyLike = SlateShapePolicy.LENIENT,
    ) -> None:
        policy = SlateShapePolicy.from_value(policy)

        self.rows: int = coerce_dimension(rows, "rows", policy)
        self.cols: int = coerce_dimension(cols, "cols", policy)

        if _is_row_like(fill):
            self.data: np.ndarray = _grid_to_array(fill, self.rows, self.cols, policy)
        else:
            self.data = np.full((self.rows, self.cols), coerce_cell(fill, policy), dtype=np.float64)

    # ===============================================================
    # Factories
    # ===============================================================
    @classmethod
    def _wrap(cls, arr: np.ndarray) -> "SlateMatrix":
        """
        Adopt an already-clean (rows, cols) float64 array without copying.
        Internal: callers guarantee shape and finiteness.
        """
        m = cls.__new__(cls)
        m.data = arr
        m.rows, m.cols = int(arr.shape[0]), int(arr.shape[1])
        return m

    @classmethod
    def from_rows(cls, source: Any, policy: PolicyLike = SlateShapePolicy.LENIENT) -> "SlateMatrix":
        """
        Build a matrix whose shape is inferred from a nested sequence:
        rows = len(source), cols = the longest row. Short rows are zero-padded
        (LENIENT) or rejected (STRICT).
        """
        policy = SlateShapePolicy.from_value(policy)
        if not _is_row_like(source):
            if policy is SlateShapePolicy.STRICT:
                raise InvalidShapeError(f"from_rows expects a 2-D sequence, got {type(source).__name__}")
            return cls(0, 0)
        if isinstance(source, np.ndarray) and source.ndim == 2:
            rows, cols = source.shape
        else:
            rows, cols = _grid_shape(source)
        return cls(rows, cols, source, policy=policy)

    @classmethod
    def zeros(cls, rows: Scalar, cols: Scalar) -> "SlateMatrix":
        return cls(rows, cols, 0.0)

    @classmethod
    def full(cls, rows: Scalar, cols: Scalar, value: float) -> "SlateMatrix":
        return cls(rows, cols, value)

    @classmethod
    def random(
        cls,
        rows: Scalar,
        cols: Scalar,
        scale: float = 0.1,
        rng: Optional[SlateRandom] = None,
    ) -> "SlateMatrix":
        """
        Uniform samples in [-scale, scale), drawn row-major:

            cell = (uniform() * 2 - 1) * scale
        """
        rng = rng or current_rng()
        r = coerce_dimension(rows, "rows", SlateShapePolicy.LENIENT)
        c = coerce_dimension(cols, "cols", SlateShapePolicy.LENIENT)
        data = [[(rng.next_uniform() * 2.0 - 1.0) * scale for _ in range(c)] for _ in range(r)]
        return cls(r, c, data)

    @classmethod
    def random_normal(
        cls,
        rows: Scalar,
        cols: Scalar,
        mean: float = 0.0,
        std: float = 1.0,
        rng: Optional[SlateRandom] = None,
    ) -> "SlateMatrix":
        """
        Gaussian samples (Xavier / He style init), drawn row-major:

            cell = gaussian() * std + mean
        """
        rng = rng or current_rng()
        r = coerce_dimension(rows, "rows", SlateShapePolicy.LENIENT)
        c = coerce_dimension(cols, "cols", SlateShapePolicy.LENIENT)
        data = [[rng.next_gaussian() * std + mean for _ in range(c)] for _ in range(r)]
        return cls(r, c, data)

    # ===============================================================
    # Introspection
    # ===============================================================
    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.cols)

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def _check_index(self, key: Any) -> Tuple[int, int]:
        if not isinstance(key, tuple) or len(key) != 2:
            raise TypeError(f"SlateMatrix indices must be (row, col), got {key!r}")
        i, j = key
        if not isinstance(i, numbers.Integral) or not isinstance(j, numbers.Integral):
            raise TypeError(f"SlateMatrix indices must be integers, got {key!r}")
        # No negative wrap-around: (-1, 0) is out of range, not the last row.
        if not (0 <= i < self.rows and 0 <= j < self.cols):
            raise IndexError(f"Index ({i}, {j}) out of range for {self.rows}x{self.cols} matrix")
        return int(i), int(j)

    def __getitem__(self, key) -> float:
        i, j = self._check_index(key)
        return float(self.data[i, j])

    def __setitem__(self, key, value) -> None:
        i, j = self._check_index(key)
        self.data[i, j] = coerce_cell(value)

    def get(self, i: int, j: int) -> float:
        return self[i, j]

    def set(self, i: int, j: int, value: float) -> None:
        self[i, j] = value

    def clone(self) -> "SlateMatrix":
        return SlateMatrix._wrap(self.data.copy())

    # ===============================================================
    # Export
    # ===============================================================
    def to_list(self) -> List[List[float]]:
        return self.data.tolist()

    def to_array(self) -> List[float]:
        """Flat row-major list of every cell (chart / grid friendly)."""
        return self.data.reshape(-1).tolist()

    def to_numpy(self) -> np.ndarray:
        return self.data.copy()

    def sum(self) -> float:
        return float(self.data.sum())

    # ===============================================================
    # Elementwise (see slate_elementwise)
    # ===============================================================
    def add(self, other, policy: PolicyLike = SlateShapePolicy.LENIENT) -> "SlateMatrix":
        from slate.slate_elementwise import add
        return add(self, other, policy=policy)

    def subtract(self, other, policy: PolicyLike = SlateShapePolicy.LENIENT) -> "SlateMatrix":
        from slate.slate_elementwise import subtract
        return subtract(self, other, policy=policy)

    def multiply(self, other, policy: PolicyLike = SlateShapePolicy.LENIENT) -> "SlateMatrix":
        from slate.slate_elementwise import multiply
        return multiply(self, other, policy=policy)

    def multiply_scalar(self, scalar: float) -> "SlateMatrix":
        return self.multiply(scalar)

    def divide(self, other, policy: PolicyLike = SlateShapePolicy.LENIENT) -> "SlateMatrix":
        from slate.slate_elementwise import divide
        return divide(self, other, policy=policy)

    def square(self) -> "SlateMatrix":
        from slate.slate_elementwise import square
        return square(self)

    def sqrt(self) -> "SlateMatrix":
        from slate.slate_elementwise import sqrt
        return sqrt(self)

    def map(self, fn: Callable[[float], float]) -> "SlateMatrix":
        from slate.slate_elementwise import map_values
        return map_values(self, fn)

    # ===============================================================
    # Linear algebra (see slate_linalg)
    # ===============================================================
    def dot(self, other: "SlateMatrix", policy: PolicyLike = SlateShapePolicy.LENIENT) -> "SlateMatrix":
        from slate.slate_linalg import dot
        return dot(self, other, policy=policy)

    def transpose(self) -> "SlateMatrix":
        from slate.slate_linalg import transpose
        return transpose(self)

    @property
    def T(self) -> "SlateMatrix":
        return self.transpose()

    def softmax(self) -> "SlateMatrix":
        from slate.slate_linalg import softmax
        return softmax(self)

    # ===============================================================
    # Operators
    # ===============================================================
    def __add__(self, other):
        return self.add(other)

    def __radd__(self, other):
        return self.add(other)

    def __sub__(self, other):
        return self.subtract(other)

    def __mul__(self, other):
        return self.multiply(other)

    def __rmul__(self, other):
        return self.multiply(other)

    def __truediv__(self, other):
        return self.divide(other)

    def __matmul__(self, other):
        return self.dot(other)

    def __neg__(self):
        return self.multiply(-1.0)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SlateMatrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self.data, other.data))

    def __repr__(self) -> str:
        return f"SlateMatrix({self.rows}x{self.cols}, {self.to_list()})"
