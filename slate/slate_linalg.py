# slate/slate_linalg.py
from __future__ import annotations

import logging

import numpy as np

from slate.slate_elementwise import finite_or_zero
from slate.slate_errors import ShapeMismatchError
from slate.slate_matrix import PolicyLike, SlateMatrix
from slate.slate_shape_policy import SlateShapePolicy

logger = logging.getLogger(__name__)


def dot(a: SlateMatrix, b: SlateMatrix, policy: PolicyLike = SlateShapePolicy.LENIENT) -> SlateMatrix:
    """
    Matrix multiplication: (R, K) @ (K, C) -> (R, C)

        out[i][j] = sum_k a[i][k] * b[k][j]

    Inner dimensions must agree. When they don't:
        LENIENT => a zero matrix of shape (a.rows, b.cols), plus a warning
        STRICT  => ShapeMismatchError
    """
    if a.cols != b.rows:
        if SlateShapePolicy.from_value(policy) is SlateShapePolicy.STRICT:
            raise ShapeMismatchError("dot", a.shape, b.shape)
        logger.warning(
            "dot: shape mismatch %dx%d vs %dx%d, returning %dx%d zeros",
            a.rows, a.cols, b.rows, b.cols, a.rows, b.cols,
        )
        return SlateMatrix.zeros(a.rows, b.cols)

    with np.errstate(over="ignore", invalid="ignore"):
        out = a.data @ b.data
    return SlateMatrix._wrap(finite_or_zero(out))


def dot_lenient(a: SlateMatrix, b: SlateMatrix) -> SlateMatrix:
    return dot(a, b, policy=SlateShapePolicy.LENIENT)


def dot_strict(a: SlateMatrix, b: SlateMatrix) -> SlateMatrix:
    return dot(a, b, policy=SlateShapePolicy.STRICT)


def transpose(a: SlateMatrix) -> SlateMatrix:
    """(R, C) -> (C, R) with out[j][i] = a[i][j]."""
    return SlateMatrix._wrap(np.ascontiguousarray(a.data.T))


def softmax(a: SlateMatrix) -> SlateMatrix:
    """
    Row-wise softmax (attention weights, class probabilities).

    For stability each row's max is subtracted before exponentiating:

        p_ij = exp(x_ij - max_j x_ij) / sum_j exp(x_ij - max_j x_ij)

    Every row of the result sums to 1, and adding a constant to a row
    leaves that row's output unchanged.
    """
    if a.rows == 0 or a.cols == 0:
        return SlateMatrix.zeros(a.rows, a.cols)

    with np.errstate(over="ignore", under="ignore"):
        shifted = a.data - a.data.max(axis=1, keepdims=True)
        exps = np.exp(shifted)
    return SlateMatrix._wrap(exps / exps.sum(axis=1, keepdims=True))
