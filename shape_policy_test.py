# shape_policy_test.py
#
# Both shape disciplines are exercised on every shape-sensitive operation:
#   LENIENT (default) => zero-fill / zero result, never raises
#   STRICT            => typed errors

from __future__ import annotations

import logging

import pytest

from slate import nn_functional as F
from slate import slate_elementwise as ew
from slate import slate_linalg as la
from slate.slate_errors import (
    InvalidShapeError,
    InvalidValueError,
    ShapeMismatchError,
    SlateError,
)
from slate.slate_matrix import SlateMatrix
from slate.slate_shape_policy import SlateShapePolicy


A_2x3 = [[1, 2, 3], [4, 5, 6]]
B_2x2 = [[1, 1], [1, 1]]

ELEMENTWISE_OPS = [ew.add, ew.subtract, ew.multiply, ew.divide]


def test_policy_from_value():
    assert SlateShapePolicy.from_value("STRICT") is SlateShapePolicy.STRICT
    assert SlateShapePolicy.from_value(SlateShapePolicy.LENIENT) is SlateShapePolicy.LENIENT
    with pytest.raises(ValueError, match="lenient.*strict"):
        SlateShapePolicy.from_value("loose")
    assert SlateShapePolicy.from_value(" Lenient ") is SlateShapePolicy.LENIENT
    with pytest.raises(ValueError):
        SlateShapePolicy.from_value(3)


# --------------------------------------------------
# dot
# --------------------------------------------------

def test_dot_lenient_returns_outer_shaped_zeros(caplog):
    a = SlateMatrix.from_rows(A_2x3)
    b = SlateMatrix.from_rows(B_2x2)
    with caplog.at_level(logging.WARNING, logger="slate.slate_linalg"):
        out = la.dot(a, b)
    assert out.to_list() == [[0.0, 0.0], [0.0, 0.0]]
    assert "dot: shape mismatch 2x3 vs 2x2" in caplog.text
    assert la.dot_lenient(a, b) == out


def test_dot_strict_raises():
    a = SlateMatrix.from_rows(A_2x3)
    b = SlateMatrix.from_rows(B_2x2)
    with pytest.raises(ShapeMismatchError) as info:
        la.dot(a, b, policy="strict")
    assert info.value.op == "dot"
    assert info.value.left == (2, 3)
    assert info.value.right == (2, 2)
    with pytest.raises(ShapeMismatchError):
        la.dot_strict(a, b)
    with pytest.raises(ShapeMismatchError):
        a.dot(b, policy=SlateShapePolicy.STRICT)


def test_dot_strict_accepts_matching_shapes():
    a = SlateMatrix.from_rows(A_2x3)
    assert la.dot_strict(a, la.transpose(a)).to_list() == [[14.0, 32.0], [32.0, 77.0]]


# --------------------------------------------------
# elementwise
# --------------------------------------------------

@pytest.mark.parametrize("op", ELEMENTWISE_OPS)
def test_elementwise_lenient_keeps_first_shape(op):
    a = SlateMatrix.from_rows(A_2x3)
    b = SlateMatrix.from_rows(B_2x2)
    out = op(a, b)
    assert out.shape == (2, 3)


@pytest.mark.parametrize("op", ELEMENTWISE_OPS)
def test_elementwise_strict_raises(op):
    a = SlateMatrix.from_rows(A_2x3)
    b = SlateMatrix.from_rows(B_2x2)
    with pytest.raises(ShapeMismatchError):
        op(a, b, policy=SlateShapePolicy.STRICT)


def test_strict_rejects_non_numeric_scalar():
    a = SlateMatrix.from_rows(A_2x3)
    with pytest.raises(InvalidValueError):
        ew.add(a, "1", policy="strict")
    # Lenient reads it as 0.0
    assert ew.add(a, "1") == a


# --------------------------------------------------
# losses
# --------------------------------------------------

def test_losses_follow_policy():
    y_true = SlateMatrix.from_rows([[1.0], [0.0]])
    y_pred = SlateMatrix.from_rows([[1.0]])
    assert F.mean_squared_error(y_true, y_pred) == 0.0
    with pytest.raises(ShapeMismatchError):
        F.mean_squared_error(y_true, y_pred, policy="strict")
    with pytest.raises(ShapeMismatchError):
        F.binary_cross_entropy(y_true, y_pred, policy="strict")


# --------------------------------------------------
# construction
# --------------------------------------------------

def test_strict_construction_rejects_bad_dimensions():
    for rows, cols in [(-1, 2), (2.5, 2), ("2", 2), (True, 1)]:
        with pytest.raises(InvalidShapeError):
            SlateMatrix(rows, cols, policy="strict")
    assert SlateMatrix(2.0, 3, policy="strict").shape == (2, 3)


def test_strict_construction_rejects_ragged_source():
    with pytest.raises(ShapeMismatchError):
        SlateMatrix(2, 2, [[1, 2], [3]], policy="strict")
    with pytest.raises(ShapeMismatchError):
        SlateMatrix(3, 2, [[1, 2], [3, 4]], policy="strict")
    with pytest.raises(ShapeMismatchError):
        SlateMatrix.from_rows([[1, 2], [3]], policy="strict")


def test_strict_construction_rejects_bad_cells():
    with pytest.raises(InvalidValueError):
        SlateMatrix(1, 2, [[1, None]], policy="strict")
    with pytest.raises(InvalidValueError):
        SlateMatrix(1, 1, float("nan"), policy="strict")


def test_every_strict_error_is_a_slate_value_error():
    for cls in (ShapeMismatchError, InvalidShapeError, InvalidValueError):
        assert issubclass(cls, SlateError)
        assert issubclass(cls, ValueError)


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-q"]))
