# elementwise_cross_verify.py

from __future__ import annotations

import math

import numpy as np

from slate import slate_elementwise as ew
from slate.slate_matrix import SlateMatrix


# --------------------------------------------------
# Config
# --------------------------------------------------

NUM_TRIALS = 255


# --------------------------------------------------
# Helpers
# --------------------------------------------------

def assert_allclose(a, b, atol=1e-9, rtol=1e-9):
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise AssertionError(f"Shapes differ: {a.shape} vs {b.shape}")
    if not np.allclose(a, b, atol=atol, rtol=rtol):
        diff = np.abs(a - b)
        raise AssertionError(
            f"Arrays differ: max |a-b| = {float(diff.max())}, "
            f"atol={atol}, rtol={rtol}"
        )


def make_random_pair():
    """Same-shaped (R, C) arrays, R, C in [1, 8], values in (-5, 5)."""
    r = int(np.random.randint(1, 9))
    c = int(np.random.randint(1, 9))
    x = np.random.uniform(-5.0, 5.0, size=(r, c))
    y = np.random.uniform(-5.0, 5.0, size=(r, c))
    return x, y


# --------------------------------------------------
# Cross verification against numpy
# --------------------------------------------------

def cross_verify_elementwise_once(trial_index: int):
    x, y = make_random_pair()
    a = SlateMatrix.from_rows(x)
    b = SlateMatrix.from_rows(y)
    s = float(np.random.uniform(-3.0, 3.0))

    assert_allclose(ew.add(a, b).data, x + y)
    assert_allclose(ew.subtract(a, b).data, x - y)
    assert_allclose(ew.multiply(a, b).data, x * y)
    assert_allclose(ew.divide(a, b).data, x / y)

    assert_allclose(ew.add(a, s).data, x + s)
    assert_allclose(ew.multiply(a, s).data, x * s)
    assert_allclose(a.multiply_scalar(s).data, x * s)

    assert_allclose(ew.square(a).data, x * x)
    assert_allclose(ew.sqrt(ew.square(a)).data, np.abs(x))
    assert_allclose(ew.map_values(a, lambda v: 2.0 * v + 1.0).data, 2.0 * x + 1.0)


def test_elementwise_cross_verify():
    np.random.seed(1234)
    for i in range(NUM_TRIALS):
        cross_verify_elementwise_once(i)


# --------------------------------------------------
# Numerical safety
# --------------------------------------------------

def test_divide_by_zero_matrix_is_zero():
    out = ew.divide(SlateMatrix.from_rows([[1]]), SlateMatrix.from_rows([[0]]))
    assert out.to_list() == [[0.0]]

    mixed = ew.divide(SlateMatrix.from_rows([[1, 4], [-6, 0]]), SlateMatrix.from_rows([[0, 2], [3, 0]]))
    assert mixed.to_list() == [[0.0, 2.0], [-2.0, 0.0]]


def test_divide_by_zero_scalar_is_zero():
    out = ew.divide(SlateMatrix.from_rows([[1, -2], [3, 4]]), 0)
    assert out.to_list() == [[0.0, 0.0], [0.0, 0.0]]


def test_sqrt_of_negative_is_zero():
    out = ew.sqrt(SlateMatrix.from_rows([[-4, 4, 0]]))
    assert out.to_list() == [[0.0, 2.0, 0.0]]


def test_overflow_never_leaves_inf():
    big = SlateMatrix.from_rows([[1e308, -1e308]])
    out = ew.multiply(big, 10.0)
    assert np.isfinite(out.data).all()
    assert out.to_list() == [[0.0, 0.0]]


def test_map_values_sanitises_results():
    out = ew.map_values(SlateMatrix.from_rows([[0.0, 1.0]]), lambda v: math.inf if v == 0.0 else v)
    assert out.to_list() == [[0.0, 1.0]]


def test_output_shape_follows_first_operand():
    a = SlateMatrix.from_rows([[1, 2, 3], [4, 5, 6]])
    b = SlateMatrix.from_rows([[10, 20]])
    out = ew.add(a, b)
    assert out.shape == a.shape
    # Missing cells of b read as 0.0
    assert out.to_list() == [[11.0, 22.0, 3.0], [4.0, 5.0, 6.0]]

    bigger = SlateMatrix.from_rows([[1, 1, 1, 1], [1, 1, 1, 1], [1, 1, 1, 1]])
    assert ew.subtract(a, bigger).to_list() == [[0.0, 1.0, 2.0], [3.0, 4.0, 5.0]]


if __name__ == "__main__":
    print(f"[elementwise_cross_verify] Running {NUM_TRIALS} random trials...")
    np.random.seed(1234)

    try:
        for i in range(NUM_TRIALS):
            cross_verify_elementwise_once(i)
    except AssertionError as e:
        print(f"[elementwise_cross_verify] FAILED on trial {i}: {e}")
        raise
    else:
        test_divide_by_zero_matrix_is_zero()
        test_divide_by_zero_scalar_is_zero()
        test_sqrt_of_negative_is_zero()
        test_overflow_never_leaves_inf()
        test_map_values_sanitises_results()
        test_output_shape_follows_first_operand()
        print("[elementwise_cross_verify] All elementwise tests passed. "
              "slate == numpy for add/subtract/multiply/divide/square/sqrt/map.")
