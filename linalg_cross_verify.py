# linalg_cross_verify.py

from __future__ import annotations

import warnings

import numpy as np
import torch

from slate import slate_linalg as la
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


def make_random_matmul_pair():
    """(R, K) and (K, C) arrays with R, K, C in [1, 8]."""
    r = int(np.random.randint(1, 9))
    k = int(np.random.randint(1, 9))
    c = int(np.random.randint(1, 9))
    x = np.random.uniform(-5.0, 5.0, size=(r, k))
    y = np.random.uniform(-5.0, 5.0, size=(k, c))
    return x, y


# --------------------------------------------------
# dot / transpose vs numpy
# --------------------------------------------------

def cross_verify_dot_once(trial_index: int):
    x, y = make_random_matmul_pair()
    a = SlateMatrix.from_rows(x)
    b = SlateMatrix.from_rows(y)

    assert_allclose(la.dot(a, b).data, x @ y)
    assert_allclose((a @ b).data, x @ y)
    assert_allclose(la.transpose(a).data, x.T)
    assert la.transpose(la.transpose(a)) == a


def test_dot_cross_verify():
    np.random.seed(1234)
    for i in range(NUM_TRIALS):
        cross_verify_dot_once(i)


def test_dot_fixture():
    a = SlateMatrix.from_rows([[1, 0, 0], [0, 1, 0]])
    b = SlateMatrix.from_rows([[1, 2], [3, 4], [5, 6]])
    assert la.dot(a, b).to_list() == [[1.0, 2.0], [3.0, 4.0]]


def test_transpose_shape_and_cells():
    m = SlateMatrix.from_rows([[1, 2, 3], [4, 5, 6]])
    t = la.transpose(m)
    assert t.shape == (3, 2)
    for i in range(m.rows):
        for j in range(m.cols):
            assert t[j, i] == m[i, j]

    empty = SlateMatrix(0, 4)
    assert la.transpose(empty).shape == (4, 0)


def test_dot_with_empty_inner_dimension_is_zeros():
    out = la.dot(SlateMatrix(2, 0), SlateMatrix(0, 3))
    assert out.to_list() == [[0.0, 0.0, 0.0], [0.0, 0.0, 0.0]]


# --------------------------------------------------
# softmax vs torch
# --------------------------------------------------

def cross_verify_softmax_once(trial_index: int):
    r = int(np.random.randint(1, 9))
    c = int(np.random.randint(1, 9))
    x = np.random.uniform(-20.0, 20.0, size=(r, c))
    m = SlateMatrix.from_rows(x)

    out = la.softmax(m).data
    ref = torch.softmax(torch.from_numpy(x.copy()), dim=1).numpy()
    assert_allclose(out, ref, atol=1e-12, rtol=1e-9)

    # Each row is a probability distribution
    assert_allclose(out.sum(axis=1), np.ones(r), atol=1e-9, rtol=0.0)
    assert np.all(out > 0.0) and np.all(out <= 1.0)

    # Shift invariance per row
    shifts = np.random.uniform(-100.0, 100.0, size=(r, 1))
    shifted = la.softmax(SlateMatrix.from_rows(x + shifts)).data
    assert_allclose(shifted, out, atol=1e-9, rtol=1e-9)


def test_softmax_cross_verify():
    np.random.seed(1234)
    torch.manual_seed(1234)
    for i in range(NUM_TRIALS):
        cross_verify_softmax_once(i)


def test_softmax_is_stable_for_huge_logits():
    out = la.softmax(SlateMatrix.from_rows([[1000.0, 1000.0], [-1000.0, 0.0]]))
    assert np.isfinite(out.data).all()
    assert_allclose(out.data[0], [0.5, 0.5])
    assert_allclose(out.data[1], [0.0, 1.0], atol=1e-300)


def test_softmax_of_extreme_row_is_quiet_and_finite():
    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        out = la.softmax(SlateMatrix.from_rows([[1.7e308, -1.7e308]]))
    assert np.isfinite(out.data).all()
    assert out.to_list() == [[1.0, 0.0]]


def test_softmax_of_empty_keeps_shape():
    assert la.softmax(SlateMatrix(3, 0)).shape == (3, 0)
    assert la.softmax(SlateMatrix(0, 0)).shape == (0, 0)


if __name__ == "__main__":
    print(f"[linalg_cross_verify] Running {NUM_TRIALS} random trials...")
    np.random.seed(1234)
    torch.manual_seed(1234)

    try:
        for i in range(NUM_TRIALS):
            cross_verify_dot_once(i)
            cross_verify_softmax_once(i)
            print(f"  [OK] trial {i+1}/{NUM_TRIALS}")
    except AssertionError as e:
        print(f"[linalg_cross_verify] FAILED on trial {i}: {e}")
        raise
    else:
        test_dot_fixture()
        test_transpose_shape_and_cells()
        test_dot_with_empty_inner_dimension_is_zeros()
        test_softmax_is_stable_for_huge_logits()
        test_softmax_of_empty_keeps_shape()
        test_softmax_of_extreme_row_is_quiet_and_finite()
        print("[linalg_cross_verify] All linalg tests passed. "
              "slate dot/transpose == numpy, slate softmax == torch.softmax.")
