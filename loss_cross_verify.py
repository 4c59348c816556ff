# loss_cross_verify.py

from __future__ import annotations

import math

import numpy as np
import torch
import torch.nn.functional as TF

from slate import nn_functional as F
from slate.slate_matrix import SlateMatrix


NUM_TRIALS = 255


def assert_close(a: float, b: float, atol=1e-9, rtol=1e-9):
    if not math.isclose(a, b, abs_tol=atol, rel_tol=rtol):
        raise AssertionError(f"Values differ: {a} vs {b}, |a-b|={abs(a - b)}")


def make_random_targets():
    """Single-column (N, 1) binary targets and probabilities in (0.01, 0.99)."""
    n = int(np.random.randint(1, 33))
    y = np.random.randint(0, 2, size=(n, 1)).astype(np.float64)
    p = np.random.uniform(0.01, 0.99, size=(n, 1))
    return y, p


def cross_verify_losses_once(trial_index: int):
    y, p = make_random_targets()
    y_true = SlateMatrix.from_rows(y)
    y_pred = SlateMatrix.from_rows(p)

    y_t = torch.from_numpy(y.copy())
    p_t = torch.from_numpy(p.copy())

    assert_close(F.mean_squared_error(y_true, y_pred), float(TF.mse_loss(p_t, y_t)))
    assert_close(F.binary_cross_entropy(y_true, y_pred), float(TF.binary_cross_entropy(p_t, y_t)))


def test_loss_cross_verify():
    np.random.seed(1234)
    torch.manual_seed(1234)
    for i in range(NUM_TRIALS):
        cross_verify_losses_once(i)


def test_mse_of_identical_is_zero():
    assert F.mean_squared_error(SlateMatrix.from_rows([[3]]), SlateMatrix.from_rows([[3]])) == 0.0


def test_mse_overflow_never_leaves_inf():
    y_true = SlateMatrix.from_rows([[1e200], [0.0]])
    y_pred = SlateMatrix.from_rows([[-1e200], [0.0]])
    loss = F.mean_squared_error(y_true, y_pred)
    assert math.isfinite(loss)
    assert loss == 0.0


def test_bce_with_huge_targets_is_finite():
    # 1e308 * ln(1e-15) overflows to -inf before the mean
    loss = F.binary_cross_entropy(SlateMatrix.from_rows([[1e308]]), SlateMatrix.from_rows([[0.0]]))
    assert math.isfinite(loss)


def test_bce_at_exact_boundaries_is_finite():
    y_true = SlateMatrix.from_rows([[1], [0], [1], [0]])
    y_pred = SlateMatrix.from_rows([[0], [1], [1], [0]])
    loss = F.binary_cross_entropy(y_true, y_pred)
    assert math.isfinite(loss)
    eps = F.BCE_EPSILON
    hi = 1.0 - eps
    # Two confidently wrong rows, two perfect rows, all clamped to [eps, 1 - eps]
    expected = -(math.log(eps) + math.log(1.0 - hi) + math.log(hi) + math.log(1.0 - eps)) / 4.0
    assert_close(loss, expected)

    perfect = F.binary_cross_entropy(SlateMatrix.from_rows([[1], [0]]), SlateMatrix.from_rows([[1], [0]]))
    assert math.isfinite(perfect) and perfect < 1e-12


def test_losses_of_empty_are_zero():
    empty = SlateMatrix(0, 1)
    assert F.mean_squared_error(empty, empty) == 0.0
    assert F.binary_cross_entropy(empty, empty) == 0.0


def test_short_prediction_reads_missing_rows_as_zero():
    y_true = SlateMatrix.from_rows([[1.0], [2.0]])
    y_pred = SlateMatrix.from_rows([[1.0]])
    # Row 2 compares against 0.0
    assert_close(F.mean_squared_error(y_true, y_pred), (0.0 + 4.0) / 2.0)


if __name__ == "__main__":
    print(f"[loss_cross_verify] Running {NUM_TRIALS} random trials...")
    np.random.seed(1234)
    torch.manual_seed(1234)

    try:
        for i in range(NUM_TRIALS):
            cross_verify_losses_once(i)
    except AssertionError as e:
        print(f"[loss_cross_verify] FAILED on trial {i}: {e}")
        raise
    else:
        test_mse_of_identical_is_zero()
        test_mse_overflow_never_leaves_inf()
        test_bce_with_huge_targets_is_finite()
        test_bce_at_exact_boundaries_is_finite()
        test_losses_of_empty_are_zero()
        test_short_prediction_reads_missing_rows_as_zero()
        print("[loss_cross_verify] All loss tests passed. "
              "slate MSE/BCE == torch mse_loss/binary_cross_entropy.")
