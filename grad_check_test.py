# grad_check_test.py

from __future__ import annotations

import math

import numpy as np

from slate.grad_check import check_activation_derivative, max_derivative_error, numeric_derivative
from slate.nn_functional import sigmoid, sigmoid_prime
from slate.slate_matrix import SlateMatrix


NUM_POINTS = 101


def sample_points(low=-5.0, high=5.0, n=NUM_POINTS):
    """Evenly spaced points, nudged off 0 so ReLU's kink is never sampled."""
    pts = np.linspace(low, high, n) + 1e-3
    return [float(p) for p in pts]


def test_sigmoid_prime_of_sigmoid_matches_finite_difference():
    def scalar_sigmoid(x: float) -> float:
        return 1.0 / (1.0 + math.exp(-x))

    for z in sample_points():
        a = sigmoid(SlateMatrix(1, 1, z))
        analytic = sigmoid_prime(a)[0, 0]
        numeric = numeric_derivative(scalar_sigmoid, z)
        assert abs(analytic - numeric) < 1e-3


def test_every_activation_passes_grad_check():
    for name in ("sigmoid", "tanh", "relu"):
        assert max_derivative_error(name, sample_points()) < 1e-3


def test_check_returns_one_row_per_point():
    rows = check_activation_derivative("tanh", [-1.0, 0.5, 2.0])
    assert [z for z, _, _ in rows] == [-1.0, 0.5, 2.0]
    for _, analytic, numeric in rows:
        assert math.isclose(analytic, numeric, abs_tol=1e-6)


def test_relu_kink_is_reported_not_hidden():
    (z, analytic, numeric), = check_activation_derivative("relu", [0.0])
    assert analytic == 0.0
    assert math.isclose(numeric, 0.5)


def test_no_points_means_no_error():
    assert max_derivative_error("sigmoid", []) == 0.0


if __name__ == "__main__":
    tests = [v for k, v in list(globals().items()) if k.startswith("test_")]
    for t in tests:
        t()
        print(f"  [OK] {t.__name__}")
    print(f"[grad_check_test] All {len(tests)} tests passed.")
