# activation_cross_verify.py

from __future__ import annotations

import warnings

import numpy as np
import pytest
import torch

from slate import nn_functional as F
from slate.slate_matrix import SlateMatrix


NUM_TRIALS = 255


def assert_allclose(a, b, atol=1e-9, rtol=1e-9):
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if not np.allclose(a, b, atol=atol, rtol=rtol):
        diff = np.abs(a - b)
        raise AssertionError(
            f"Arrays differ: max diff={diff.max()}, atol={atol}, rtol={rtol}"
        )


def make_random_input():
    """(R, C) float64 array, R, C in [1, 8], values in (-6, 6)."""
    r = int(np.random.randint(1, 9))
    c = int(np.random.randint(1, 9))
    return np.random.uniform(-6.0, 6.0, size=(r, c))


def torch_forward_and_grad(fn, x: np.ndarray):
    """torch forward value and d fn(x) / dx (elementwise)."""
    x_torch = torch.from_numpy(x.copy()).requires_grad_(True)
    y = fn(x_torch)
    y.backward(torch.ones_like(y))
    return y.detach().numpy(), x_torch.grad.detach().numpy()


def cross_verify_activations_once(trial_index: int):
    x = make_random_input()
    z = SlateMatrix.from_rows(x)

    # --------------
    # sigmoid: derivative takes the activation
    # --------------
    y_ref, g_ref = torch_forward_and_grad(torch.sigmoid, x)
    a = F.sigmoid(z)
    assert_allclose(a.data, y_ref)
    assert_allclose(F.sigmoid_prime(a).data, g_ref)

    # --------------
    # tanh: derivative takes the activation
    # --------------
    y_ref, g_ref = torch_forward_and_grad(torch.tanh, x)
    a = F.tanh(z)
    assert_allclose(a.data, y_ref)
    assert_allclose(F.tanh_prime(a).data, g_ref)

    # --------------
    # relu: derivative takes the pre-activation
    # --------------
    y_ref, g_ref = torch_forward_and_grad(torch.relu, x)
    assert_allclose(F.relu(z).data, y_ref)
    assert_allclose(F.relu_prime(z).data, g_ref)

    # --------------
    # Named lookup gives the same answers from z alone
    # --------------
    for name, fn in (("sigmoid", torch.sigmoid), ("tanh", torch.tanh), ("relu", torch.relu)):
        _, g_ref = torch_forward_and_grad(fn, x)
        assert_allclose(F.activation_derivative(name, z).data, g_ref)


def test_activation_cross_verify():
    np.random.seed(1234)
    torch.manual_seed(1234)
    for i in range(NUM_TRIALS):
        cross_verify_activations_once(i)


def test_relu_prime_needs_pre_activation():
    z = SlateMatrix.from_rows([[-2.0, 0.0, 3.0]])
    assert F.relu_prime(z).to_list() == [[0.0, 0.0, 1.0]]
    assert F.ACTIVATIONS["relu"][2] is F.SlateDerivativeInput.INPUT
    assert F.ACTIVATIONS["sigmoid"][2] is F.SlateDerivativeInput.OUTPUT
    assert F.ACTIVATIONS["tanh"][2] is F.SlateDerivativeInput.OUTPUT


def test_sigmoid_saturates_without_overflow():
    out = F.sigmoid(SlateMatrix.from_rows([[-1000.0, 0.0, 1000.0]]))
    assert np.isfinite(out.data).all()
    assert out.to_list() == [[0.0, 0.5, 1.0]]


def test_activations_and_derivatives_never_leave_inf():
    huge = SlateMatrix.from_rows([[1e200, -1e200, 1e308, -1e308]])
    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        outputs = [
            F.sigmoid(huge),
            F.sigmoid_prime(huge),
            F.tanh(huge),
            F.tanh_prime(huge),
            F.relu(huge),
            F.relu_prime(huge),
        ]
    for out in outputs:
        assert out.shape == huge.shape
        assert np.isfinite(out.data).all()

    # a * (1 - a) and 1 - a**2 overflow for a = 1e200; those cells read as 0.0
    assert F.sigmoid_prime(SlateMatrix.from_rows([[1e200]])).to_list() == [[0.0]]
    assert F.tanh_prime(SlateMatrix.from_rows([[1e200]])).to_list() == [[0.0]]


def test_unknown_activation_is_rejected():
    with pytest.raises(ValueError):
        F.activation_derivative("swish", SlateMatrix(1, 1))


if __name__ == "__main__":
    print(f"[activation_cross_verify] Running {NUM_TRIALS} random trials...")
    np.random.seed(1234)
    torch.manual_seed(1234)

    try:
        for i in range(NUM_TRIALS):
            cross_verify_activations_once(i)
            print(f"  [OK] trial {i+1}/{NUM_TRIALS}")
    except AssertionError as e:
        print(f"[activation_cross_verify] FAILED on trial {i}: {e}")
        raise
    else:
        test_relu_prime_needs_pre_activation()
        test_sigmoid_saturates_without_overflow()
        test_activations_and_derivatives_never_leave_inf()
        test_unknown_activation_is_rejected()
        print("[activation_cross_verify] All activation tests passed. "
              "slate sigmoid/tanh/relu (+ derivatives) == torch autograd.")
