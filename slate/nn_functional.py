# slate/nn_functional.py
from __future__ import annotations

import math
from enum import Enum
from typing import Callable, Dict, Tuple

import numpy as np

from slate.slate_elementwise import aligned_operand, finite_or_zero
from slate.slate_linalg import softmax
from slate.slate_matrix import PolicyLike, SlateMatrix
from slate.slate_shape_policy import SlateShapePolicy

BCE_EPSILON = 1e-15


# ===============================================================
# Activations
# ===============================================================
#
# Derivatives do NOT all take the same argument:
#
#   sigmoid_prime(a) = a * (1 - a)      a = sigmoid(z)   (activation)
#   tanh_prime(a)    = 1 - a**2         a = tanh(z)      (activation)
#   relu_prime(z)    = 1 if z > 0 else 0                 (pre-activation)
#
# ReLU's derivative cannot be recovered from its output at 0, so it keeps z.

def _finite(arr: np.ndarray) -> SlateMatrix:
    return SlateMatrix._wrap(finite_or_zero(arr))


def sigmoid(z: SlateMatrix) -> SlateMatrix:
    """
    1 / (1 + exp(-z)), evaluated without overflow:

        z >= 0:  1 / (1 + exp(-z))
        z <  0:  exp(z) / (1 + exp(z))
    """
    x = z.data
    out = np.empty_like(x)
    pos = x >= 0.0
    with np.errstate(over="ignore", invalid="ignore"):
        out[pos] = 1.0 / (1.0 + np.exp(-x[pos]))
        ex = np.exp(x[~pos])
        out[~pos] = ex / (1.0 + ex)
    return _finite(out)


def sigmoid_prime(a: SlateMatrix) -> SlateMatrix:
    """Derivative of sigmoid given its OUTPUT a = sigmoid(z)."""
    with np.errstate(over="ignore", invalid="ignore"):
        out = a.data * (1.0 - a.data)
    return _finite(out)


def relu(z: SlateMatrix) -> SlateMatrix:
    return _finite(np.maximum(z.data, 0.0))


def relu_prime(z: SlateMatrix) -> SlateMatrix:
    """Derivative of ReLU given its INPUT z (1 where z > 0, else 0)."""
    return _finite((z.data > 0.0).astype(np.float64))


def tanh(z: SlateMatrix) -> SlateMatrix:
    return _finite(np.tanh(z.data))


def tanh_prime(a: SlateMatrix) -> SlateMatrix:
    """Derivative of tanh given its OUTPUT a = tanh(z)."""
    with np.errstate(over="ignore", invalid="ignore"):
        out = 1.0 - a.data * a.data
    return _finite(out)


class SlateDerivativeInput(str, Enum):
    """Which value an activation's derivative expects."""

    INPUT = "input"    # pre-activation z
    OUTPUT = "output"  # activation a = f(z)


ActivationFn = Callable[[SlateMatrix], SlateMatrix]

ACTIVATIONS: Dict[str, Tuple[ActivationFn, ActivationFn, SlateDerivativeInput]] = {
    "sigmoid": (sigmoid, sigmoid_prime, SlateDerivativeInput.OUTPUT),
    "tanh": (tanh, tanh_prime, SlateDerivativeInput.OUTPUT),
    "relu": (relu, relu_prime, SlateDerivativeInput.INPUT),
}


def get_activation(name: str) -> Tuple[ActivationFn, ActivationFn, SlateDerivativeInput]:
    try:
        return ACTIVATIONS[name.lower()]
    except (KeyError, AttributeError) as e:
        raise ValueError(
            f"Unknown activation: {name!r}. Expected one of: {sorted(ACTIVATIONS)}"
        ) from e


def activation_derivative(name: str, z: SlateMatrix) -> SlateMatrix:
    """
    d f(z) / dz for a named activation, given the PRE-activation z.

    Feeds each derivative the argument it expects, so callers holding z
    never have to remember which activations want f(z) instead.
    """
    forward, derivative, takes = get_activation(name)
    if takes is SlateDerivativeInput.OUTPUT:
        return derivative(forward(z))
    return derivative(z)


# ===============================================================
# Losses
# ===============================================================

def mean_squared_error(
    y_true: SlateMatrix,
    y_pred: SlateMatrix,
    policy: PolicyLike = SlateShapePolicy.LENIENT,
) -> float:
    """
    mean((y_true - y_pred)^2) over every cell of y_true.

    y_true / y_pred are usually single-column (N, 1) matrices.
    An empty y_true gives 0.0, and an overflowing loss is reported as 0.0.
    """
    pred = aligned_operand(y_true, y_pred, "mean_squared_error", policy)
    if y_true.size == 0:
        return 0.0
    with np.errstate(over="ignore", invalid="ignore"):
        diff = y_true.data - pred
        loss = float(np.mean(diff * diff))
    return loss if math.isfinite(loss) else 0.0


def binary_cross_entropy(
    y_true: SlateMatrix,
    y_pred: SlateMatrix,
    policy: PolicyLike = SlateShapePolicy.LENIENT,
) -> float:
    """
    -mean(y * ln(p) + (1 - y) * ln(1 - p))

    Predictions are clamped to [eps, 1 - eps] (eps = 1e-15) first,
    so p = 0 or p = 1 gives a large but finite loss.
    An empty y_true gives 0.0.
    """
    pred = aligned_operand(y_true, y_pred, "binary_cross_entropy", policy)
    if y_true.size == 0:
        return 0.0
    y = y_true.data
    p = np.clip(pred, BCE_EPSILON, 1.0 - BCE_EPSILON)
    with np.errstate(over="ignore", invalid="ignore"):
        loss = -float(np.mean(y * np.log(p) + (1.0 - y) * np.log(1.0 - p)))
    return loss if math.isfinite(loss) else 0.0


__all__ = [
    "BCE_EPSILON",
    "ACTIVATIONS",
    "SlateDerivativeInput",
    "activation_derivative",
    "binary_cross_entropy",
    "get_activation",
    "mean_squared_error",
    "relu",
    "relu_prime",
    "sigmoid",
    "sigmoid_prime",
    "softmax",
    "tanh",
    "tanh_prime",
]
