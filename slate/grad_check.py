# slate/grad_check.py
from __future__ import annotations

from typing import Callable, Iterable, List, Tuple

from slate.nn_functional import activation_derivative, get_activation
from slate.slate_matrix import SlateMatrix

DEFAULT_EPS = 1e-4


def numeric_derivative(fn: Callable[[float], float], z: float, eps: float = DEFAULT_EPS) -> float:
    """
    Central finite difference:

        f'(z) ~= (f(z + eps) - f(z - eps)) / (2 * eps)
    """
    return (fn(z + eps) - fn(z - eps)) / (2.0 * eps)


def _scalar_activation(name: str) -> Callable[[float], float]:
    forward, _, _ = get_activation(name)

    def _fn(x: float) -> float:
        return forward(SlateMatrix(1, 1, x))[0, 0]

    return _fn


def check_activation_derivative(
    name: str,
    points: Iterable[float],
    eps: float = DEFAULT_EPS,
) -> List[Tuple[float, float, float]]:
    """
    Compare the analytic derivative of a named activation against
    finite differences at each z in `points`.

    Returns [(z, analytic, numeric), ...].

    ReLU is not differentiable at 0; the numeric estimate there is 0.5
    while the analytic value is 0.
    """
    fn = _scalar_activation(name)
    results: List[Tuple[float, float, float]] = []
    for z in points:
        z = float(z)
        analytic = activation_derivative(name, SlateMatrix(1, 1, z))[0, 0]
        numeric = numeric_derivative(fn, z, eps)
        results.append((z, analytic, numeric))
    return results


def max_derivative_error(name: str, points: Iterable[float], eps: float = DEFAULT_EPS) -> float:
    """Largest |analytic - numeric| over `points` (0.0 for no points)."""
    errors = [abs(a - n) for _, a, n in check_activation_derivative(name, points, eps)]
    return max(errors, default=0.0)
