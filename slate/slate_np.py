# slate/slate_np.py
"""
Flat, numpy-flavoured namespace over the slate core.

Simulator modules import this once and call free functions:

    from slate import slate_np as snp

    snp.seed(42)
    W = snp.random_normal(4, 3, 0.0, 0.5)
    a = snp.sigmoid(snp.add(snp.dot(W, x), b))

Nothing here holds state except `seed`, which reseeds the generator bound
to the current context (see slate_random.current_rng).
"""
from __future__ import annotations

import numbers
from typing import Any, Callable, Iterable, Optional

from slate import nn_functional as F
from slate import slate_elementwise as ew
from slate import slate_linalg as la
from slate.slate_matrix import PolicyLike, SlateMatrix
from slate.slate_random import SlateRandom, current_rng
from slate.slate_shape_policy import SlateShapePolicy

LENIENT = SlateShapePolicy.LENIENT
STRICT = SlateShapePolicy.STRICT


# --------------------------------------------------
# RNG / construction
# --------------------------------------------------

def seed(value: int) -> None:
    current_rng().seed(value)


def matrix(source: Any, policy: PolicyLike = LENIENT) -> SlateMatrix:
    return SlateMatrix.from_rows(source, policy=policy)


def zeros(rows: int, cols: int) -> SlateMatrix:
    return SlateMatrix.zeros(rows, cols)


def ones(rows: int, cols: int) -> SlateMatrix:
    return SlateMatrix.full(rows, cols, 1.0)


def random(rows: int, cols: int, scale: float = 0.1, rng: Optional[SlateRandom] = None) -> SlateMatrix:
    return SlateMatrix.random(rows, cols, scale, rng=rng)


def random_normal(
    rows: int,
    cols: int,
    mean: float = 0.0,
    std: float = 1.0,
    rng: Optional[SlateRandom] = None,
) -> SlateMatrix:
    return SlateMatrix.random_normal(rows, cols, mean, std, rng=rng)


# --------------------------------------------------
# Arithmetic / linear algebra
# --------------------------------------------------

def dot(a: SlateMatrix, b: SlateMatrix, policy: PolicyLike = LENIENT) -> SlateMatrix:
    return la.dot(a, b, policy=policy)


dot_lenient = la.dot_lenient
dot_strict = la.dot_strict
transpose = la.transpose
softmax = la.softmax


def add(a: SlateMatrix, b, policy: PolicyLike = LENIENT) -> SlateMatrix:
    return ew.add(a, b, policy=policy)


def subtract(a: SlateMatrix, b, policy: PolicyLike = LENIENT) -> SlateMatrix:
    return ew.subtract(a, b, policy=policy)


def multiply(a: SlateMatrix, b, policy: PolicyLike = LENIENT) -> SlateMatrix:
    return ew.multiply(a, b, policy=policy)


def divide(a: SlateMatrix, b, policy: PolicyLike = LENIENT) -> SlateMatrix:
    return ew.divide(a, b, policy=policy)


sqrt = ew.sqrt
square = ew.square


def map(a: SlateMatrix, fn: Callable[[float], float]) -> SlateMatrix:
    return ew.map_values(a, fn)


def sum(a: SlateMatrix) -> float:
    return a.sum()


def argmax(values: Iterable[float] | SlateMatrix | None) -> int:
    """
    Index of the FIRST maximum of a flat sequence (a matrix is read row-major).

        argmax([1, 3, 3, 2]) == 1
        argmax([])           == 0

    NaN entries never win. Entries that are not real numbers (None, strings)
    are skipped, but still count towards the index.
    """
    if values is None:
        return 0
    if isinstance(values, SlateMatrix):
        values = values.to_array()

    best = float("-inf")
    idx = 0
    for i, v in enumerate(values):
        if isinstance(v, bool) or not isinstance(v, numbers.Real):
            continue
        v = float(v)
        if v > best:
            best = v
            idx = i
    return idx


# --------------------------------------------------
# Activations / losses
# --------------------------------------------------

sigmoid = F.sigmoid
sigmoid_prime = F.sigmoid_prime
relu = F.relu
relu_prime = F.relu_prime
tanh = F.tanh
tanh_prime = F.tanh_prime
mean_squared_error = F.mean_squared_error
binary_cross_entropy = F.binary_cross_entropy

# Names used by the browser simulator's modules
randomNormal = random_normal
sigmoidPrime = sigmoid_prime
reluPrime = relu_prime
tanhPrime = tanh_prime
meanSquaredError = mean_squared_error
binaryCrossEntropy = binary_cross_entropy
