# matrix_construction_test.py

from __future__ import annotations

import math

import numpy as np
import pytest

from slate.slate_matrix import SlateMatrix
from slate.slate_random import SlateRandom


NUM_TRIALS = 255


def assert_shape_invariant(m: SlateMatrix, rows: int, cols: int):
    assert m.rows == rows and m.cols == cols
    assert m.data.shape == (rows, cols)
    rows_list = m.to_list()
    assert len(rows_list) == rows
    assert all(len(r) == cols for r in rows_list)
    assert np.isfinite(m.data).all()


def test_shape_invariant_random_dims():
    np.random.seed(1234)
    for _ in range(NUM_TRIALS):
        r = int(np.random.randint(0, 9))
        c = int(np.random.randint(0, 9))
        fill = float(np.random.uniform(-5.0, 5.0))
        m = SlateMatrix(r, c, fill)
        assert_shape_invariant(m, r, c)
        if r and c:
            assert m[0, 0] == fill


def test_dimensions_are_floored_and_clamped():
    assert SlateMatrix(2.7, 3.2).shape == (2, 3)
    assert SlateMatrix(-3, 4).shape == (0, 4)
    assert SlateMatrix(2, -0.5).shape == (2, 0)
    assert SlateMatrix(float("nan"), "x").shape == (0, 0)


def test_source_is_padded_and_truncated():
    m = SlateMatrix(3, 3, [[1, 2, 3, 4], [5], None])
    assert m.to_list() == [[1.0, 2.0, 3.0], [5.0, 0.0, 0.0], [0.0, 0.0, 0.0]]

    short = SlateMatrix(2, 2, [[9.0, 8.0]])
    assert short.to_list() == [[9.0, 8.0], [0.0, 0.0]]


def test_malformed_cells_become_zero():
    m = SlateMatrix(1, 5, [[None, "a", float("nan"), float("inf"), 2]])
    assert m.to_list() == [[0.0, 0.0, 0.0, 0.0, 2.0]]

    arr = np.array([[1.0, np.nan], [np.inf, -2.0]])
    assert SlateMatrix(2, 2, arr).to_list() == [[1.0, 0.0], [0.0, -2.0]]


def test_source_is_deep_copied():
    src = [[1.0, 2.0], [3.0, 4.0]]
    m = SlateMatrix.from_rows(src)
    src[0][0] = 100.0
    assert m[0, 0] == 1.0

    arr = np.ones((2, 2))
    m2 = SlateMatrix.from_rows(arr)
    arr[1, 1] = 7.0
    assert m2[1, 1] == 1.0


def test_from_rows_infers_longest_row():
    m = SlateMatrix.from_rows([[1], [2, 3, 4], []])
    assert m.shape == (3, 3)
    assert m.to_list() == [[1.0, 0.0, 0.0], [2.0, 3.0, 4.0], [0.0, 0.0, 0.0]]
    assert SlateMatrix.from_rows(5).shape == (0, 0)


def test_element_access_is_bounds_checked():
    m = SlateMatrix(2, 3)
    m[1, 2] = 4.5
    assert m.get(1, 2) == 4.5
    m.set(0, 0, float("nan"))
    assert m[0, 0] == 0.0

    with pytest.raises(IndexError):
        m[2, 0]
    with pytest.raises(IndexError):
        m[-1, 0]
    with pytest.raises(IndexError):
        m[0, 3] = 1.0
    with pytest.raises(TypeError):
        m[0]


def test_clone_and_exports_are_independent():
    m = SlateMatrix.from_rows([[1, 2], [3, 4]])
    c = m.clone()
    c[0, 0] = -1.0
    assert m[0, 0] == 1.0

    n = m.to_numpy()
    n[0, 0] = -1.0
    assert m[0, 0] == 1.0

    assert m.to_array() == [1.0, 2.0, 3.0, 4.0]
    assert m.sum() == 10.0


def test_random_factories_are_seeded():
    a = SlateMatrix.random_normal(4, 3, mean=1.0, std=0.5, rng=SlateRandom(42))
    b = SlateMatrix.random_normal(4, 3, mean=1.0, std=0.5, rng=SlateRandom(42))
    assert a == b
    assert_shape_invariant(a, 4, 3)

    u = SlateMatrix.random(5, 5, scale=0.3, rng=SlateRandom(8))
    assert_shape_invariant(u, 5, 5)
    assert np.all(np.abs(u.data) <= 0.3)


def test_random_draws_are_row_major():
    rng = SlateRandom(77)
    m = SlateMatrix.random(2, 3, scale=1.0, rng=rng)
    ref = SlateRandom(77)
    expected = [(ref.next_uniform() * 2.0 - 1.0) for _ in range(6)]
    assert all(math.isclose(x, y) for x, y in zip(m.to_array(), expected))


def test_operands_are_never_mutated():
    a = SlateMatrix.from_rows([[1, -2], [3, 0]])
    b = SlateMatrix.from_rows([[2, 2], [0, 1]])
    before_a, before_b = a.to_list(), b.to_list()

    _ = a + b, a - b, a * b, a / b, a @ b, a.T, a.softmax(), a.sqrt(), a.square(), -a
    assert a.to_list() == before_a
    assert b.to_list() == before_b


if __name__ == "__main__":
    tests = [v for k, v in list(globals().items()) if k.startswith("test_")]
    for t in tests:
        t()
        print(f"  [OK] {t.__name__}")
    print(f"[matrix_construction_test] All {len(tests)} tests passed.")
