"""Unit tests for exact basis reduction."""

from fractions import Fraction

import pytest
import sympy

from algebra_backend import QQMatrix
from lattice_lll import (
    _egcd,
    gram_schmidt,
    integer_echelon,
    integer_left_kernel,
    lattice_basis,
    lll_reduce,
    lll_saturate,
    reduce_basis,
    saturate,
)
from meataxe_errors import LatticeReductionError


def gram_determinant(rows) -> int:
    m = sympy.Matrix(rows)
    return int((m * m.T).det())


def same_lattice(a, b, ncols: int) -> bool:
    """Equal rank and every vector of each basis lies in the other's lattice."""
    if len(a) != len(b):
        return False
    joint = lattice_basis(list(a) + list(b), ncols)
    return len(joint) == len(a) and gram_determinant(joint) == gram_determinant(a) == gram_determinant(b)


class TestIntegerEchelon:
    """Test suite for unimodular echelon forms."""

    @pytest.mark.parametrize("a,b", [(12, 18), (0, 5), (-4, 6), (7, 0), (-3, -9)])
    def test_egcd(self, a: int, b: int) -> None:
        g, u, v = _egcd(a, b)
        assert g == sympy.igcd(a, b)
        assert u * a + v * b == g

    def test_transform_is_unimodular(self) -> None:
        rows = [[2, 4, 6], [3, 5, 7], [1, 1, 1]]
        h, u, r = integer_echelon(rows, 3)
        assert (sympy.Matrix(u) * sympy.Matrix(rows)).tolist() == h
        assert abs(sympy.Matrix(u).det()) == 1
        assert r == 2
        assert h[2] == [0, 0, 0]

    def test_left_kernel(self) -> None:
        rows = [[1, 2], [2, 4], [0, 1]]
        kernel = integer_left_kernel(rows, 2)
        assert len(kernel) == 1
        assert (sympy.Matrix(kernel) * sympy.Matrix(rows)).is_zero_matrix


class TestSaturation:
    """Test suite for lattice saturation."""

    def test_primitive_vector(self) -> None:
        sat = saturate([[2, 4]], 2)
        assert sat in ([[1, 2]], [[-1, -2]])

    def test_full_rank_saturates_to_unimodular(self) -> None:
        sat = saturate([[2, 0], [0, 2]], 2)
        assert abs(sympy.Matrix(sat).det()) == 1

    def test_keeps_rational_span(self) -> None:
        rows = [[2, 2, 0], [0, 3, 3]]
        sat = saturate(rows, 3)
        assert len(sat) == 2
        assert sympy.Matrix(rows + sat).rank() == 2

    def test_empty(self) -> None:
        assert saturate([], 4) == []


class TestLLL:
    """Test suite for the exact LLL reduction."""

    def test_reduced_basis_properties(self) -> None:
        basis = [[1, 1, 1], [-1, 0, 2], [3, 5, 6]]
        reduced = lll_reduce(basis)
        assert same_lattice(basis, reduced, 3)
        mu, B = gram_schmidt(reduced)
        for i in range(len(reduced)):
            for j in range(i):
                assert abs(mu[i][j]) <= Fraction(1, 2)
        for k in range(1, len(reduced)):
            assert B[k] >= (Fraction(3, 4) - mu[k][k - 1] ** 2) * B[k - 1]

    def test_short_vectors_found(self) -> None:
        reduced = lll_reduce([[1, 0], [1000, 1]])
        assert sorted(sum(x * x for x in row) for row in reduced) == [1, 1]

    def test_dependent_basis_raises(self) -> None:
        with pytest.raises(LatticeReductionError):
            lll_reduce([[1, 2], [2, 4]])

    def test_empty_basis_raises(self) -> None:
        with pytest.raises(LatticeReductionError):
            lll_reduce([])

    def test_invalid_delta(self) -> None:
        with pytest.raises(ValueError):
            lll_reduce([[1, 0]], delta=Fraction(1, 5))


class TestReduceBasis:
    """Test suite for reduction of matrix lists."""

    def test_empty_is_noop(self) -> None:
        assert reduce_basis([]) == []

    def test_rational_input_becomes_integral(self) -> None:
        mats = [QQMatrix([["1/2", 0], [0, "1/2"]]), QQMatrix([[0, "1/3"], [0, 0]])]
        reduced = lll_saturate(mats)
        assert len(reduced) == 2
        assert all(m.is_integral() for m in reduced)
        assert QQMatrix.identity(2) in reduced or -QQMatrix.identity(2) in reduced

    def test_reduction_is_stable(self) -> None:
        mats = [QQMatrix([[3, 1], [0, 3]]), QQMatrix([[5, 2], [1, 5]]), QQMatrix([[0, 0], [2, 0]])]
        once = lll_saturate(mats)
        twice = lll_saturate(once)
        assert same_lattice([m.numerator()[0] + m.numerator()[1] for m in once],
                            [m.numerator()[0] + m.numerator()[1] for m in twice], 4)

    def test_without_saturation_keeps_lattice(self) -> None:
        mats = [QQMatrix([[2, 0], [0, 2]]), QQMatrix([[4, 0], [0, 4]])]
        reduced = reduce_basis(mats, saturate_first=False)
        assert len(reduced) == 1
        assert reduced[0] in (QQMatrix([[2, 0], [0, 2]]), QQMatrix([[-2, 0], [0, -2]]))
