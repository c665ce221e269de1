"""Exact rational algebra backend.

The goal of this module is to expose a minimal, deterministic API for the
linear algebra and polynomial arithmetic over the rationals that the MeatAxe
needs.  Matrices are numpy object arrays of ``Fraction`` so every operation is
exact; polynomials are SymPy ``Poly`` objects over ``QQ`` so factorisation and
extended gcds come from a real computer algebra system.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as _np
import sympy
from sympy import QQ, Poly

from meataxe_errors import LinearAlgebraError

_X = sympy.Symbol("x")


# ---------------------------------------------------------------------------
# Rational matrices
# ---------------------------------------------------------------------------


class QQMatrix:
    """Immutable dense matrix over Q."""

    __slots__ = ("data",)

    def __init__(self, rows: Iterable[Iterable], ncols: Optional[int] = None):
        rows = [list(r) for r in rows]
        if ncols is None:
            ncols = len(rows[0]) if rows else 0
        data = _np.empty((len(rows), ncols), dtype=object)
        for i, row in enumerate(rows):
            if len(row) != ncols:
                raise LinearAlgebraError(f"row {i} has length {len(row)}, expected {ncols}")
            for j, x in enumerate(row):
                data[i, j] = Fraction(x)
        data.setflags(write=False)
        self.data = data

    @classmethod
    def _wrap(cls, array) -> "QQMatrix":
        out = cls.__new__(cls)
        array = _np.array(array, dtype=object)
        array.setflags(write=False)
        out.data = array
        return out

    @classmethod
    def zero(cls, nrows: int, ncols: Optional[int] = None) -> "QQMatrix":
        ncols = nrows if ncols is None else ncols
        return cls([[0] * ncols for _ in range(nrows)], ncols)

    @classmethod
    def identity(cls, n: int) -> "QQMatrix":
        return cls([[1 if i == j else 0 for j in range(n)] for i in range(n)], n)

    @classmethod
    def from_flat(cls, entries: Sequence, nrows: int, ncols: int) -> "QQMatrix":
        """Inverse of ``flatten``: rows are read off consecutively."""
        if len(entries) != nrows * ncols:
            raise LinearAlgebraError(f"cannot reshape {len(entries)} entries to {nrows}x{ncols}")
        return cls([entries[i * ncols:(i + 1) * ncols] for i in range(nrows)], ncols)

    def nrows(self) -> int:
        return self.data.shape[0]

    def ncols(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    def is_square(self) -> bool:
        return self.nrows() == self.ncols()

    def rows(self) -> List[List[Fraction]]:
        return [[Fraction(x) for x in row] for row in self.data]

    def flatten(self) -> List[Fraction]:
        return [Fraction(x) for x in self.data.flat]

    def transpose(self) -> "QQMatrix":
        return QQMatrix._wrap(self.data.T)

    def block(self, r0: int, r1: int, c0: int, c1: int) -> "QQMatrix":
        return QQMatrix._wrap(self.data[r0:r1, c0:c1])

    def is_zero(self) -> bool:
        return all(x == 0 for x in self.data.flat)

    def denominator(self) -> int:
        """Least common multiple of the entry denominators."""
        return math.lcm(1, *(Fraction(x).denominator for x in self.data.flat))

    def numerator(self) -> List[List[int]]:
        """Integer matrix ``denominator() * self``."""
        d = self.denominator()
        return [[int(Fraction(x) * d) for x in row] for row in self.data]

    def is_integral(self) -> bool:
        return self.denominator() == 1

    def rank(self) -> int:
        return len(_gauss_jordan(self.rows(), self.ncols())[1])

    def inverse(self) -> "QQMatrix":
        if not self.is_square():
            raise LinearAlgebraError(f"cannot invert a {self.shape} matrix")
        n = self.nrows()
        reduced, pivots, inv = _gauss_jordan(self.rows(), n, companion=QQMatrix.identity(n).rows())
        if len(pivots) != n:
            raise LinearAlgebraError("matrix is singular")
        return QQMatrix(inv, n)

    def _check_same_shape(self, other: "QQMatrix") -> None:
        if self.shape != other.shape:
            raise LinearAlgebraError(f"shape mismatch {self.shape} vs {other.shape}")

    def __matmul__(self, other: "QQMatrix") -> "QQMatrix":
        if not isinstance(other, QQMatrix):
            return NotImplemented
        if self.ncols() != other.nrows():
            raise LinearAlgebraError(f"cannot multiply {self.shape} by {other.shape}")
        if self.ncols() == 0:
            return QQMatrix.zero(self.nrows(), other.ncols())
        return QQMatrix._wrap(self.data.dot(other.data))

    def __mul__(self, scalar) -> "QQMatrix":
        if isinstance(scalar, QQMatrix):
            return self @ scalar
        return QQMatrix._wrap(self.data * Fraction(scalar))

    __rmul__ = __mul__

    def __add__(self, other: "QQMatrix") -> "QQMatrix":
        self._check_same_shape(other)
        return QQMatrix._wrap(self.data + other.data)

    def __sub__(self, other: "QQMatrix") -> "QQMatrix":
        self._check_same_shape(other)
        return QQMatrix._wrap(self.data - other.data)

    def __neg__(self) -> "QQMatrix":
        return QQMatrix._wrap(-self.data)

    def __getitem__(self, key):
        return self.data[key]

    def __eq__(self, other) -> bool:
        if not isinstance(other, QQMatrix):
            return NotImplemented
        return self.shape == other.shape and bool(_np.all(self.data == other.data))

    def __hash__(self) -> int:
        return hash((self.shape, tuple(self.data.flat)))

    def __repr__(self):  # pragma: no cover - debug
        body = "; ".join(" ".join(str(x) for x in row) for row in self.data)
        return f"QQMatrix([{body}])"


def as_qq_matrix(x) -> QQMatrix:
    return x if isinstance(x, QQMatrix) else QQMatrix(x)


def block_diagonal(*blocks: QQMatrix) -> QQMatrix:
    n = sum(b.nrows() for b in blocks)
    m = sum(b.ncols() for b in blocks)
    rows = [[Fraction(0)] * m for _ in range(n)]
    r = c = 0
    for b in blocks:
        for i, row in enumerate(b.rows()):
            rows[r + i][c:c + b.ncols()] = row
        r += b.nrows()
        c += b.ncols()
    return QQMatrix(rows, m)


def embed_matrix(a: QQMatrix, m: int) -> QQMatrix:
    """Place the square matrix ``a`` in the top-left corner of an m x m zero matrix."""
    n = a.nrows()
    if n > m:
        raise LinearAlgebraError(f"cannot embed a {n}x{n} block into {m}x{m}")
    return block_diagonal(a, QQMatrix.zero(m - n))


# ---------------------------------------------------------------------------
# Exact elimination
# ---------------------------------------------------------------------------


def _gauss_jordan(
    rows: List[List[Fraction]],
    ncols: int,
    companion: Optional[List[List[Fraction]]] = None,
) -> Tuple[List[List[Fraction]], List[int], Optional[List[List[Fraction]]]]:
    """
    Reduced row echelon form by Gauss-Jordan elimination.

    Every row operation is mirrored on ``companion`` (when given), so passing
    the identity returns the invertible transform U with ``U * rows = rref``.
    Returns (rref rows, pivot columns, transformed companion).
    """
    A = [list(r) for r in rows]
    C = None if companion is None else [list(r) for r in companion]
    n_rows = len(A)
    pivots: List[int] = []
    row = 0
    col = 0
    while row < n_rows and col < ncols:
        pivot = None
        for r in range(row, n_rows):
            if A[r][col] != 0:
                pivot = r
                break
        if pivot is None:
            col += 1
            continue
        if pivot != row:
            A[row], A[pivot] = A[pivot], A[row]
            if C is not None:
                C[row], C[pivot] = C[pivot], C[row]
        inv = 1 / A[row][col]
        A[row] = [inv * v for v in A[row]]
        if C is not None:
            C[row] = [inv * v for v in C[row]]
        for r in range(n_rows):
            if r == row:
                continue
            factor = A[r][col]
            if factor == 0:
                continue
            A[r] = [a - factor * b for a, b in zip(A[r], A[row])]
            if C is not None:
                C[r] = [a - factor * b for a, b in zip(C[r], C[row])]
        pivots.append(col)
        row += 1
        col += 1
    return A, pivots, C


def row_space_basis(rows: Sequence[Sequence], ncols: int) -> List[List[Fraction]]:
    """Nonzero rows of the reduced echelon form of ``rows``."""
    reduced, pivots, _ = _gauss_jordan([[Fraction(x) for x in r] for r in rows], ncols)
    return reduced[:len(pivots)]


def nullspace(a: QQMatrix) -> List[List[Fraction]]:
    """Basis of the right kernel {x : a x = 0}, one vector per free column."""
    n = a.ncols()
    reduced, pivots, _ = _gauss_jordan(a.rows(), n)
    free = [j for j in range(n) if j not in pivots]
    basis = []
    for f in free:
        v = [Fraction(0)] * n
        v[f] = Fraction(1)
        for r, p in enumerate(pivots):
            v[p] = -reduced[r][f]
        basis.append(v)
    return basis


def left_kernel(a: QQMatrix) -> QQMatrix:
    """Matrix whose rows form a basis of {v : v a = 0}."""
    return QQMatrix(nullspace(a.transpose()), a.nrows())


def column_hnf_with_transform(a: QQMatrix) -> Tuple[QQMatrix, QQMatrix]:
    """
    Column Hermite form over Q: returns (H, T) with T invertible and H = a T.

    The echelon form is computed on the transpose (U a^T = H^T) and
    transposed back, so the nonzero columns of H come first.
    """
    n = a.ncols()
    reduced, _, u = _gauss_jordan(a.transpose().rows(), a.nrows(), companion=QQMatrix.identity(n).rows())
    return QQMatrix(reduced, a.nrows()).transpose(), QQMatrix(u, n).transpose()


def nonzero_column_count(h: QQMatrix) -> int:
    return sum(1 for j in range(h.ncols()) if any(x != 0 for x in h.data[:, j]))


# ---------------------------------------------------------------------------
# Polynomials over Q
# ---------------------------------------------------------------------------


def _to_fraction(c) -> Fraction:
    c = sympy.Rational(c)
    return Fraction(int(c.p), int(c.q))


def polynomial(coefficients: Sequence, *, ascending: bool = True) -> Poly:
    """Univariate polynomial over QQ from rational coefficients."""
    coeffs = [Fraction(c) for c in coefficients]
    if ascending:
        coeffs = coeffs[::-1]
    return Poly([sympy.Rational(c.numerator, c.denominator) for c in coeffs], _X, domain=QQ)


def as_qq_poly(f) -> Poly:
    return Poly(f.as_expr() if isinstance(f, Poly) else f, _X, domain=QQ)


def degree(f: Poly) -> int:
    return int(f.degree())


def is_irreducible(f: Poly) -> bool:
    return bool(f.is_irreducible)


def factor(f: Poly) -> List[Tuple[Poly, int]]:
    """Irreducible factor groups (p, e) of f, in SymPy's order; the unit is dropped."""
    _, groups = f.factor_list()
    return [(as_qq_poly(p), int(e)) for p, e in groups]


def gcdex(f1: Poly, f2: Poly) -> Tuple[Poly, Poly, Poly]:
    """(g, s, t) with s*f1 + t*f2 = g = gcd(f1, f2)."""
    s, t, g = f1.gcdex(f2)
    return g, s, t


def evaluate(f: Poly, x: QQMatrix) -> QQMatrix:
    """f(x) by Horner's scheme."""
    n = x.nrows()
    one = QQMatrix.identity(n)
    result = QQMatrix.zero(n)
    for c in f.all_coeffs():
        result = result @ x + one * _to_fraction(c)
    return result


def minimal_polynomial(x: QQMatrix) -> Poly:
    """
    Monic minimal polynomial of a square matrix.

    Powers x^0, x^1, ... are flattened until the first linear dependency;
    the dependency coefficients are the polynomial.
    """
    if not x.is_square():
        raise LinearAlgebraError(f"minimal polynomial of a non-square {x.shape} matrix")
    powers = [QQMatrix.identity(x.nrows()).flatten()]
    current = QQMatrix.identity(x.nrows())
    while True:
        # columns are the flattened powers; a kernel vector is a dependency
        system = QQMatrix(list(zip(*powers)), len(powers)) if powers[0] else QQMatrix.zero(0, len(powers))
        kernel = nullspace(system)
        if kernel:
            coeffs = kernel[0]
            lead = coeffs[-1]
            return polynomial([c / lead for c in coeffs])
        current = current @ x
        powers.append(current.flatten())
