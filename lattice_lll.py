#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exact lattice basis reduction for spans of rational matrices.

This file exists because both splitters probe a module with small elements
of an algebra: a basis of the center of an endomorphism ring, or of an order
inside it. Large coefficients make minimal polynomials expensive and splits
rare, so every such basis is first made integral, optionally saturated and
then LLL-reduced.

Red-lines respected:
  - Deterministic: no randomness in this layer.
  - Exact: Gram-Schmidt runs over Fraction, there is no floating point
    tolerance to tune.
  - Dependent or empty input to the LLL core is a hard failure.

Pipeline for a list of matrices:
  1) each matrix is scaled by its own denominator (numerator matrix)
  2) flattened row-major to one integer row vector
  3) either saturated (Z-basis of span_Q ∩ Z^n) or reduced to a Z-basis of
     the lattice it generates
  4) LLL-reduced and reshaped back to matrices.
"""

from __future__ import annotations

from fractions import Fraction
from typing import List, Sequence, Tuple

from algebra_backend import QQMatrix
from meataxe_config import StrictConstants
from meataxe_errors import LatticeReductionError


# =============================================================================
# 1) Integer echelon form with unimodular transform
# =============================================================================


def _egcd(a: int, b: int) -> Tuple[int, int, int]:
    """(g, u, v) with u*a + v*b = g = gcd(a, b) >= 0."""
    old_r, r = a, b
    old_s, s = 1, 0
    old_t, t = 0, 1
    while r:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
        old_t, t = t, old_t - q * t
    if old_r < 0:
        return -old_r, -old_s, -old_t
    return old_r, old_s, old_t


def _combine(rows: List[List[int]], p: int, i: int, u: int, v: int, x: int, y: int) -> None:
    # (row_p, row_i) <- (u*row_p + v*row_i, x*row_p + y*row_i)
    rp, ri = rows[p], rows[i]
    rows[p] = [u * a + v * b for a, b in zip(rp, ri)]
    rows[i] = [x * a + y * b for a, b in zip(rp, ri)]


def integer_echelon(rows: Sequence[Sequence[int]], ncols: int) -> Tuple[List[List[int]], List[List[int]], int]:
    """
    Row echelon form over Z.

    Returns (H, U, r): U is unimodular, U * rows = H, the first r rows of H
    are nonzero and the remaining rows are zero.
    """
    H = [[int(x) for x in row] for row in rows]
    m = len(H)
    U = [[1 if i == j else 0 for j in range(m)] for i in range(m)]
    p = 0
    for c in range(ncols):
        if p >= m:
            break
        for i in range(p + 1, m):
            b = H[i][c]
            if b == 0:
                continue
            a = H[p][c]
            g, u, v = _egcd(a, b)
            # det [[u, v], [-b/g, a/g]] = (u*a + v*b)/g = 1
            x, y = -b // g, a // g
            _combine(H, p, i, u, v, x, y)
            _combine(U, p, i, u, v, x, y)
        if H[p][c] != 0:
            if H[p][c] < 0:
                H[p] = [-e for e in H[p]]
                U[p] = [-e for e in U[p]]
            p += 1
    return H, U, p


def lattice_basis(rows: Sequence[Sequence[int]], ncols: int) -> List[List[int]]:
    """Z-basis of the lattice generated by possibly dependent integer rows."""
    H, _, r = integer_echelon(rows, ncols)
    return H[:r]


def integer_left_kernel(rows: Sequence[Sequence[int]], ncols: int) -> List[List[int]]:
    """Z-basis of {y in Z^m : y * rows = 0}."""
    _, U, r = integer_echelon(rows, ncols)
    return U[r:]


def _transpose(rows: Sequence[Sequence[int]], ncols: int) -> List[List[int]]:
    return [[row[j] for row in rows] for j in range(ncols)]


def saturate(rows: Sequence[Sequence[int]], ncols: int) -> List[List[int]]:
    """
    Z-basis of span_Q(rows) ∩ Z^ncols.

    The span is the annihilator of its rational kernel K, so the saturation
    is the integer kernel of K (kernel of the kernel).
    """
    if not rows:
        return []
    # K: integer vectors x with rows * x = 0
    kernel = integer_left_kernel(_transpose(rows, ncols), len(rows))
    if not kernel:
        return [[1 if i == j else 0 for j in range(ncols)] for i in range(ncols)]
    return integer_left_kernel(_transpose(kernel, ncols), len(kernel))


# =============================================================================
# 2) Exact LLL
# =============================================================================


def gram_schmidt(basis: List[List[int]]) -> Tuple[List[List[Fraction]], List[Fraction]]:
    """
    Gram-Schmidt on a row basis.
    Returns (mu, B) where:
      - mu[i][j] = <b_i, b*_j> / <b*_j, b*_j>
      - B[i] = ||b*_i||^2
    """
    if not basis:
        raise LatticeReductionError("Empty basis.")
    m = len(basis[0])
    if any(len(row) != m for row in basis):
        raise LatticeReductionError("Basis row dimension mismatch.")

    n = len(basis)
    mu: List[List[Fraction]] = [[Fraction(0)] * n for _ in range(n)]
    b_star: List[List[Fraction]] = []
    B: List[Fraction] = [Fraction(0)] * n
    for i in range(n):
        v = [Fraction(x) for x in basis[i]]
        for j in range(i):
            mu[i][j] = sum((Fraction(x) * y for x, y in zip(basis[i], b_star[j])), Fraction(0)) / B[j]
            v = [a - mu[i][j] * b for a, b in zip(v, b_star[j])]
        b_star.append(v)
        B[i] = sum((x * x for x in v), Fraction(0))
        if B[i] == 0:
            raise LatticeReductionError(f"GS produced zero vector b*_{i} (dependent basis).")
    return mu, B


def lll_reduce(matrix: Sequence[Sequence[int]], *, delta: Fraction = StrictConstants.LLL_DELTA_DEFAULT) -> List[List[int]]:
    """
    LLL reduction (row basis), exact arithmetic.

    δ ∈ (1/4, 1) is an algorithm parameter, not a heuristic threshold.
    """
    delta = Fraction(delta)
    if not (StrictConstants.LLL_DELTA_MIN < delta < StrictConstants.LLL_DELTA_MAX):
        raise ValueError(f"LLL delta must satisfy 1/4 < delta < 1, got {delta}")

    basis = [[int(x) for x in row] for row in matrix]
    n = len(basis)
    if n == 0:
        raise LatticeReductionError("Empty matrix.")

    mu, B = gram_schmidt(basis)
    half = Fraction(1, 2)
    k = 1
    while k < n:
        # size reduction
        for j in range(k - 1, -1, -1):
            if abs(mu[k][j]) > half:
                q = round(mu[k][j])
                basis[k] = [a - q * b for a, b in zip(basis[k], basis[j])]
                for i in range(j):
                    mu[k][i] -= q * mu[j][i]
                mu[k][j] -= q

        # Lovász condition
        if B[k] >= (delta - mu[k][k - 1] ** 2) * B[k - 1]:
            k += 1
        else:
            basis[k], basis[k - 1] = basis[k - 1], basis[k]
            mu, B = gram_schmidt(basis)
            k = max(k - 1, 1)

    return basis


# =============================================================================
# 3) Basis reduction of matrix lists
# =============================================================================


def reduce_basis(
    matrices: Sequence[QQMatrix],
    *,
    saturate_first: bool = True,
    delta: Fraction = StrictConstants.LLL_DELTA_DEFAULT,
) -> List[QQMatrix]:
    """
    Short integral basis of the lattice spanned by ``matrices``.

    With ``saturate_first`` the lattice is replaced by all integral points of
    the rational span; otherwise it is the Z-span of the numerator matrices.
    """
    if not matrices:
        return []
    r, c = matrices[0].shape
    rows = [[x for row in a.numerator() for x in row] for a in matrices]
    if saturate_first:
        rows = saturate(rows, r * c)
    else:
        rows = lattice_basis(rows, r * c)
    if not rows:
        return []
    return [QQMatrix.from_flat(row, r, c) for row in lll_reduce(rows, delta=delta)]


def lll_saturate(matrices: Sequence[QQMatrix], *, delta: Fraction = StrictConstants.LLL_DELTA_DEFAULT) -> List[QQMatrix]:
    return reduce_basis(matrices, saturate_first=True, delta=delta)
