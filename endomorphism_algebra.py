#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Endomorphism algebras of rational modules and the structure the MeatAxe
reads off them.

Architecture:
┌────────────────────────────────────────────────────────────────────────┐
│ AlgebraToolkit (protocol)                                                │
│   endomorphism_algebra(M) -> MatrixAlgebra   End(M) as matrices on M     │
│   center(A)               -> MatrixAlgebra   Z(A)                        │
│   center_basis(M)         -> [QQMatrix]      reduced basis of Z(End(M))  │
│   algebra_over_center(A)  -> CentralAlgebra  dim over Z(A), Schur index  │
│   maximal_order(A)        -> Order           Z-basis of an order of A    │
├────────────────────────────────────────────────────────────────────────┤
│ RationalAlgebraToolkit (default)                                         │
│   - End(M), Z(A): exact null spaces of commutator equations              │
│   - Schur index: sqrt(dim_Z A) / #primitive idempotents, idempotents     │
│     found by splitting corner algebras eAe at split elements             │
│   - order: A ∩ M_N(Z), saturated and LLL-reduced                         │
└────────────────────────────────────────────────────────────────────────┘

Algebra elements are the matrices by which they act on the module, so the
map from an algebra to module endomorphisms is the identity.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

from algebra_backend import (
    QQMatrix,
    evaluate,
    factor,
    gcdex,
    minimal_polynomial,
    nullspace,
    row_space_basis,
)
from lattice_lll import lll_saturate
from meataxe_config import MeatAxeConfig
from meataxe_errors import InvariantViolation
from meataxe_trace import TraceContext
from module_hom import restrict
from rational_module import Module
from split_search import find_split_element


# =============================================================================
# 0) Value types
# =============================================================================


@dataclass(frozen=True)
class MatrixAlgebra:
    """Q-algebra with basis ``basis``, a subalgebra of M_degree(Q)."""

    basis: Tuple[QQMatrix, ...]
    degree: int

    @property
    def dimension(self) -> int:
        return len(self.basis)

    def element(self, coordinates: Sequence) -> QQMatrix:
        result = QQMatrix.zero(self.degree)
        for c, b in zip(coordinates, self.basis):
            if c:
                result = result + b * c
        return result

    def to_endomorphism(self, x: QQMatrix) -> QQMatrix:
        return x

    def is_commutative(self) -> bool:
        return all(a @ b == b @ a for i, a in enumerate(self.basis) for b in self.basis[i + 1:])


@dataclass(frozen=True)
class CentralAlgebra:
    """An algebra viewed over its center: dimension over the center and Schur index."""

    dimension: int
    schur_index: int
    center_dimension: int


@dataclass(frozen=True)
class Order:
    basis: Tuple[QQMatrix, ...]
    algebra: MatrixAlgebra


class AlgebraToolkit(Protocol):
    config: MeatAxeConfig
    rng: random.Random

    def endomorphism_algebra(self, module: Module) -> MatrixAlgebra: ...

    def center(self, algebra: MatrixAlgebra) -> MatrixAlgebra: ...

    def center_basis(self, module: Module) -> List[QQMatrix]: ...

    def algebra_over_center(
        self, algebra: MatrixAlgebra, trace: Optional[TraceContext] = None
    ) -> CentralAlgebra: ...

    def maximal_order(self, algebra: MatrixAlgebra) -> Order: ...


# =============================================================================
# 1) Commutator null spaces
# =============================================================================


def commutant(matrices: Sequence[QQMatrix], n: int) -> List[QQMatrix]:
    """Basis of {X ∈ M_n(Q) : Xg = gX for all g in ``matrices``}."""
    equations = []
    for g in matrices:
        rows = g.rows()
        for i in range(n):
            for j in range(n):
                # (Xg - gX)[i][j] in the unknowns X[p][q] -> column p*n + q
                eq = [0] * (n * n)
                for k in range(n):
                    eq[i * n + k] += rows[k][j]
                    eq[k * n + j] -= rows[i][k]
                equations.append(eq)
    if not equations:
        equations = [[0] * (n * n)]
    return [QQMatrix.from_flat(v, n, n) for v in nullspace(QQMatrix(equations, n * n))]


def endomorphism_algebra(module: Module) -> MatrixAlgebra:
    n = module.dimension
    return MatrixAlgebra(tuple(commutant(module.action, n)), n)


def center(algebra: MatrixAlgebra) -> MatrixAlgebra:
    """Z(A) in coordinates: c with [Σ c_i b_i, b_j] = 0 for every j."""
    k = algebra.dimension
    if k == 0:
        return MatrixAlgebra((), algebra.degree)
    commutators = [[a @ b - b @ a for a in algebra.basis] for b in algebra.basis]
    equations = []
    for row in commutators:
        flats = [c.flatten() for c in row]
        for idx in range(algebra.degree * algebra.degree):
            equations.append([f[idx] for f in flats])
    if not equations:
        equations = [[0] * k]
    coords = nullspace(QQMatrix(equations, k))
    return MatrixAlgebra(tuple(algebra.element(c) for c in coords), algebra.degree)


def subalgebra_from_span(matrices: Sequence[QQMatrix], degree: int) -> MatrixAlgebra:
    """Row-reduce a spanning set of matrices into a basis."""
    rows = row_space_basis([m.flatten() for m in matrices], degree * degree)
    return MatrixAlgebra(tuple(QQMatrix.from_flat(r, degree, degree) for r in rows), degree)


# =============================================================================
# 2) Default toolkit
# =============================================================================


class RationalAlgebraToolkit:
    """
    Exact implementation of the collaborator contract.

    The Schur index is counted, not derived from local invariants: a corner
    algebra without a split element after ``schur_search_attempts`` random
    rounds is taken to be a division algebra.
    """

    def __init__(self, config: Optional[MeatAxeConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or MeatAxeConfig()
        self.rng = rng or self.config.make_rng()

    def endomorphism_algebra(self, module: Module) -> MatrixAlgebra:
        return endomorphism_algebra(module)

    def center(self, algebra: MatrixAlgebra) -> MatrixAlgebra:
        return center(algebra)

    def center_basis(self, module: Module) -> List[QQMatrix]:
        z = self.center(self.endomorphism_algebra(module))
        return lll_saturate(z.basis, delta=self.config.lll_delta)

    def maximal_order(self, algebra: MatrixAlgebra) -> Order:
        return Order(tuple(lll_saturate(algebra.basis, delta=self.config.lll_delta)), algebra)

    def algebra_over_center(self, algebra: MatrixAlgebra, trace: Optional[TraceContext] = None) -> CentralAlgebra:
        trace = trace or TraceContext()
        z = self.center(algebra)
        if z.dimension == 0:
            raise InvariantViolation("the zero algebra has no center to work over")
        d, r = divmod(algebra.dimension, z.dimension)
        if r:
            raise InvariantViolation(
                f"algebra of dimension {algebra.dimension} is not free over its center of dimension {z.dimension}"
            )
        n = math.isqrt(d)
        if n * n != d:
            raise InvariantViolation(f"dimension {d} over the center is not a square: algebra is not simple")
        if n == 1:
            return CentralAlgebra(d, 1, z.dimension)
        capacity = self.capacity(algebra, trace=trace)
        si, r = divmod(n, capacity)
        if r:
            raise InvariantViolation(f"{capacity} primitive idempotents do not divide the degree {n}")
        trace.log("dimension over center %d, capacity %d, Schur index %d", d, capacity, si)
        return CentralAlgebra(d, si, z.dimension)

    def capacity(self, algebra: MatrixAlgebra, trace: Optional[TraceContext] = None) -> int:
        """Number of primitive orthogonal idempotents summing to 1 (the m in M_m(D))."""
        trace = trace or TraceContext()
        if algebra.dimension <= 1 or algebra.is_commutative():
            return 1
        order = lll_saturate(algebra.basis, delta=self.config.lll_delta)
        result = find_split_element(
            order,
            rng=self.rng,
            max_attempts=self.config.schur_search_attempts,
            coefficient_bound=self.config.coefficient_bound,
            delta=self.config.lll_delta,
            trace=trace,
        )
        if not result.found:
            trace.log(
                "no split element in a corner of dimension %d after %d rounds, counted as a division algebra",
                algebra.dimension,
                result.attempts,
            )
            return 1
        total = 0
        for e in _complementary_idempotents(result.element):
            corner = restrict(e, [e @ b @ e for b in algebra.basis])
            total += self.capacity(subalgebra_from_span(corner, corner[0].nrows()), trace=trace.nested())
        return total


def _complementary_idempotents(s: QQMatrix) -> Tuple[QQMatrix, QQMatrix]:
    """e, 1 - e from the first factor group p^e of the minimal polynomial f of s."""
    f = minimal_polynomial(s)
    p, k = factor(f)[0]
    f1 = p ** k
    f2 = f.exquo(f1)
    g, u, v = gcdex(f1, f2)
    if not g.is_one:
        raise InvariantViolation(f"factors {f1} and {f2} are not coprime")
    e = evaluate(v * f2, s)
    return e, QQMatrix.identity(s.nrows()) - e
