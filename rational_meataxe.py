#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Rational MeatAxe: decompose a semisimple module over Q into simple modules.

Implements the algorithm of Allan Steel in two stages:

  Stage 1  homogeneous_components(M)
           probe M with a reduced basis of the center of End(M); a central
           element whose minimal polynomial f has two coprime factor groups
           f1, f2 splits M along s*f1 + t*f2 = 1.
  Stage 2  split_homogeneous(M)
           for M ≅ S^m with End(M) ≅ M_m(D), m = sqrt(dim_Z End(M)) / index(D);
           for m > 1 a split element of an order of End(M) cuts M into its
           primary components.

Every submodule is realised through ``module_hom.sub``. The input must be
semisimple; on other input the result is unspecified.
"""

from __future__ import annotations

import math
from typing import List, Optional

from algebra_backend import (
    QQMatrix,
    degree,
    evaluate,
    factor,
    gcdex,
    is_irreducible,
    minimal_polynomial,
)
from endomorphism_algebra import AlgebraToolkit, RationalAlgebraToolkit
from meataxe_errors import InvariantViolation, SplitSearchExhausted
from meataxe_trace import TraceContext
from module_hom import sub
from rational_module import Module
from split_search import find_split_element

__all__ = [
    "meataxe",
    "homogeneous_components",
    "split_homogeneous",
    "sub",
    "Module",
]


def _defaults(toolkit: Optional[AlgebraToolkit], trace: Optional[TraceContext]):
    return toolkit or RationalAlgebraToolkit(), trace or TraceContext()


def meataxe(
    module: Module,
    *,
    toolkit: Optional[AlgebraToolkit] = None,
    trace: Optional[TraceContext] = None,
) -> List[Module]:
    """
    Given a semisimple module return simple submodules which add up to it.
    """
    toolkit, trace = _defaults(toolkit, trace)
    result: List[Module] = []
    for component in homogeneous_components(module, toolkit=toolkit, trace=trace):
        result.extend(split_homogeneous(component, toolkit=toolkit, trace=trace))
    return result


# =============================================================================
# Stage 1: homogeneous components
# =============================================================================


def homogeneous_components(
    module: Module,
    *,
    toolkit: Optional[AlgebraToolkit] = None,
    trace: Optional[TraceContext] = None,
) -> List[Module]:
    """
    Return homogeneous S_i with M = ⊕ S_i.

    Homogeneous means isomorphic to a direct sum of copies of one simple
    module. The first central probe b whose minimal polynomial is irreducible
    of degree dim Z(End(M)) proves M homogeneous on its own.
    """
    toolkit, trace = _defaults(toolkit, trace)
    trace.log("# Homogeneous components of %r", module)
    basis = toolkit.center_basis(module)
    if not basis:
        return [module]
    dim_of_center = len(basis)
    trace.log("## Iterating through a basis of the center of dimension %d", dim_of_center)
    for b in basis:
        trace.matrix("Current basis element is", b)
        f = minimal_polynomial(b)
        if is_irreducible(f) and degree(f) == dim_of_center:
            return [module]
        fs = factor(f)
        if len(fs) == 1:
            continue
        p, e = fs[0]
        f1 = p ** e
        f2 = f.exquo(f1)
        trace.log("Minimal polynomial is %s with coprime factors %s and %s", f.as_expr(), f1.as_expr(), f2.as_expr())
        one, s, t = gcdex(f1, f2)
        if not one.is_one:
            raise InvariantViolation(f"Bezout combination of {f1.as_expr()} and {f2.as_expr()} is {one.as_expr()}, not 1")
        g1, g2 = s * f1, t * f2
        trace.log("Using multiples %s and %s summing up to 1", g1.as_expr(), g2.as_expr())
        ss1 = _components_at(module, evaluate(g1, b), toolkit, trace)
        ss2 = _components_at(module, evaluate(g2, b), toolkit, trace)
        return ss1 + ss2
    return [module]


def _components_at(module: Module, a: QQMatrix, toolkit: AlgebraToolkit, trace: TraceContext) -> List[Module]:
    trace.matrix("### Splitting at", a)
    return homogeneous_components(sub(module, a), toolkit=toolkit, trace=trace.nested())


# =============================================================================
# Stage 2: splitting a homogeneous module
# =============================================================================


def split_homogeneous(
    module: Module,
    *,
    toolkit: Optional[AlgebraToolkit] = None,
    trace: Optional[TraceContext] = None,
) -> List[Module]:
    """
    Return pairwise isomorphic simple S_i with M = ⊕ S_i.

    The input needs to be homogeneous, i.e. allow such a decomposition.
    The zero module has no simple summands and gives ``[]``.

    Pieces follow the factor groups p^e of the split element's minimal
    polynomial f in SymPy's factor order. Each piece is the image of the
    cofactor (f / p^e)(s), i.e. the kernel of p^e(s), in the basis its column
    HNF picks; neither the order nor the basis matches a split taken at the
    images of p^e(s).
    """
    toolkit, trace = _defaults(toolkit, trace)
    trace.log("# Splitting homogeneous %r", module)
    if module.dimension == 0:
        return []
    end_m = toolkit.endomorphism_algebra(module)
    central = toolkit.algebra_over_center(end_m, trace=trace)
    m = _multiplicity(central.dimension, central.schur_index)
    trace.log("dimension over center %d, Schur index %d, multiplicity %d", central.dimension, central.schur_index, m)
    if m == 1:
        return [module]

    order = toolkit.maximal_order(end_m)
    config = toolkit.config
    result = find_split_element(
        order.basis,
        rng=toolkit.rng,
        max_attempts=config.max_search_attempts,
        coefficient_bound=config.coefficient_bound,
        delta=config.lll_delta,
        trace=trace,
    )
    if not result.found:
        raise SplitSearchExhausted(result.attempts)
    s = result.element
    f = minimal_polynomial(s)
    fs = factor(f)
    if len(fs) < 2:
        raise InvariantViolation(f"split element has irreducible-power minimal polynomial {f.as_expr()}")
    trace.log("Split element with minimal polynomial %s", f.as_expr())

    pieces: List[Module] = []
    for p, e in fs:
        # image of the cofactor = kernel of p^e(s), the p-primary part
        singular = end_m.to_endomorphism(evaluate(f.exquo(p ** e), s))
        pieces.extend(split_homogeneous(sub(module, singular), toolkit=toolkit, trace=trace.nested()))
    return pieces


def _multiplicity(dimension: int, schur_index: int) -> int:
    n = math.isqrt(dimension)
    if n * n != dimension:
        raise InvariantViolation(f"dimension {dimension} over the center is not a square")
    m, r = divmod(n, schur_index)
    if r:
        raise InvariantViolation(f"Schur index {schur_index} does not divide the degree {n}")
    return m
