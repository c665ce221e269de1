#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Randomised search for a split element of an order.

A split element is an algebra element whose minimal polynomial has more than
one irreducible factor; it witnesses a zero divisor. The search tries, in
order: the basis itself, products and sums of ordered basis pairs, then
rounds of products x*r with a fresh random integer combination r, each round
LLL-reduced to keep coefficients small.

The random phase is Monte-Carlo. With ``max_attempts=None`` it loops until a
split element appears, which never happens inside a division algebra.
"""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass
from fractions import Fraction
from typing import Iterable, Iterator, List, Optional, Sequence

from algebra_backend import QQMatrix, factor, minimal_polynomial
from lattice_lll import reduce_basis
from meataxe_config import StrictConstants
from meataxe_trace import TraceContext


@dataclass(frozen=True)
class SearchResult:
    element: Optional[QQMatrix]
    attempts: int

    @property
    def found(self) -> bool:
        return self.element is not None


def is_split(x: QQMatrix) -> bool:
    return len(factor(minimal_polynomial(x))) > 1


def _find(candidates: Iterable[QQMatrix]) -> Optional[QQMatrix]:
    return next((x for x in candidates if is_split(x)), None)


def _pair_candidates(basis: Sequence[QQMatrix]) -> Iterator[QQMatrix]:
    for b1, b2 in itertools.product(basis, repeat=2):
        yield b1 @ b2
        yield b1 + b2


def random_element(basis: Sequence[QQMatrix], rng: random.Random, bound: int) -> QQMatrix:
    """Random nonzero integer combination with coefficients in [-bound, bound]."""
    while True:
        coeffs = [rng.randint(-bound, bound) for _ in basis]
        if any(coeffs):
            break
    result = QQMatrix.zero(*basis[0].shape)
    for c, b in zip(coeffs, basis):
        if c:
            result = result + b * c
    return result


def find_split_element(
    basis: Sequence[QQMatrix],
    *,
    rng: Optional[random.Random] = None,
    max_attempts: Optional[int] = None,
    coefficient_bound: int = 2,
    delta: Fraction = StrictConstants.LLL_DELTA_DEFAULT,
    trace: Optional[TraceContext] = None,
) -> SearchResult:
    """
    Search the Z-span of ``basis`` for a split element.

    ``attempts`` in the result counts random rounds; the deterministic phases
    are free.
    """
    trace = trace or TraceContext()
    rng = rng or random.Random()
    basis = list(basis)
    if not basis:
        return SearchResult(None, 0)

    a = _find(basis)
    if a is None:
        a = _find(_pair_candidates(basis))
    if a is not None:
        trace.log("split element found among basis elements and pairs")
        return SearchResult(a, 0)

    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        r = random_element(basis, rng, coefficient_bound)
        candidates: List[QQMatrix] = reduce_basis([x @ r for x in basis], saturate_first=False, delta=delta)
        a = _find(candidates)
        if a is not None:
            trace.log("split element found after %d random rounds", attempts)
            return SearchResult(a, attempts)
    trace.log("no split element after %d random rounds", attempts)
    return SearchResult(None, attempts)
