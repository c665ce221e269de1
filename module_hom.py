#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Submodules as coordinate subspaces.

Let 𝓐 ⊆ Q^{m×m} act on M = Q^m from the right and let A be a matrix whose
row space M·A is invariant under 𝓐 (e.g. A ∈ End(M), so AX = XA). With
H = AT the column Hermite form of A, H has n nonzero columns. Through the
isomorphism M·A → M·H, m ↦ mT, X acts on M·H as mT⁻¹XT. Invariance
gives AX = CA for some C, so HT⁻¹XT = AXT = CH has only n nonzero columns
as well, and T⁻¹XT has the block shape

    ( B  0 )
    ( *  * )

and B (n×n) is the action on the submodule.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

from algebra_backend import (
    QQMatrix,
    as_qq_matrix,
    column_hnf_with_transform,
    left_kernel,
    nonzero_column_count,
)
from meataxe_errors import InvariantViolation, LinearAlgebraError
from rational_module import Module


def _coordinates(a: QQMatrix) -> Tuple[int, QQMatrix, QQMatrix]:
    h, t = column_hnf_with_transform(a)
    return nonzero_column_count(h), t, t.inverse()


def submatrix(a: QQMatrix, n: int) -> QQMatrix:
    """Top-left n×n block; the block to its right must vanish."""
    if not a.block(0, n, n, a.ncols()).is_zero():
        raise InvariantViolation(
            "conjugated matrix does not preserve the subspace: the probe does not commute with the action"
        )
    return a.block(0, n, 0, n)


class ModHom:
    """
    Module isomorphism from the submodule M·A of ``domain`` onto Q^rank,
    where AT = H is the column HNF of A.
    """

    __slots__ = ("rank", "T", "inv_T", "domain")

    def __init__(self, domain: Module, a):
        a = as_qq_matrix(a)
        if a.ncols() != domain.dimension:
            raise LinearAlgebraError(f"spanning matrix has {a.ncols()} columns, module dimension is {domain.dimension}")
        self.rank, self.T, self.inv_T = _coordinates(a)
        self.domain = domain

    @property
    def matrix(self) -> QQMatrix:
        return self.T

    @property
    def codomain(self) -> Module:
        return self.image(self.domain)

    def image(self, x: Union[QQMatrix, Module]):
        if isinstance(x, Module):
            return Module(tuple(self.image(g) for g in x.action), self.rank)
        return submatrix(self.inv_T @ as_qq_matrix(x) @ self.T, self.rank)

    def __repr__(self):
        return f"<ModHom of rank {self.rank} on {self.domain!r}>"


@dataclass(frozen=True)
class SubMod:
    module: Module
    hom: ModHom

    @classmethod
    def from_hom(cls, hom: ModHom) -> "SubMod":
        return cls(hom.codomain, hom)


def submodule(module: Module, a) -> SubMod:
    return SubMod.from_hom(ModHom(module, a))


def sub(module: Module, a) -> Module:
    """The submodule spanned by the rows of ``a``, in reduced coordinates."""
    return ModHom(module, a).codomain


def kernel(module: Module, x) -> Module:
    """The submodule {v : v·x = 0} of an endomorphism x of ``module``."""
    return sub(module, left_kernel(as_qq_matrix(x)))


def restrict(a: QQMatrix, matrices: Sequence[QQMatrix]) -> List[QQMatrix]:
    """Action of ``matrices`` on the row space of ``a`` in reduced coordinates."""
    rank, t, t_inv = _coordinates(a)
    return [submatrix(t_inv @ x @ t, rank) for x in matrices]
