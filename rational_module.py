#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Finite-dimensional modules over Q given by the right action of generators.

A vector is a row; generator g sends v to v*g. Modules are values: every
operation derives a new one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from algebra_backend import QQMatrix, as_qq_matrix, block_diagonal
from meataxe_errors import LinearAlgebraError


@dataclass(frozen=True)
class Module:
    action: Tuple[QQMatrix, ...]
    dimension: int

    def __post_init__(self):
        action = tuple(as_qq_matrix(g) for g in self.action)
        for i, g in enumerate(action):
            if g.shape != (self.dimension, self.dimension):
                raise LinearAlgebraError(
                    f"generator {i} has shape {g.shape}, expected {self.dimension}x{self.dimension}"
                )
        object.__setattr__(self, "action", action)

    @classmethod
    def from_matrices(cls, matrices: Iterable, dimension: Optional[int] = None) -> "Module":
        """Module from nested lists (or QQMatrix) of generators; ``dimension`` is needed without generators."""
        action = tuple(as_qq_matrix(g) for g in matrices)
        if dimension is None:
            if not action:
                raise LinearAlgebraError("dimension is required for a module without generators")
            dimension = action[0].nrows()
        return cls(action, dimension)

    @property
    def ngens(self) -> int:
        return len(self.action)

    def direct_sum(self, other: "Module") -> "Module":
        if self.ngens != other.ngens:
            raise LinearAlgebraError(f"cannot add modules with {self.ngens} and {other.ngens} generators")
        return Module(
            tuple(block_diagonal(a, b) for a, b in zip(self.action, other.action)),
            self.dimension + other.dimension,
        )

    def conjugate(self, t: QQMatrix) -> "Module":
        """The isomorphic module in the basis given by the rows of ``t^-1``: g -> t^-1 g t."""
        t = as_qq_matrix(t)
        t_inv = t.inverse()
        return Module(tuple(t_inv @ g @ t for g in self.action), self.dimension)

    def __repr__(self):
        return f"<Module of dimension {self.dimension} with {self.ngens} generators>"
