#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Strict exception system for the rational MeatAxe.

Nothing in the library catches these: an invariant violation aborts the
decomposition and reaches the caller unchanged.
"""

from __future__ import annotations


class MeatAxeError(Exception):
    """Base class of every error raised by the decomposition."""


class InvariantViolation(MeatAxeError):
    """An algebraic guarantee failed (Bezout gcd, zero block, multiplicity...)."""


class LinearAlgebraError(MeatAxeError, ValueError):
    """Exact linear algebra failed (singular matrix, shape mismatch)."""


class LatticeReductionError(MeatAxeError):
    """LLL/Gram-Schmidt failed (empty or dependent basis)."""


class SplitSearchExhausted(MeatAxeError):
    """The bounded split-element search ran out of attempts."""

    def __init__(self, attempts: int):
        super().__init__(f"no split element found after {attempts} random rounds")
        self.attempts = attempts
