#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration of the rational MeatAxe.

Every knob has an explicit default here; nothing downstream invents its own
constants. Environment variables override the defaults through
``MeatAxeConfig.from_env`` and are validated strictly: an invalid value is a
deployment error and raises instead of silently falling back.
"""

from __future__ import annotations

import os
import random
from dataclasses import dataclass
from fractions import Fraction
from typing import Mapping, Optional


class StrictConstants:
    """
    Algorithm parameters with a documented source.
    """

    # LLL default delta = 3/4: Lenstra-Lenstra-Lovasz 1982, canonical parameter.
    LLL_DELTA_DEFAULT: Fraction = Fraction(3, 4)

    # delta must lie in the open interval (1/4, 1) for polynomial-time convergence.
    LLL_DELTA_MIN: Fraction = Fraction(1, 4)
    LLL_DELTA_MAX: Fraction = Fraction(1)


@dataclass(frozen=True)
class MeatAxeConfig:
    """
    Parameters of one decomposition run.

    - lll_delta: Lovasz parameter used by every basis reduction.
    - max_search_attempts: random rounds of the split-element search before
      giving up; ``None`` searches forever.
    - schur_search_attempts: random rounds spent per corner algebra while
      counting primitive idempotents for the Schur index.
    - coefficient_bound: random combinations draw coefficients from
      ``[-bound, bound]``.
    - seed: seed of the random source, ``None`` for a fresh one.
    """

    lll_delta: Fraction = StrictConstants.LLL_DELTA_DEFAULT
    max_search_attempts: Optional[int] = 1000
    schur_search_attempts: int = 32
    coefficient_bound: int = 2
    seed: Optional[int] = None

    def __post_init__(self):
        delta = Fraction(self.lll_delta)
        if not (StrictConstants.LLL_DELTA_MIN < delta < StrictConstants.LLL_DELTA_MAX):
            raise ValueError(f"lll_delta must satisfy 1/4 < delta < 1, got {self.lll_delta}")
        object.__setattr__(self, "lll_delta", delta)
        if self.max_search_attempts is not None and self.max_search_attempts < 0:
            raise ValueError(f"max_search_attempts must be non-negative, got {self.max_search_attempts}")
        if self.schur_search_attempts < 0:
            raise ValueError(f"schur_search_attempts must be non-negative, got {self.schur_search_attempts}")
        if self.coefficient_bound < 1:
            raise ValueError(f"coefficient_bound must be positive, got {self.coefficient_bound}")

    def make_rng(self) -> random.Random:
        return random.Random(self.seed)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MeatAxeConfig":
        """
        Build a config from ``MEATAXE_*`` environment variables.

        MEATAXE_MAX_SEARCH_ATTEMPTS accepts ``none`` for an unbounded search.
        """
        env = os.environ if environ is None else environ
        default = cls()

        raw_delta = _env_str(env, "MEATAXE_LLL_DELTA")
        if raw_delta is None:
            delta = default.lll_delta
        else:
            try:
                delta = Fraction(raw_delta)
            except (ValueError, ZeroDivisionError) as e:
                raise ValueError(f"MEATAXE_LLL_DELTA must be a rational number, got {raw_delta!r}") from e

        raw_attempts = _env_str(env, "MEATAXE_MAX_SEARCH_ATTEMPTS")
        if raw_attempts is not None and raw_attempts.lower() == "none":
            max_attempts: Optional[int] = None
        else:
            max_attempts = _env_int(env, "MEATAXE_MAX_SEARCH_ATTEMPTS", default=default.max_search_attempts)

        raw_seed = _env_str(env, "MEATAXE_SEED")
        return cls(
            lll_delta=delta,
            max_search_attempts=max_attempts,
            schur_search_attempts=_env_int(
                env, "MEATAXE_SCHUR_SEARCH_ATTEMPTS", default=default.schur_search_attempts
            ),
            coefficient_bound=_env_int(env, "MEATAXE_COEFFICIENT_BOUND", default=default.coefficient_bound),
            seed=None if raw_seed is None else _env_int(env, "MEATAXE_SEED", default=0),
        )


def _env_str(env: Mapping[str, str], name: str) -> Optional[str]:
    raw = env.get(name)
    if raw is None or not str(raw).strip():
        return None
    return str(raw).strip()


def _env_int(env: Mapping[str, str], name: str, *, default: Optional[int]) -> Optional[int]:
    """
    Read an env var as int (base-10), strict.
    """
    raw = _env_str(env, name)
    if raw is None:
        return default
    try:
        return int(raw, 10)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer (base-10), got {raw!r}") from e
