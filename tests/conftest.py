"""Pytest configuration and shared module fixtures."""

import pytest

from algebra_backend import QQMatrix
from meataxe_config import MeatAxeConfig
from endomorphism_algebra import RationalAlgebraToolkit
from rational_module import Module


# Standard representation of S3 (rotation r, reflection s) with a central
# generator z acting as +1 or -1; both are absolutely irreducible and they
# are distinguished by z.
R3 = [[0, -1], [1, -1]]
S3_REFLECTION = [[0, 1], [1, 0]]


def s3_standard(z_sign: int) -> Module:
    return Module.from_matrices([R3, S3_REFLECTION, [[z_sign, 0], [0, z_sign]]])


def trivial() -> Module:
    return Module.from_matrices([[[1]], [[1]], [[1]]])


def diag_ones() -> Module:
    """3-dimensional simple module: diag(1, 2, 3) and the all-ones matrix."""
    return Module.from_matrices([
        [[1, 0, 0], [0, 2, 0], [0, 0, 3]],
        [[1, 1, 1], [1, 1, 1], [1, 1, 1]],
    ])


def quaternion() -> Module:
    """Hamilton quaternions with basis 1, i, j, k under right multiplication by i and j."""
    right_i = [[0, 1, 0, 0], [-1, 0, 0, 0], [0, 0, 0, -1], [0, 0, 1, 0]]
    right_j = [[0, 0, 1, 0], [0, 0, 0, 1], [-1, 0, 0, 0], [0, -1, 0, 0]]
    return Module.from_matrices([right_i, right_j])


def unitriangular(n: int) -> QQMatrix:
    """Fixed change of basis with integral inverse, used to hide block structure."""
    return QQMatrix([[1 if j >= i else 0 for j in range(n)] for i in range(n)])


@pytest.fixture
def toolkit() -> RationalAlgebraToolkit:
    return RationalAlgebraToolkit(MeatAxeConfig(seed=12345, schur_search_attempts=4, max_search_attempts=200))


@pytest.fixture
def scenario_a() -> Module:
    return s3_standard(1).direct_sum(s3_standard(-1))


@pytest.fixture
def scenario_b() -> Module:
    return diag_ones().direct_sum(diag_ones())


@pytest.fixture
def scenario_c() -> Module:
    return s3_standard(1)
