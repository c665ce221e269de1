"""Unit tests for configuration parsing, errors and tracing."""

import logging
from fractions import Fraction

import pytest

from meataxe_config import MeatAxeConfig
from meataxe_errors import LinearAlgebraError, MeatAxeError, SplitSearchExhausted
from meataxe_trace import TraceContext, configure_logging
from algebra_backend import QQMatrix


class TestMeatAxeConfig:
    """Test suite for MeatAxeConfig."""

    def test_defaults(self) -> None:
        config = MeatAxeConfig()
        assert config.lll_delta == Fraction(3, 4)
        assert config.max_search_attempts == 1000
        assert config.seed is None

    def test_delta_is_normalised_to_fraction(self) -> None:
        assert MeatAxeConfig(lll_delta=0.5).lll_delta == Fraction(1, 2)

    @pytest.mark.parametrize("delta", [Fraction(1, 4), Fraction(1), Fraction(1, 10), 2])
    def test_delta_out_of_range(self, delta) -> None:
        with pytest.raises(ValueError):
            MeatAxeConfig(lll_delta=delta)

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_search_attempts": -1}, {"schur_search_attempts": -1}, {"coefficient_bound": 0}],
    )
    def test_invalid_counts(self, kwargs) -> None:
        with pytest.raises(ValueError):
            MeatAxeConfig(**kwargs)

    def test_seeded_rng_is_reproducible(self) -> None:
        config = MeatAxeConfig(seed=99)
        assert config.make_rng().random() == config.make_rng().random()


class TestFromEnv:
    """Test suite for MEATAXE_* environment parsing."""

    def test_empty_environment_gives_defaults(self) -> None:
        assert MeatAxeConfig.from_env({}) == MeatAxeConfig()

    def test_all_variables(self) -> None:
        config = MeatAxeConfig.from_env({
            "MEATAXE_LLL_DELTA": "99/100",
            "MEATAXE_MAX_SEARCH_ATTEMPTS": "50",
            "MEATAXE_SCHUR_SEARCH_ATTEMPTS": " 7 ",
            "MEATAXE_COEFFICIENT_BOUND": "3",
            "MEATAXE_SEED": "42",
        })
        assert config == MeatAxeConfig(
            lll_delta=Fraction(99, 100),
            max_search_attempts=50,
            schur_search_attempts=7,
            coefficient_bound=3,
            seed=42,
        )

    def test_unbounded_search(self) -> None:
        assert MeatAxeConfig.from_env({"MEATAXE_MAX_SEARCH_ATTEMPTS": "None"}).max_search_attempts is None

    def test_blank_value_falls_back(self) -> None:
        assert MeatAxeConfig.from_env({"MEATAXE_SEED": "  "}).seed is None

    @pytest.mark.parametrize(
        "env",
        [
            {"MEATAXE_LLL_DELTA": "three quarters"},
            {"MEATAXE_LLL_DELTA": "1/0"},
            {"MEATAXE_MAX_SEARCH_ATTEMPTS": "1e3"},
            {"MEATAXE_SEED": "0x10"},
            {"MEATAXE_COEFFICIENT_BOUND": "0"},
        ],
    )
    def test_invalid_values_raise(self, env) -> None:
        with pytest.raises(ValueError):
            MeatAxeConfig.from_env(env)


class TestErrors:
    """Test suite for the exception hierarchy."""

    def test_linear_algebra_error_is_value_error(self) -> None:
        assert issubclass(LinearAlgebraError, ValueError)
        assert issubclass(LinearAlgebraError, MeatAxeError)

    def test_exhausted_search_carries_attempts(self) -> None:
        err = SplitSearchExhausted(17)
        assert err.attempts == 17
        assert "17" in str(err)


class TestTraceContext:
    """Test suite for indented tracing."""

    def test_nested_indentation(self, caplog) -> None:
        trace = TraceContext()
        with caplog.at_level(logging.DEBUG, logger="rational_meataxe"):
            trace.log("top %d", 1)
            trace.nested().nested().log("deep")
        assert [r.getMessage() for r in caplog.records] == ["top 1", "    deep"]

    def test_silent_above_debug(self, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="rational_meataxe"):
            TraceContext().log("hidden")
            TraceContext().matrix("hidden", QQMatrix.identity(2))
        assert not caplog.records

    def test_matrix_rows(self, caplog) -> None:
        with caplog.at_level(logging.DEBUG, logger="rational_meataxe"):
            TraceContext().nested().matrix("M", QQMatrix([[1, "1/2"], [0, 3]]))
        assert [r.getMessage() for r in caplog.records] == ["  M", "    [1 1/2]", "    [0 3]"]

    def test_configure_logging_sets_level(self) -> None:
        configure_logging(logging.WARNING)
        assert logging.getLogger("rational_meataxe").level == logging.WARNING
        configure_logging(logging.DEBUG)
        assert TraceContext().enabled
        logging.getLogger("rational_meataxe").setLevel(logging.NOTSET)
