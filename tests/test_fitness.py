"""
Unit tests for evaluators.

Tests cover:
- Evaluator wrapping and direction
- Stock evaluators
- Symbolic regression scoring
- Evaluator lookup by name
"""

import math

import numpy as np
import pytest

from gramevo.genome.fitness import (
    NULL_EVALUATOR,
    Evaluator,
    SymbolicRegression,
    as_evaluator,
    count_occurrences,
    fitness_function,
    load_evaluator,
    phenotype_length,
    quartic_regression,
)


# ============================================================================
# Evaluator Tests
# ============================================================================

class TestEvaluator:
    """Test Evaluator wrapping."""

    def test_call_returns_float(self):
        evaluator = Evaluator(function=lambda p: len(p))
        assert evaluator("abc") == 3.0
        assert isinstance(evaluator("abc"), float)

    def test_decorator(self):
        @fitness_function(maximize=False)
        def error(phenotype):
            return 1.0

        assert isinstance(error, Evaluator)
        assert not error.maximize
        assert error.name == "error"

    def test_as_evaluator_reads_maximize_attribute(self):
        def error(phenotype):
            return 0.0

        error.maximize = False
        assert not as_evaluator(error).maximize

    def test_as_evaluator_defaults_to_maximize(self):
        assert as_evaluator(len).maximize

    def test_as_evaluator_passthrough(self):
        assert as_evaluator(phenotype_length) is phenotype_length

    def test_as_evaluator_rejects_non_callable(self):
        with pytest.raises(TypeError):
            as_evaluator(42)

    def test_null_evaluator(self):
        assert NULL_EVALUATOR("anything") == 0.0
        assert NULL_EVALUATOR.maximize


# ============================================================================
# Stock Evaluator Tests
# ============================================================================

class TestStockEvaluators:
    """Test the bundled fitness functions."""

    def test_phenotype_length(self):
        assert phenotype_length("0101") == 4.0
        assert phenotype_length.maximize

    def test_count_occurrences_case_insensitive(self):
        evaluator = count_occurrences("fire")
        assert evaluator("Fire and FIRE and fir") == 2.0

    def test_count_occurrences_literal(self):
        assert count_occurrences("a+")("a+a+aa") == 2.0


class TestSymbolicRegression:
    """Test RMSE scoring of expression phenotypes."""

    @pytest.fixture
    def regression(self):
        return SymbolicRegression(target=lambda x: x * x, inputs=[0.0, 1.0, 2.0, 3.0])

    def test_exact_expression(self, regression):
        assert regression("x*x") == pytest.approx(0.0)

    def test_constant_expression(self, regression):
        expected = math.sqrt(np.mean(np.square(np.array([0.0, 1.0, 4.0, 9.0]) - 1.0)))
        assert regression("1.0") == pytest.approx(expected)

    def test_namespace_functions(self):
        regression = SymbolicRegression(target=np.sin, inputs=[0.0, 0.5, 1.0])
        assert regression("sin(x)") == pytest.approx(0.0)

    @pytest.mark.parametrize("phenotype", ["x+", "y*x", "x/0", "__import__('os')", "log(x-5)"])
    def test_unevaluable_scores_infinity(self, regression, phenotype):
        assert regression(phenotype) == math.inf

    def test_is_minimizing(self, regression):
        assert not regression.maximize
        assert not regression.as_evaluator().maximize

    def test_quartic(self):
        evaluator = quartic_regression()

        assert not evaluator.maximize
        assert evaluator("x+x*x+x*x*x+x*x*x*x") == pytest.approx(0.0)
        assert evaluator("x") > 0.0


# ============================================================================
# Lookup Tests
# ============================================================================

class TestLoadEvaluator:
    """Test evaluator lookup by name."""

    def test_builtin_length(self):
        assert load_evaluator("length") is phenotype_length

    def test_builtin_quartic(self):
        assert not load_evaluator("quartic").maximize

    def test_count(self):
        assert load_evaluator("count:ab")("abAB") == 2.0

    def test_module_attribute(self):
        evaluator = load_evaluator("gramevo.genome.fitness:phenotype_length")
        assert evaluator is phenotype_length

    @pytest.mark.parametrize(
        "name",
        ["unknown", "count:", "no_such_module_xyz:f", "gramevo.genome.fitness:missing", "math:pi"],
    )
    def test_unresolvable(self, name):
        with pytest.raises(ValueError):
            load_evaluator(name)
