"""
Fitness Evaluation Module

An evaluator turns a phenotype into a number and says whether larger
numbers are better. The engine treats it as opaque: it is called once per
individual between ask() and tell() by the autonomous driver, and not at
all in interactive runs where fitness comes from outside.

Stock evaluators:
- phenotype_length: longer is better
- count_occurrences: more occurrences of a word is better
- SymbolicRegression: lower RMSE against a target function is better
"""

from __future__ import annotations

import importlib
import math
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from loguru import logger


@dataclass(frozen=True)
class Evaluator:
    """
    Fitness function tagged with its optimisation direction.

    Attributes:
        function: Phenotype -> numeric fitness
        maximize: True if larger fitness is better
        name: Label for logs
    """

    function: Callable[[str], float]
    maximize: bool = True
    name: str = ""

    def __call__(self, phenotype: str) -> float:
        return float(self.function(phenotype))


def fitness_function(maximize: bool = True, name: str | None = None) -> Callable[[Callable[[str], float]], Evaluator]:
    """
    Decorator turning a plain function into an Evaluator.

        @fitness_function(maximize=False)
        def error(phenotype): ...
    """
    def wrap(function: Callable[[str], float]) -> Evaluator:
        return Evaluator(function=function, maximize=maximize, name=name or function.__name__)
    return wrap


def as_evaluator(obj: Any) -> Evaluator:
    """
    Coerce a callable into an Evaluator.

    Plain callables may carry a boolean `maximize` attribute; without one
    they are maximised.
    """
    if isinstance(obj, Evaluator):
        return obj
    if not callable(obj):
        raise TypeError(f"Evaluator must be callable, got {type(obj).__name__}")
    return Evaluator(
        function=obj,
        maximize=bool(getattr(obj, "maximize", True)),
        name=getattr(obj, "__name__", type(obj).__name__),
    )


# Interactive runs: every individual scores 0 until told otherwise
NULL_EVALUATOR = Evaluator(function=lambda phenotype: 0.0, maximize=True, name="null")


# =============================================================================
# Stock Evaluators
# =============================================================================


@fitness_function(maximize=True)
def phenotype_length(phenotype: str) -> float:
    return float(len(phenotype))


def count_occurrences(needle: str) -> Evaluator:
    """Evaluator counting case-insensitive, non-overlapping occurrences of `needle`."""
    pattern = re.compile(re.escape(needle), re.IGNORECASE)

    def count(phenotype: str) -> float:
        return float(len(pattern.findall(phenotype)))

    return Evaluator(function=count, maximize=True, name=f"count_{needle}")


# Names a phenotype may use besides the input variable
EXPRESSION_NAMESPACE: dict[str, Any] = {
    "sin": np.sin,
    "cos": np.cos,
    "exp": np.exp,
    "log": np.log,
    "sqrt": np.sqrt,
    "abs": np.abs,
    "pi": np.pi,
}


@dataclass
class SymbolicRegression:
    """
    Root-mean-square error of a phenotype expression against a target.

    The phenotype is evaluated as a Python expression over numpy arrays,
    with the input bound to `variable`. Expressions that fail to evaluate,
    or yield non-finite values, score infinity.

    Attributes:
        target: Reference function over the inputs
        inputs: Sample points
        variable: Name the phenotype uses for the input
    """

    target: Callable[[np.ndarray], np.ndarray]
    inputs: Sequence[float]
    variable: str = "x"
    maximize: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self._x = np.asarray(self.inputs, dtype=float)
        self._y = np.asarray(self.target(self._x), dtype=float)

    def predict(self, phenotype: str) -> np.ndarray:
        namespace = {"__builtins__": {}, **EXPRESSION_NAMESPACE, self.variable: self._x}
        with np.errstate(all="ignore"):
            value = eval(phenotype, namespace)  # noqa: S307
        return np.broadcast_to(np.asarray(value, dtype=float), self._x.shape)

    def __call__(self, phenotype: str) -> float:
        try:
            predicted = self.predict(phenotype)
        except (ArithmeticError, ValueError, TypeError, NameError, SyntaxError) as e:
            logger.debug("Phenotype could not be evaluated", error=str(e))
            return math.inf

        with np.errstate(all="ignore"):
            error = float(np.sqrt(np.mean(np.square(predicted - self._y))))
        return error if math.isfinite(error) else math.inf

    def as_evaluator(self, name: str = "symbolic_regression") -> Evaluator:
        return Evaluator(function=self, maximize=False, name=name)


def quartic_regression() -> Evaluator:
    """Fit x + x^2 + x^3 + x^4 on x = 0.0, 0.1, ..., 0.5."""
    regression = SymbolicRegression(
        target=lambda x: x + x ** 2 + x ** 3 + x ** 4,
        inputs=[0.0, 0.1, 0.2, 0.3, 0.4, 0.5],
    )
    return regression.as_evaluator(name="quartic_regression")


# =============================================================================
# Lookup
# =============================================================================


BUILTIN_EVALUATORS: dict[str, Callable[[], Evaluator]] = {
    "length": lambda: phenotype_length,
    "quartic": quartic_regression,
}


def load_evaluator(name: str) -> Evaluator:
    """
    Resolve an evaluator by name.

    Accepts a builtin name (`length`, `quartic`), `count:WORD`, or a
    `package.module:attribute` reference to any callable.

    Raises:
        ValueError: If the name cannot be resolved
    """
    if name in BUILTIN_EVALUATORS:
        return BUILTIN_EVALUATORS[name]()

    if name.startswith("count:"):
        needle = name[len("count:"):]
        if not needle:
            raise ValueError("count evaluator needs a word, e.g. count:fire")
        return count_occurrences(needle)

    module_name, _, attribute = name.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Unknown evaluator: {name}")

    try:
        obj = getattr(importlib.import_module(module_name), attribute)
    except (ImportError, AttributeError) as e:
        raise ValueError(f"Cannot load evaluator {name}: {e}") from e

    try:
        return as_evaluator(obj)
    except TypeError as e:
        raise ValueError(str(e)) from e


__all__ = [
    "Evaluator",
    "load_evaluator",
    "BUILTIN_EVALUATORS",
    "fitness_function",
    "as_evaluator",
    "NULL_EVALUATOR",
    "phenotype_length",
    "count_occurrences",
    "SymbolicRegression",
    "quartic_regression",
]
