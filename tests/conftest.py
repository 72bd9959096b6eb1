"""
Pytest configuration and shared fixtures for gramevo tests.

This module provides reusable test fixtures for:
- Grammar descriptions and grammars
- Evolution configurations
- Seeded random sources
- Grammar files on disk
"""

import json
import random

import pytest
from loguru import logger

from gramevo.config import EvolutionConfig, GEConfig
from gramevo.genome.grammar import Grammar


# ============================================================================
# Grammar Fixtures
# ============================================================================

BINARY_GRAMMAR = {
    "<e>": [["0"], ["1"], ["<e>", "<e>"]],
}

EXPRESSION_GRAMMAR = {
    "<e>": [["(", "<e>", "<op>", "<e>", ")"], ["<v>"]],
    "<op>": [["+"], ["-"], ["*"]],
    "<v>": [["x"], ["1.0"]],
}


@pytest.fixture
def binary_description():
    """Grammar description for binary strings: <e> ::= 0 | 1 | <e><e>."""
    return {lhs: [list(p) for p in productions] for lhs, productions in BINARY_GRAMMAR.items()}


@pytest.fixture
def binary_grammar(binary_description):
    """Binary string grammar (codon modulus 3)."""
    return Grammar.from_dict(binary_description)


@pytest.fixture
def expression_grammar():
    """Arithmetic expression grammar over x (codon modulus 6)."""
    return Grammar.from_dict(EXPRESSION_GRAMMAR)


@pytest.fixture
def grammar_file(tmp_path, binary_description):
    """Binary grammar written as JSON."""
    path = tmp_path / "binary.json"
    path.write_text(json.dumps(binary_description))
    return path


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def evolution_config():
    """Small, seeded evolution configuration."""
    return EvolutionConfig(
        population_size=10,
        num_generations=3,
        mutation_rate=0.2,
        truncation_fraction=0.3,
        max_depth=4,
        genome_length=50,
        seed=42,
    )


@pytest.fixture
def ge_config(evolution_config):
    """Complete configuration wrapping the small evolution configuration."""
    return GEConfig(experiment_name="test-run", evolution=evolution_config)


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


# ============================================================================
# Logging
# ============================================================================

@pytest.fixture(autouse=True)
def reset_logging():
    """Drop sinks added during a test (CLI commands reconfigure loguru)."""
    yield
    logger.remove()
