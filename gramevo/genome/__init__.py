"""
gramevo Genome System

Grammatical evolution core: integer genomes are mapped through a
context-free grammar into text phenotypes, scored, selected and bred.
"""

# Grammar model
from .grammar import (
    Grammar,
    Production,
    is_nonterminal,
)

# Core encoding
from .encoding import (
    Individual,
    random_genome,
)

# Genotype-to-phenotype mapping
from .mapper import (
    Derivation,
    DerivationMapper,
)

# Evolution operators
from .operators import (
    MutationOperator,
    CrossoverOperator,
    SelectionStrategy,
)

# Fitness evaluation
from .fitness import (
    Evaluator,
    fitness_function,
    as_evaluator,
    load_evaluator,
    NULL_EVALUATOR,
    phenotype_length,
    count_occurrences,
    SymbolicRegression,
    quartic_regression,
)

# Population management
from .population import (
    PopulationManager,
    PopulationStatistics,
)

# Evolution history
from .history import (
    EvolutionHistory,
    GenerationRecord,
)

__all__ = [
    # Grammar
    "Grammar",
    "Production",
    "is_nonterminal",
    # Encoding
    "Individual",
    "random_genome",
    # Mapping
    "Derivation",
    "DerivationMapper",
    # Operators
    "MutationOperator",
    "CrossoverOperator",
    "SelectionStrategy",
    # Fitness
    "Evaluator",
    "fitness_function",
    "as_evaluator",
    "load_evaluator",
    "NULL_EVALUATOR",
    "phenotype_length",
    "count_occurrences",
    "SymbolicRegression",
    "quartic_regression",
    # Population
    "PopulationManager",
    "PopulationStatistics",
    # History
    "EvolutionHistory",
    "GenerationRecord",
]
