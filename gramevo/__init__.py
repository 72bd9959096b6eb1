"""
gramevo - Grammatical Evolution

Evolves integer genomes that a context-free grammar maps to text, either in
an autonomous generational loop or one generation at a time through ask/tell.
"""

__version__ = "0.1.0"

# Exceptions
from gramevo.exceptions import (
    GrammarEvolutionError,
    InvalidGrammarError,
    MappingFailure,
    DepthBoundUnsatisfiableError,
    GenerationExhaustedError,
    ProtocolViolationError,
)

# Configuration
from gramevo.config import (
    GEConfig,
    EvolutionConfig,
    LoggingConfig,
    load_config,
)

# Core genome system
from gramevo.genome import (
    Grammar,
    Individual,
    DerivationMapper,
    Evaluator,
    fitness_function,
    PopulationManager,
    EvolutionHistory,
)

# Controller
from gramevo.orchestrator import (
    ControllerState,
    EvolutionController,
)

__all__ = [
    "__version__",
    # Exceptions
    "GrammarEvolutionError",
    "InvalidGrammarError",
    "MappingFailure",
    "DepthBoundUnsatisfiableError",
    "GenerationExhaustedError",
    "ProtocolViolationError",
    # Configuration
    "GEConfig",
    "EvolutionConfig",
    "LoggingConfig",
    "load_config",
    # Genome system
    "Grammar",
    "Individual",
    "DerivationMapper",
    "Evaluator",
    "fitness_function",
    "PopulationManager",
    "EvolutionHistory",
    # Controller
    "ControllerState",
    "EvolutionController",
]
