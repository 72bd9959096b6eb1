"""
Autonomous Evolution Example

Fits x + x^2 + x^3 + x^4 by symbolic regression, running the generational
loop end to end.

Run from the repository root:
    python examples/autonomous_run.py
"""

from pathlib import Path

from gramevo import EvolutionConfig, EvolutionController, Grammar
from gramevo.genome import quartic_regression
from gramevo.monitoring import configure_logging


GRAMMAR_FILE = Path(__file__).parent / "grammars" / "sr_grammar.json"


def main():
    configure_logging(log_level="INFO")

    print("=" * 80)
    print("GRAMEVO AUTONOMOUS RUN")
    print("=" * 80)

    # ==========================================================================
    # STEP 1: Grammar and configuration
    # ==========================================================================
    grammar = Grammar.from_file(GRAMMAR_FILE)
    config = EvolutionConfig(
        population_size=50,
        num_generations=10,
        mutation_rate=0.2,
        truncation_fraction=0.3,
        max_depth=6,
        seed=2024,
    )

    print(f"Start symbol: {grammar.start_symbol}")
    print(f"Codon modulus: {grammar.codon_modulus}")
    print()

    # ==========================================================================
    # STEP 2: Evolve
    # ==========================================================================
    controller = EvolutionController(grammar, config, quartic_regression())
    best = controller.evolve()

    # ==========================================================================
    # STEP 3: Results
    # ==========================================================================
    print()
    print(f"Best phenotype: {best.phenotype}")
    print(f"RMSE: {best.fitness:.6f}")
    print(f"Used codons: {best.used_codons}")
    print()

    for generation, fitness in controller.history.best_fitness_progression():
        print(f"  generation {generation:3d}: {fitness:.6f}")


if __name__ == "__main__":
    main()
