"""
Interactive Evolution Example

Drives the ask/tell protocol by hand: no evaluator is configured, so each
generation is shown and you pick the individuals you like. Liked
individuals get fitness 1, the rest 0.

Run from the repository root:
    python examples/interactive_run.py
"""

from pathlib import Path

from gramevo import EvolutionConfig, EvolutionController, Grammar


GRAMMAR_FILE = Path(__file__).parent / "grammars" / "phrases.yaml"


def main():
    grammar = Grammar.from_file(GRAMMAR_FILE)
    config = EvolutionConfig(population_size=10, num_generations=5, max_depth=6)

    controller = EvolutionController(grammar, config)
    controller.init()

    for _ in range(config.num_generations):
        population = controller.ask()

        print(f"\nGeneration {controller.generation}")
        for index, individual in enumerate(population):
            print(f"  [{index}] {individual.phenotype}")

        answer = input("Liked individuals (e.g. 0,3), q to quit: ").strip()
        if answer.lower() == "q":
            break

        liked = {int(token) for token in answer.replace(",", " ").split()}
        controller.tell([1.0 if index in liked else 0.0 for index in range(len(population))])

    print(f"\nBest: {controller.describe()}")


if __name__ == "__main__":
    main()
