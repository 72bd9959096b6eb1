"""
CLI Commands for gramevo.

Provides command-line interface using Click framework.
"""

from typing import Optional
from pathlib import Path
import json
import re
import sys

import click
import yaml
from loguru import logger

from gramevo import __version__
from gramevo.config import EvolutionConfig, GEConfig, load_config
from gramevo.exceptions import GrammarEvolutionError, MappingFailure
from gramevo.genome import DerivationMapper, Grammar, load_evaluator
from gramevo.monitoring import configure_logging
from gramevo.orchestrator import EvolutionController


# =============================================================================
# Helpers
# =============================================================================


def _load_settings(ctx) -> GEConfig:
    """Load the group-level config and apply its logging section."""
    settings = load_config(ctx.obj.get("config"))

    if ctx.obj.get("config") and not ctx.obj.get("verbose"):
        configure_logging(
            log_level=settings.logging.level,
            log_file=settings.logging.log_file,
            rotation=settings.logging.rotation,
            retention=settings.logging.retention,
            serialize=settings.logging.serialize,
        )

    return settings


def _evolution_config(settings: GEConfig, **overrides) -> EvolutionConfig:
    """Apply command line overrides on top of the configured evolution settings."""
    data = settings.evolution.model_dump()
    data.update({key: value for key, value in overrides.items() if value is not None})
    return EvolutionConfig(**data)


def evolution_options(func):
    """Options shared by commands that run evolution."""
    options = [
        click.option("--generations", "-g", type=int, help="Number of generations"),
        click.option("--population", "-p", "population_size", type=int, help="Population size"),
        click.option("--mutation-rate", "-m", type=float, help="Mutation rate"),
        click.option("--genome-length", type=int, help="Codons per genome"),
        click.option("--max-depth", type=int, help="Depth bound for recursive nonterminals"),
        click.option("--seed", "-s", type=int, help="Random seed"),
        click.option(
            "--selection",
            type=click.Choice(["auto", "truncation", "direct"]),
            help="Parent selection strategy",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _parse_liked(answer: str, population_size: int) -> set[int]:
    """Parse a comma or space separated list of indices."""
    liked = set()
    for token in re.split(r"[,\s]+", answer.strip()):
        if not token:
            continue
        index = int(token)
        if not 0 <= index < population_size:
            raise ValueError(f"Index out of range: {index}")
        liked.add(index)
    return liked


# =============================================================================
# Main CLI group
# =============================================================================


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """
    gramevo - Grammatical Evolution.

    Evolves integer genomes mapped through a context-free grammar.
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose

    # Configure logging
    configure_logging(log_level="DEBUG" if verbose else "INFO")


# Grammar inspection
@cli.command()
@click.argument("grammar_file", type=click.Path(exists=True, dir_okay=False))
def info(grammar_file: str):
    """Show the structure of a grammar."""
    try:
        grammar = Grammar.from_file(grammar_file)
    except (GrammarEvolutionError, OSError) as e:
        logger.error(f"Failed to load grammar: {e}")
        sys.exit(1)

    summary = grammar.summary()
    click.echo(f"Start symbol: {summary['start_symbol']}")
    click.echo(f"Nonterminals: {', '.join(summary['nonterminals'])}")
    click.echo(f"Terminals: {', '.join(repr(t) for t in summary['terminals'])}")
    click.echo(f"Recursive: {', '.join(summary['recursive_nonterminals']) or '-'}")
    click.echo(f"Codon modulus: {summary['codon_modulus']}")


# Single mapping
@cli.command(name="map")
@click.argument("grammar_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("codons", type=int, nargs=-1, required=True)
@click.option("--max-depth", type=int, help="Depth bound for recursive nonterminals")
@click.pass_context
def map_genome(ctx, grammar_file: str, codons: tuple[int, ...], max_depth: Optional[int]):
    """Map a genome given as CODONS through a grammar."""
    try:
        settings = _load_settings(ctx)
        grammar = Grammar.from_file(grammar_file)
        depth = max_depth if max_depth is not None else settings.evolution.max_depth
        derivation = DerivationMapper(grammar, depth).derive(list(codons))
    except MappingFailure as e:
        click.echo(f"Mapping failed: genome exhausted while expanding {e.symbol}")
        sys.exit(1)
    except (GrammarEvolutionError, OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Mapping failed: {e}")
        sys.exit(1)

    click.echo(f"Phenotype: {derivation.phenotype}")
    click.echo(f"Used codons: {derivation.used_codons}")


# Autonomous evolution
@cli.command()
@click.argument("grammar_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--evaluator", "-e", "evaluator_name", default="length", show_default=True,
              help="Builtin evaluator (length, quartic, count:WORD) or module:attribute")
@evolution_options
@click.option("--history-out", type=click.Path(dir_okay=False), help="Write run history as JSON")
@click.pass_context
def evolve(ctx, grammar_file: str, evaluator_name: str, history_out: Optional[str], **overrides):
    """Run autonomous evolution against an evaluator."""
    try:
        settings = _load_settings(ctx)
        evolution_config = _evolution_config(
            settings,
            num_generations=overrides.pop("generations"),
            **overrides,
        )
        grammar = Grammar.from_file(grammar_file)
        evaluator = load_evaluator(evaluator_name)

        controller = EvolutionController(
            grammar,
            evolution_config,
            evaluator,
            experiment_name=settings.experiment_name,
        )
        best = controller.evolve()

        if history_out:
            controller.history.export_json(history_out)

    except (GrammarEvolutionError, OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Evolution failed: {e}")
        sys.exit(1)

    logger.success(f"Evolution complete! Best fitness: {best.fitness}")
    click.echo(f"Best phenotype: {best.phenotype}")
    click.echo(f"Fitness: {best.fitness}")
    click.echo(f"Used codons: {best.used_codons}")
    click.echo(f"Genome: {json.dumps(best.used_region)}")


# Interactive evolution
@cli.command()
@click.argument("grammar_file", type=click.Path(exists=True, dir_okay=False))
@evolution_options
@click.pass_context
def interactive(ctx, grammar_file: str, **overrides):
    """Evolve with your own judgement as the fitness function."""
    try:
        settings = _load_settings(ctx)
        evolution_config = _evolution_config(
            settings,
            num_generations=overrides.pop("generations"),
            **overrides,
        )
        grammar = Grammar.from_file(grammar_file)

        controller = EvolutionController(
            grammar,
            evolution_config,
            experiment_name=settings.experiment_name,
        )
        controller.init()

        rounds = 0
        while rounds < evolution_config.num_generations:
            population = controller.ask()

            click.echo(f"\nGeneration {controller.generation}")
            for index, individual in enumerate(population):
                click.echo(f"  [{index}] {individual.phenotype}")

            answer = click.prompt(
                "Liked individuals (indices, q to quit)",
                default="",
                show_default=False,
            )
            if answer.strip().lower() == "q":
                break

            try:
                liked = _parse_liked(answer, len(population))
            except ValueError as e:
                click.echo(f"Invalid selection: {e}")
                continue

            controller.tell([1.0 if index in liked else 0.0 for index in range(len(population))])
            rounds += 1

    except (GrammarEvolutionError, OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Interactive evolution failed: {e}")
        sys.exit(1)

    best = controller.best_ever
    click.echo(f"\nBest phenotype: {best.phenotype}")
    click.echo(f"Fitness: {best.fitness}")


# Config command
@cli.command()
@click.option("--init", is_flag=True, help="Initialize default config")
@click.option("--validate", is_flag=True, help="Validate config file")
@click.option("--show", is_flag=True, help="Show current config")
@click.option("--file", "-f", "config_file", type=click.Path(dir_okay=False),
              help="Config file (defaults to --config or gramevo.yaml)")
@click.pass_context
def config(ctx, init: bool, validate: bool, show: bool, config_file: Optional[str]):
    """Manage configuration files."""
    config_file = config_file or ctx.obj.get("config") or "gramevo.yaml"

    if init:
        logger.info("Initializing default configuration")
        try:
            GEConfig().to_yaml(Path(config_file))
            logger.success(f"Config created: {config_file}")
        except OSError as e:
            logger.error(f"Config initialization failed: {e}")
            sys.exit(1)

    elif validate:
        logger.info(f"Validating config: {config_file}")
        try:
            load_config(config_file)
            logger.success("Config is valid")
            click.echo("Config is valid")
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Config validation failed: {e}")
            click.echo("Config is invalid")
            sys.exit(1)

    elif show:
        try:
            settings = load_config(config_file) if Path(config_file).exists() else GEConfig()
            click.echo(yaml.dump(settings.model_dump(mode="json"), default_flow_style=False, sort_keys=False))
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Failed to show config: {e}")
            sys.exit(1)

    else:
        click.echo("Use --init, --validate, or --show")


if __name__ == "__main__":
    cli()
