"""
Evolution History Tracking

This module tracks a run across generations:
- Generation records (statistics snapshot, best-ever at that point)
- Fitness progression over time
- Export for analysis

The history is a report of a run, not a snapshot of engine state; it cannot
be used to resume evolution.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from .encoding import Individual
from .population import PopulationStatistics


# =============================================================================
# Generation Record
# =============================================================================


@dataclass
class GenerationRecord:
    """
    Record of a single evaluated generation.

    Captures:
    - Generation metadata
    - Population statistics
    - Best-ever individual after the generation was scored
    - Cumulative evaluation count
    """

    generation: int
    timestamp: str

    # Statistics
    statistics: PopulationStatistics

    # Best-ever individual
    best_phenotype: str | None
    best_fitness: float | None
    best_used_codons: int

    # Individuals scored so far in the run
    evaluations: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "generation": self.generation,
            "timestamp": self.timestamp,
            "statistics": self.statistics.to_dict(),
            "best_phenotype": self.best_phenotype,
            "best_fitness": self.best_fitness,
            "best_used_codons": self.best_used_codons,
            "evaluations": self.evaluations,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenerationRecord:
        """Create from dictionary."""
        return cls(
            generation=data["generation"],
            timestamp=data["timestamp"],
            statistics=PopulationStatistics(**data["statistics"]),
            best_phenotype=data["best_phenotype"],
            best_fitness=data["best_fitness"],
            best_used_codons=data["best_used_codons"],
            evaluations=data["evaluations"],
        )


# =============================================================================
# Evolution History
# =============================================================================


class EvolutionHistory:
    """
    Tracks the history of one run.

    Responsibilities:
    - Record each evaluated generation
    - Analyze best-fitness progression
    - Export history for analysis
    """

    def __init__(self, experiment_name: str = "gramevo"):
        """
        Initialize evolution history.

        Args:
            experiment_name: Name of this evolution experiment
        """
        self.experiment_name = experiment_name
        self.start_time = datetime.now(timezone.utc).isoformat()

        self.generations: dict[int, GenerationRecord] = {}

        logger.debug(
            "Initialized EvolutionHistory",
            experiment=experiment_name,
            start_time=self.start_time,
        )

    def __len__(self) -> int:
        return len(self.generations)

    def record(
        self,
        generation: int,
        statistics: PopulationStatistics,
        best_ever: Individual | None,
        evaluations: int,
    ) -> GenerationRecord:
        """
        Record an evaluated generation.

        Args:
            generation: Generation number
            statistics: Population statistics after fitness assignment
            best_ever: Best individual of the run so far
            evaluations: Individuals scored so far in the run

        Returns:
            The stored record
        """
        record = GenerationRecord(
            generation=generation,
            timestamp=datetime.now(timezone.utc).isoformat(),
            statistics=statistics,
            best_phenotype=best_ever.phenotype if best_ever is not None else None,
            best_fitness=best_ever.fitness if best_ever is not None else None,
            best_used_codons=best_ever.used_codons if best_ever is not None else 0,
            evaluations=evaluations,
        )

        self.generations[generation] = record
        return record

    def get_generation_record(self, generation: int) -> GenerationRecord | None:
        return self.generations.get(generation)

    def best_fitness_progression(self) -> list[tuple[int, float | None]]:
        """
        Get best-ever fitness over generations.

        Returns:
            List of (generation, best_fitness) tuples
        """
        return [
            (generation, self.generations[generation].best_fitness)
            for generation in sorted(self.generations)
        ]

    def compute_summary(self) -> dict[str, Any]:
        """
        Compute summary statistics of the run.

        Returns:
            Summary dictionary
        """
        if not self.generations:
            return {
                "experiment_name": self.experiment_name,
                "total_generations": 0,
                "total_evaluations": 0,
                "best_fitness": None,
                "best_phenotype": None,
            }

        progression = self.best_fitness_progression()
        last = self.generations[max(self.generations)]

        initial_fitness = progression[0][1]
        final_fitness = progression[-1][1]
        improvement = None
        if initial_fitness is not None and final_fitness is not None:
            improvement = final_fitness - initial_fitness

        return {
            "experiment_name": self.experiment_name,
            "start_time": self.start_time,
            "total_generations": len(self.generations),
            "total_evaluations": last.evaluations,
            "best_fitness": last.best_fitness,
            "best_phenotype": last.best_phenotype,
            "best_used_codons": last.best_used_codons,
            "initial_fitness": initial_fitness,
            "final_fitness": final_fitness,
            "fitness_improvement": improvement,
            "novelty_cache_size": last.statistics.novelty_cache_size,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "experiment_name": self.experiment_name,
            "start_time": self.start_time,
            "summary": self.compute_summary(),
            "generations": {
                str(generation): record.to_dict()
                for generation, record in sorted(self.generations.items())
            },
        }

    def export_json(self, filepath: Path | str) -> Path:
        """
        Export the history to a JSON file.

        Args:
            filepath: Output file path

        Returns:
            The written path
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(
            "Evolution history exported",
            filepath=str(filepath),
            generations=len(self.generations),
        )

        return filepath


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "GenerationRecord",
    "EvolutionHistory",
]
