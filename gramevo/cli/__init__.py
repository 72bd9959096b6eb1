"""
Command Line Interface for gramevo.

Commands:
- gramevo info: Grammar structure
- gramevo map: Map one genome
- gramevo evolve: Autonomous evolution
- gramevo interactive: Evolution with human judgement
- gramevo config: Configuration management
"""

from .commands import cli

__all__ = ["cli"]
