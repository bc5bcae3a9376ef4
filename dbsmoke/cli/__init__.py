"""CLI argument parsing and handling."""

from __future__ import annotations

from dbsmoke.cli.parsing import parse_scenario_names

__all__ = ["parse_scenario_names"]
