"""opchain command-line interface (Typer + Rich)."""

from opchain.cli.app import app, run

__all__ = ["app", "run"]
