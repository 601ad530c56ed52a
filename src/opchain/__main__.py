"""Allow ``python -m opchain``."""

from opchain.cli.app import run

run()
