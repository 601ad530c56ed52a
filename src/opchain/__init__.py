"""
opchain - an operation-chain runtime for interactive CLIs.

Operations return Outcomes; an Outcome may name the next operation to run.
Each operation's log is buffered and written as its own artifact, and
every prompt can be replayed from a scripted-input string.

Packages:
- opchain.core: Outcome, errors, settings
- opchain.logging: console logging and per-operation artifacts
- opchain.framework: operations, stack, chain runner, registry
- opchain.input: scripted and live input
- opchain.operations: UI primitives, exits and the demo menu
- opchain.cli: the Typer application
"""

__version__ = "0.1.0"
