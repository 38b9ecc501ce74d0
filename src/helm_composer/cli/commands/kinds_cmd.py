"""hcomp kinds - List the registered kind rules."""

from __future__ import annotations

import typer

from helm_composer.cli.options import OutputOption
from helm_composer.core.processors import default_registry
from helm_composer.output.formatters import output_kinds

app = typer.Typer()


@app.callback(invoke_without_command=True)
def kinds(output: str = OutputOption) -> None:
    """Show which rule handles which kinds, highest priority first."""
    output_kinds(default_registry().rules, output)
