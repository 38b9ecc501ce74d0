"""Shared CLI options."""

from __future__ import annotations

import logging
from typing import List, Optional

import typer
from rich.logging import RichHandler

OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
FileOption = typer.Option(..., "--file", "-f", help="Manifest file or directory (repeatable, '-' for stdin)")
NamespaceOption = typer.Option(None, "--namespace", "-n", help="Only keep resources from these namespaces")
IncludeKindsOption = typer.Option(None, "--include-kinds", help="Only keep these kinds (repeatable)")
ExcludeKindsOption = typer.Option(None, "--exclude-kinds", help="Drop these kinds (repeatable)")
SelectorOption = typer.Option(None, "--selector", "-l", help="Label selector, e.g. app=web,tier!=cache")
ChartNameOption = typer.Option("app", "--chart-name", help="Name of the generated chart")
RecursiveOption = typer.Option(True, "--recursive/--no-recursive", help="Descend into sub-directories")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Log pipeline decisions")


def split_list(values: Optional[List[str]]) -> list[str]:
    """Accept both repeated options and comma-separated lists."""
    out: list[str] = []
    for value in values or []:
        out.extend(v.strip() for v in value.split(",") if v.strip())
    return out


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=verbose, show_path=False)],
        force=True,
    )
