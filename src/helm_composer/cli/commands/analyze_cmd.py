"""hcomp analyze - Show service groups and relationships."""

from __future__ import annotations

from typing import List, Optional

import typer

from helm_composer.cli.options import (
    ChartNameOption,
    ExcludeKindsOption,
    FileOption,
    IncludeKindsOption,
    NamespaceOption,
    OutputOption,
    RecursiveOption,
    SelectorOption,
    VerboseOption,
    setup_logging,
    split_list,
)
from helm_composer.config.settings import GeneratorOptions
from helm_composer.core.errors import HelmComposerError
from helm_composer.core.extractor import ExtractOptions, extract
from helm_composer.core.pipeline import Pipeline
from helm_composer.output.formatters import console, output_graph
from helm_composer.output.tables import extraction_errors_panel

app = typer.Typer()


@app.callback(invoke_without_command=True)
def analyze(
    files: List[str] = FileOption,
    output: str = OutputOption,
    chart_name: str = ChartNameOption,
    namespace: Optional[List[str]] = NamespaceOption,
    include_kinds: Optional[List[str]] = IncludeKindsOption,
    exclude_kinds: Optional[List[str]] = ExcludeKindsOption,
    selector: Optional[str] = SelectorOption,
    recursive: bool = RecursiveOption,
    verbose: bool = VerboseOption,
) -> None:
    """Group manifests into services and list the relationships between them."""
    setup_logging(verbose)
    try:
        extract_options = ExtractOptions(
            paths=list(files),
            recursive=recursive,
            namespaces=split_list(namespace),
            include_kinds=split_list(include_kinds),
            exclude_kinds=split_list(exclude_kinds),
            label_selector=selector or "",
        )
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--selector") from e

    extracted = extract(extract_options)
    if extracted.errors and output == "table":
        console.print(extraction_errors_panel(extracted.errors))

    try:
        result = Pipeline().analyze(extracted.resources, GeneratorOptions(chart_name=chart_name))
    except HelmComposerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    output_graph(result.graph, output)
