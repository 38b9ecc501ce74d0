"""hcomp generate - Convert manifests into Helm charts."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.tree import Tree

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
from helm_composer.config.settings import GeneratorOptions, settings
from helm_composer.core.errors import HelmComposerError
from helm_composer.core.extractor import ExtractOptions, extract
from helm_composer.core.pipeline import Pipeline
from helm_composer.output.formatters import output_charts
from helm_composer.output.tables import extraction_errors_panel
from helm_composer.output.writer import render_chart, write_charts

app = typer.Typer()
console = Console()


@app.callback(invoke_without_command=True)
def generate(
    files: List[str] = FileOption,
    output_dir: Path = typer.Option(Path("charts"), "--output-dir", "-d", help="Directory to write charts into"),
    chart_name: str = ChartNameOption,
    mode: str = typer.Option(
        settings.output_mode, "--mode", "-m", help="Output mode: universal, separate, library, umbrella",
    ),
    chart_version: str = typer.Option(settings.chart_version, "--chart-version", help="Chart version"),
    app_version: str = typer.Option(settings.app_version, "--app-version", help="Application version"),
    namespace: Optional[List[str]] = NamespaceOption,
    include_kinds: Optional[List[str]] = IncludeKindsOption,
    exclude_kinds: Optional[List[str]] = ExcludeKindsOption,
    selector: Optional[str] = SelectorOption,
    recursive: bool = RecursiveOption,
    include_schema: bool = typer.Option(False, "--include-schema", help="Write values.schema.json"),
    module_scaffold: bool = typer.Option(False, "--module-scaffold", help="Add helm_lib module scaffolding"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the files that would be written"),
    output: str = OutputOption,
    verbose: bool = VerboseOption,
) -> None:
    """Convert Kubernetes manifests into one or more Helm charts."""
    setup_logging(verbose)
    namespaces = split_list(namespace)
    try:
        extract_options = ExtractOptions(
            paths=list(files),
            recursive=recursive,
            namespaces=namespaces,
            include_kinds=split_list(include_kinds),
            exclude_kinds=split_list(exclude_kinds),
            label_selector=selector or "",
        )
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--selector") from e

    extracted = extract(extract_options)
    if extracted.errors:
        console.print(extraction_errors_panel(extracted.errors))
    if not extracted.resources:
        typer.echo("No resources found in the given manifests.", err=True)
        raise typer.Exit(code=1)

    try:
        options = GeneratorOptions(
            chart_name=chart_name,
            chart_version=chart_version,
            app_version=app_version,
            namespace=namespaces[0] if len(namespaces) == 1 else "",
            mode=mode,
            include_schema=include_schema,
            module_scaffold=module_scaffold,
        )
        result = Pipeline().run(extracted.resources, options)
    except HelmComposerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        if dry_run:
            for chart in result.charts:
                tree = Tree(f"[bold]{output_dir / chart.path}[/bold]")
                for rel in render_chart(chart):
                    tree.add(rel)
                console.print(tree)
        else:
            write_charts(result.charts, output_dir)
    except (HelmComposerError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    output_charts(result.charts, options.mode, output)
    if output == "table":
        verb = "Would write" if dry_run else "Wrote"
        console.print(
            f"\n{verb} [bold]{len(result.charts)}[/bold] chart(s) from "
            f"{len(result.processed)} resource(s) to [cyan]{output_dir}[/cyan]"
            + (f" ([dim]{result.skipped} skipped[/dim])" if result.skipped else "")
        )
