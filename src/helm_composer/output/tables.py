"""Rich table builders for each command."""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from helm_composer.core.errors import ExtractionError
from helm_composer.core.processors import KindRule
from helm_composer.models import OutputMode
from helm_composer.models.chart import GeneratedChart
from helm_composer.models.graph import ResourceGraph
from helm_composer.output.themes import styled_chart_type, styled_mode, styled_relationship


def chart_summary_table(charts: list[GeneratedChart], mode: OutputMode) -> Table:
    table = Table(title=f"Generated Charts ({styled_mode(mode)})", expand=True)
    table.add_column("Chart", style="bold white", no_wrap=True)
    table.add_column("Path", style="dim")
    table.add_column("Type", no_wrap=True)
    table.add_column("Version", style="magenta")
    table.add_column("App Ver", style="cyan")
    table.add_column("Templates", justify="right")
    table.add_column("Dependencies")

    for c in charts:
        deps = ", ".join(f"{d.name}@{d.version}" for d in c.dependencies) or "-"
        table.add_row(
            c.name,
            c.path,
            styled_chart_type(c.metadata.chart_type),
            c.metadata.version,
            c.metadata.app_version,
            str(len(c.templates)),
            deps,
        )
    return table


def group_table(graph: ResourceGraph) -> Table:
    table = Table(title="Service Groups", expand=True)
    table.add_column("Service", style="bold white", no_wrap=True)
    table.add_column("Namespace", style="blue", no_wrap=True)
    table.add_column("Resources", justify="right", style="bold")
    table.add_column("Kinds", style="cyan")
    table.add_column("Values", style="dim")

    for g in graph.groups:
        table.add_row(
            g.name,
            g.namespace or "-",
            str(len(g.resources)),
            ", ".join(g.kinds),
            ", ".join(r.values_key for r in g.resources),
        )
    return table


def relationship_table(graph: ResourceGraph) -> Table:
    table = Table(title="Relationships", expand=True)
    table.add_column("Source", style="bold white")
    table.add_column("Type", no_wrap=True)
    table.add_column("Target", style="bold white")
    table.add_column("Via", style="dim")

    for rel in graph.relationships:
        table.add_row(str(rel.source), styled_relationship(rel.type), str(rel.target), rel.via or "-")
    return table


def kinds_table(rules: tuple[KindRule, ...]) -> Table:
    table = Table(title="Kind Rules", expand=False)
    table.add_column("Rule", style="bold white", no_wrap=True)
    table.add_column("Priority", justify="right", style="bold")
    table.add_column("Kinds", style="cyan")
    table.add_column("API Groups", style="blue")
    table.add_column("Template", style="magenta")

    for rule in rules:
        kinds = ", ".join(sorted(rule.kinds)) if rule.kinds else "*"
        groups = ", ".join(g or "core" for g in sorted(rule.api_groups)) if rule.api_groups else "*"
        table.add_row(rule.name, str(rule.priority), kinds, groups, rule.template_name or "<kind>")
    return table


def extraction_errors_panel(errors: list[ExtractionError]) -> Panel:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("File", style="bold cyan", no_wrap=True)
    table.add_column("Error", style="red")
    for e in errors:
        table.add_row(e.path, e.reason)
    return Panel(table, title=f"[bold]Skipped {len(errors)} file(s)[/bold]", border_style="red")
