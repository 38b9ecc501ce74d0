"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from helm_composer.core.processors import KindRule
from helm_composer.models import OutputMode
from helm_composer.models.chart import GeneratedChart
from helm_composer.models.graph import Relationship, ResourceGraph

console = Console()


def _relationship_to_dict(rel: Relationship) -> dict[str, Any]:
    data = {
        "source": str(rel.source),
        "target": str(rel.target),
        "type": rel.type.value,
    }
    if rel.via:
        data["via"] = rel.via
    if rel.detail:
        data["detail"] = rel.detail
    return data


def _graph_to_dict(graph: ResourceGraph) -> dict[str, Any]:
    return {
        "groups": [
            {
                "name": g.name,
                "namespace": g.namespace,
                "resources": [
                    {"ref": str(r.ref), "template": r.template_path, "values": r.values_key}
                    for r in g.resources
                ],
            }
            for g in graph.groups
        ],
        "relationships": [_relationship_to_dict(rel) for rel in graph.relationships],
    }


def _chart_to_dict(chart: GeneratedChart) -> dict[str, Any]:
    return {
        "name": chart.name,
        "path": chart.path,
        "type": chart.metadata.chart_type,
        "version": chart.metadata.version,
        "app_version": chart.metadata.app_version,
        "templates": sorted(chart.templates),
        "dependencies": [d.to_dict() for d in chart.dependencies],
    }


def _emit(data: Any, fmt: str) -> bool:
    if fmt == "json":
        console.print_json(json.dumps(data, indent=2))
        return True
    if fmt == "yaml":
        console.print(yaml.dump(data, default_flow_style=False, sort_keys=False))
        return True
    return False


def output_graph(graph: ResourceGraph, fmt: str) -> None:
    if not _emit(_graph_to_dict(graph), fmt):
        from helm_composer.output.tables import group_table, relationship_table
        console.print(group_table(graph))
        console.print(relationship_table(graph))


def output_charts(charts: list[GeneratedChart], mode: OutputMode, fmt: str) -> None:
    if not _emit([_chart_to_dict(c) for c in charts], fmt):
        from helm_composer.output.tables import chart_summary_table
        console.print(chart_summary_table(charts, mode))


def output_kinds(rules: tuple[KindRule, ...], fmt: str) -> None:
    data = [
        {
            "rule": rule.name,
            "priority": rule.priority,
            "kinds": sorted(rule.kinds),
            "api_groups": sorted(rule.api_groups) if rule.api_groups is not None else None,
        }
        for rule in rules
    ]
    if not _emit(data, fmt):
        from helm_composer.output.tables import kinds_table
        console.print(kinds_table(rules))
