"""Umbrella mode: a parent chart with one toggleable subchart per service."""

from __future__ import annotations

import copy

from helm_composer.config.settings import GeneratorOptions
from helm_composer.core.errors import GenerationError
from helm_composer.core.generators.base import ChartGenerator, chart_metadata, global_values, subchart_name
from helm_composer.core.generators.separate import flat_chart
from helm_composer.core.helm_templates import generate_helpers, generate_notes
from helm_composer.models import OutputMode
from helm_composer.models.chart import ChartDependency, GeneratedChart
from helm_composer.models.graph import ResourceGraph


class UmbrellaGenerator(ChartGenerator):
    mode = OutputMode.UMBRELLA

    def generate(self, graph: ResourceGraph, options: GeneratorOptions) -> list[GeneratedChart]:
        parent = options.helper_prefix
        metadata = chart_metadata(parent, options)
        values = {"global": global_values(options.namespace)}
        subcharts: list[GeneratedChart] = []

        for group in graph.groups:
            sub = subchart_name(group)
            chart = flat_chart(group, options, path=f"{parent}/charts/{sub}", guarded=True)
            subcharts.append(chart)
            metadata.dependencies.append(ChartDependency(
                name=sub,
                version=options.chart_version,
                repository=f"file://charts/{sub}",
                condition=f"{sub}.enabled",
            ))
            if sub in values:
                raise GenerationError(f"subchart name {sub} clashes with another top-level values key")
            block = {"enabled": True}
            block.update({k: copy.deepcopy(v) for k, v in chart.values.items() if k not in ("global", "enabled")})
            values[sub] = block

        umbrella = GeneratedChart(
            name=parent,
            path=parent,
            metadata=metadata,
            values=values,
            values_header="# Umbrella chart: override subchart values per service here.",
            helpers=generate_helpers(parent, include_blocks=False),
            notes=generate_notes(parent, [c.name for c in subcharts], subcharts=True),
        )
        return [umbrella] + subcharts
