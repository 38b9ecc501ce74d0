"""Separate mode: one independent chart per service."""

from __future__ import annotations

from helm_composer.config.settings import GeneratorOptions
from helm_composer.core.generators.base import (
    ChartGenerator,
    add_template,
    chart_metadata,
    checksum_files,
    global_values,
    service_values,
    subchart_name,
)
from helm_composer.core.helm_templates import generate_helpers, generate_notes
from helm_composer.core.template_model import guard_enabled, standalone_template
from helm_composer.models import OutputMode
from helm_composer.models.chart import GeneratedChart
from helm_composer.models.graph import ResourceGraph, ResourceGroup

REQUIRES_ANNOTATION = "helm-composer/requires"


def flat_chart(
    group: ResourceGroup,
    options: GeneratorOptions,
    path: str,
    guarded: bool = False,
) -> GeneratedChart:
    """A chart scoped to a single service, values flattened to the top level.

    ``guarded`` wraps every template in ``.Values.enabled`` for use as a subchart.
    """
    name = subchart_name(group)
    values = {"global": global_values(options.namespace)}
    values.update(service_values(group))

    templates: dict[str, str] = {}
    for r in group.resources:
        content = standalone_template(r, name, flattened=True, checksums=checksum_files(r, group.resources))
        if guarded:
            content = guard_enabled(content)
        add_template(templates, r.template_path, content, str(r.ref))

    return GeneratedChart(
        name=name,
        path=path,
        metadata=chart_metadata(
            name,
            options,
            description=f"The {group.name} service, generated from Kubernetes manifests",
        ),
        values=values,
        values_header=f"# Default values for {name}.",
        helpers=generate_helpers(name),
        notes=generate_notes(name, [group.name], chart_dir=path),
        templates=dict(sorted(templates.items())),
    )


class SeparateGenerator(ChartGenerator):
    mode = OutputMode.SEPARATE

    def generate(self, graph: ResourceGraph, options: GeneratorOptions) -> list[GeneratedChart]:
        requires = graph.cross_group_edges()
        charts = []
        for group in graph.groups:
            chart = flat_chart(group, options, path=subchart_name(group))
            deps = [subchart_name(graph.group(name)) for name in requires.get(group.name, [])]
            if deps:
                chart.metadata.annotations[REQUIRES_ANNOTATION] = ",".join(deps)
            charts.append(chart)
        return charts
