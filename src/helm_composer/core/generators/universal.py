"""Universal mode: one chart, every service under ``services.<name>``."""

from __future__ import annotations

from helm_composer.config.settings import GeneratorOptions
from helm_composer.core.generators.base import (
    ChartGenerator,
    add_template,
    chart_metadata,
    checksum_files,
    global_values,
    service_values,
)
from helm_composer.core.helm_templates import generate_helpers, generate_notes
from helm_composer.core.template_model import standalone_template
from helm_composer.models import OutputMode
from helm_composer.models.chart import GeneratedChart
from helm_composer.models.graph import ResourceGraph


class UniversalGenerator(ChartGenerator):
    mode = OutputMode.UNIVERSAL

    def generate(self, graph: ResourceGraph, options: GeneratorOptions) -> list[GeneratedChart]:
        helpers = options.helper_prefix
        values = {
            "global": global_values(options.namespace),
            "services": {g.name: service_values(g) for g in graph.groups},
        }
        templates: dict[str, str] = {}
        resources = graph.resources
        for r in resources:
            content = standalone_template(r, helpers, checksums=checksum_files(r, resources))
            add_template(templates, r.template_path, content, str(r.ref))

        return [GeneratedChart(
            name=helpers,
            path=helpers,
            metadata=chart_metadata(helpers, options),
            values=values,
            values_header=(
                f"# Default values for {helpers}.\n"
                "# Each service can be switched off with services.<name>.enabled=false."
            ),
            helpers=generate_helpers(helpers),
            notes=generate_notes(helpers, graph.group_names),
            templates=dict(sorted(templates.items())),
        )]
