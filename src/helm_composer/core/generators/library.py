"""Library mode: one library chart of per-kind named templates plus thin wrappers."""

from __future__ import annotations

import logging

from helm_composer.config.settings import GeneratorOptions
from helm_composer.core.errors import GenerationError
from helm_composer.core.generators.base import (
    ChartGenerator,
    add_template,
    chart_metadata,
    checksum_files,
    global_values,
    service_values,
    subchart_name,
)
from helm_composer.core.helm_templates import RESERVED_DEFINES, generate_helpers, generate_library_notes, generate_notes
from helm_composer.core.template_model import library_define, library_include
from helm_composer.models import OutputMode
from helm_composer.models.chart import ChartDependency, GeneratedChart
from helm_composer.models.graph import ResourceGraph
from helm_composer.models.resource import ResourceRef
from helm_composer.utils.naming import dns_label

logger = logging.getLogger(__name__)


def define_names(graph: ResourceGraph) -> tuple[dict[str, str], dict[ResourceRef, str]]:
    """Assign each resource the library template it renders through.

    Resources sharing a template category share one define. A category
    whose bodies differ (a custom kind served under two API groups) gets a
    group-qualified define for every variant after the first. Categories
    named like a helper (a custom kind ``Image`` against ``<library>.image``)
    are always qualified.
    """
    bodies: dict[str, str] = {}
    names: dict[ResourceRef, str] = {}
    for r in graph.resources:
        name = r.template_name
        if name in RESERVED_DEFINES or (name in bodies and bodies[name] != r.template_body):
            name = f"{r.template_name}.{dns_label(r.ref.api_version)}"
            if name in bodies and bodies[name] != r.template_body:
                raise GenerationError(f"conflicting library templates for {r.ref}")
        bodies.setdefault(name, r.template_body)
        names[r.ref] = name
    return bodies, names


class LibraryGenerator(ChartGenerator):
    mode = OutputMode.LIBRARY

    def generate(self, graph: ResourceGraph, options: GeneratorOptions) -> list[GeneratedChart]:
        library = dns_label(options.library_name)
        bodies, names = define_names(graph)

        library_chart = GeneratedChart(
            name=library,
            path=library,
            metadata=chart_metadata(
                library,
                options,
                chart_type="library",
                description=f"Shared named templates for {options.chart_name}",
            ),
            values_header="# Library charts do not have values.yaml",
            helpers=generate_helpers(library),
            notes=generate_library_notes(library),
            templates={
                f"templates/_{name}.tpl": library_define(name, body, library)
                for name, body in sorted(bodies.items())
            },
        )
        logger.debug("Library chart %s defines %d kind template(s)", library, len(bodies))

        charts = [library_chart]
        for group in graph.groups:
            name = subchart_name(group)
            if name == library:
                raise GenerationError(f"service {group.name} clashes with the library chart name")
            metadata = chart_metadata(
                name,
                options,
                description=f"The {group.name} service, rendered through the {library} library chart",
            )
            metadata.dependencies.append(ChartDependency(
                name=library,
                version=options.chart_version,
                repository=f"file://../{library}",
            ))
            templates: dict[str, str] = {}
            for r in group.resources:
                include = library_include(r, library, names[r.ref], checksum_files(r, group.resources))
                add_template(templates, r.template_path, include, str(r.ref))
            charts.append(GeneratedChart(
                name=name,
                path=name,
                metadata=metadata,
                values={"global": global_values(options.namespace), "services": {group.name: service_values(group)}},
                values_header=f"# Default values for {name}.",
                helpers=generate_helpers(name, include_blocks=False),
                notes=generate_notes(name, [group.name]),
                templates=dict(sorted(templates.items())),
            ))
        return charts
