"""Module scaffold: turn a generated chart into a helm_lib based module layout."""

from __future__ import annotations

import logging

from helm_composer.config.settings import GeneratorOptions, settings
from helm_composer.core.schema import openapi_schema
from helm_composer.core.template_model import prepend_comment
from helm_composer.models.chart import ChartDependency, ExternalFile, GeneratedChart
from helm_composer.utils.yaml_render import dump_yaml

logger = logging.getLogger(__name__)

HELM_LIB = "helm_lib"

TEMPLATE_HINT = (
    "Module chart: prefer helm_lib helpers.\n"
    '{{ include "helm_lib_module_labels" . }} for labels\n'
    '{{ include "helm_lib_module_image" (list . "imageName") }} for images'
)

INTERNAL_VALUES_SCHEMA = {
    "type": "object",
    "additionalProperties": True,
    "properties": {"internal": {"type": "object"}},
}


def apply_module_scaffold(chart: GeneratedChart, options: GeneratorOptions) -> GeneratedChart:
    if not any(d.name == HELM_LIB for d in chart.dependencies):
        chart.metadata.dependencies.append(ChartDependency(
            name=HELM_LIB,
            version=settings.helm_lib_version,
            repository=settings.helm_lib_repository,
        ))

    # Template comments are stripped before the text inside them is parsed,
    # so the include examples never execute.
    chart.templates = {
        path: content if HELM_LIB in content else prepend_comment(content, TEMPLATE_HINT)
        for path, content in chart.templates.items()
    }

    chart.external_files.extend([
        ExternalFile("openapi/config-values.yaml", dump_yaml(openapi_schema(chart.values))),
        ExternalFile("openapi/values.yaml", dump_yaml(INTERNAL_VALUES_SCHEMA)),
        ExternalFile("images/README.md", f"# Images for {chart.name}\n\nPlace Dockerfile directories here.\n"),
        ExternalFile("hooks/README.md", f"# Hooks for {chart.name}\n\nPlace hook scripts here.\n"),
    ])
    logger.debug("Applied module scaffold to %s (chart version %s)", chart.name, options.chart_version)
    return chart
