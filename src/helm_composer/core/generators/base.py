"""Generator base class, registry and the pieces every strategy shares."""

from __future__ import annotations

import copy
import logging
from typing import Any, Iterable

from helm_composer.config.settings import GeneratorOptions
from helm_composer.core.errors import GenerationError
from helm_composer.core.generators.scaffold import apply_module_scaffold
from helm_composer.core.helm_templates import generate_helmignore
from helm_composer.core.schema import values_json_schema
from helm_composer.models import OutputMode
from helm_composer.models.chart import ChartMetadata, GeneratedChart
from helm_composer.models.graph import ResourceGraph, ResourceGroup
from helm_composer.models.resource import ProcessedResource
from helm_composer.utils.naming import dns_label

logger = logging.getLogger(__name__)

KEYWORDS = ["kubernetes", "helm-composer"]


def global_values(namespace: str = "") -> dict[str, Any]:
    return {"imageRegistry": "", "imagePullSecrets": [], "namespace": namespace}


def chart_metadata(
    name: str,
    options: GeneratorOptions,
    chart_type: str = "application",
    description: str = "",
) -> ChartMetadata:
    return ChartMetadata(
        name=name,
        version=options.chart_version,
        app_version=options.app_version,
        description=description or options.chart_description,
        api_version="v2",
        chart_type=chart_type,
        keywords=list(KEYWORDS),
    )


def set_path(tree: dict[str, Any], path: tuple[str, ...], value: Any, owner: str) -> None:
    """Place ``value`` at ``path``, refusing to overwrite anything already there."""
    node = tree
    for key in path[:-1]:
        child = node.setdefault(key, {})
        if not isinstance(child, dict):
            raise GenerationError(f"values path {'.'.join(path)} of {owner} crosses a non-mapping value")
        node = child
    if path[-1] in node:
        raise GenerationError(f"values path {'.'.join(path)} of {owner} is already taken")
    node[path[-1]] = value


def service_values(group: ResourceGroup) -> dict[str, Any]:
    """The ``services.<name>`` block of one group, without the services prefix."""
    block: dict[str, Any] = {"enabled": True}
    for r in group.resources:
        set_path(block, r.service_path, copy.deepcopy(r.values), str(r.ref))
    return block


CHECKSUM_PREFIXES = {"ConfigMap": "config", "Secret": "secret"}


def checksum_files(resource: ProcessedResource, scope: Iterable[ProcessedResource]) -> dict[str, str]:
    """Pod checksum annotations of ``resource``: ``config-<name>``/``secret-<name>`` -> template file.

    Only ConfigMaps and Secrets rendered by the same chart (``scope``) count.
    """
    by_key = {r.ref.lookup_key: r for r in scope}
    checksums: dict[str, str] = {}
    for dep in sorted(resource.dependencies, key=lambda d: d.lookup_key):
        prefix = CHECKSUM_PREFIXES.get(dep.kind)
        target = by_key.get(dep.lookup_key)
        if prefix and target is not None:
            checksums[f"{prefix}-{dep.name}"] = target.template_path.removeprefix("templates/")
    return checksums


def add_template(templates: dict[str, str], path: str, content: str, owner: str) -> None:
    if path in templates:
        raise GenerationError(f"template {path} of {owner} collides with another resource")
    templates[path] = content


def subchart_name(group: ResourceGroup) -> str:
    return dns_label(group.name)


def check_graph(graph: ResourceGraph) -> None:
    """Reject graphs the strategies cannot turn into consistent charts."""
    if not graph.groups:
        raise GenerationError("resource graph is empty; nothing to generate")
    names: set[str] = set()
    for group in graph.groups:
        if group.name in names:
            raise GenerationError(f"group {group.name} appears twice in the graph")
        names.add(group.name)
        if not group.resources:
            raise GenerationError(f"group {group.name} has no resources")
        for r in group.resources:
            if r.service_name != group.name:
                raise GenerationError(f"{r.ref} has service {r.service_name} but sits in group {group.name}")
    for rel in graph.relationships:
        for ref in (rel.source, rel.target):
            if graph.group_of(ref) is None:
                raise GenerationError(f"relationship {rel.type.value} references {ref}, absent from every group")


def finalize(chart: GeneratedChart, options: GeneratorOptions) -> GeneratedChart:
    chart.helmignore = generate_helmignore()
    if options.include_schema and not chart.is_library:
        chart.values_schema = values_json_schema(chart.values)
    return chart


class ChartGenerator:
    """One packaging strategy."""

    mode: OutputMode

    def generate(self, graph: ResourceGraph, options: GeneratorOptions) -> list[GeneratedChart]:
        raise NotImplementedError


class GeneratorRegistry:
    """Fixed mode -> strategy table, built once at startup."""

    def __init__(self, generators: Iterable[ChartGenerator]):
        self._generators: dict[OutputMode, ChartGenerator] = {}
        for gen in generators:
            self._generators[gen.mode] = gen

    @property
    def modes(self) -> list[OutputMode]:
        return list(self._generators)

    def get(self, mode: OutputMode | str) -> ChartGenerator:
        parsed = OutputMode.parse(mode)
        gen = self._generators.get(parsed)
        if gen is None:
            raise GenerationError(f"no generator registered for mode {parsed.value}")
        return gen

    def generate(self, graph: ResourceGraph, options: GeneratorOptions) -> list[GeneratedChart]:
        options.validate()
        check_graph(graph)
        generator = self.get(options.mode)
        charts = generator.generate(graph, options)
        paths = [c.path for c in charts]
        if len(set(paths)) != len(paths):
            raise GenerationError(f"charts share an output path: {sorted(paths)}")
        if options.module_scaffold:
            charts = [apply_module_scaffold(c, options) for c in charts]
        charts = [finalize(c, options) for c in charts]
        logger.debug("Generated %d chart(s) in %s mode", len(charts), options.mode.value)
        return charts
