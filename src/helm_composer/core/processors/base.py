"""Kind rule base class and shared body fragments."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, replace
from typing import Any

from helm_composer.core.errors import ProcessingError
from helm_composer.core.processors.service_name import infer_service_name
from helm_composer.core.template_model import standalone_template
from helm_composer.models.resource import CLUSTER_SCOPED_KINDS, KubeObject, ProcessedResource, ResourceRef
from helm_composer.utils.naming import dns_label, lower_camel, pascal_case

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessContext:
    """Run-wide settings a rule may need while rendering."""

    chart_name: str

    @property
    def helpers(self) -> str:
        return dns_label(self.chart_name)


NAMESPACE_EXPR = (
    "$v.namespace | default (($root.Values.global | default dict).namespace) | default $root.Release.Namespace"
)


def metadata_block(extra_labels: str = "", namespaced: bool = True) -> str:
    """``metadata:`` of a top-level object, written against the body variables.

    The namespace comes from the resource values, then ``global.namespace``,
    then the release namespace.
    """
    lines = [
        "metadata:",
        "  name: {{ $name }}",
    ]
    if namespaced:
        lines.append(f"  namespace: {{{{ {NAMESPACE_EXPR} }}}}")
    lines += [
        "  labels:",
        '    {{- include "<H>.labels" $root | nindent 4 }}',
        "    app.kubernetes.io/component: {{ $component | quote }}",
    ]
    if extra_labels:
        lines.append(f"    {extra_labels}")
    lines += [
        "  {{- with $annotations }}",
        "  annotations:",
        "    {{- toYaml . | nindent 4 }}",
        "  {{- end }}",
    ]
    return "\n".join(lines)


def header(api_version: str, kind: str, extra_labels: str = "") -> str:
    namespaced = kind not in CLUSTER_SCOPED_KINDS
    return f"\napiVersion: {api_version}\nkind: {kind}\n" + metadata_block(extra_labels, namespaced)


def clean(mapping: dict[str, Any] | None, drop: tuple[str, ...] = ()) -> dict[str, Any]:
    """Deep copy of ``mapping`` without ``drop`` keys or null values."""
    if not mapping:
        return {}
    return {k: copy.deepcopy(v) for k, v in mapping.items() if k not in drop and v is not None}


class KindRule:
    """Turns objects of one or more kinds into ProcessedResources.

    Subclasses set the class attributes and implement ``values`` and ``body``;
    ``process`` returns None to let a lower-priority rule handle the object.
    """

    kinds: tuple[str, ...] = ()
    api_groups: tuple[str, ...] | None = None
    priority: int = 100
    values_key: str = ""
    nested_key: str = ""
    template_name: str = ""

    @property
    def name(self) -> str:
        return type(self).__name__

    def matches(self, ref: ResourceRef) -> bool:
        if ref.kind not in self.kinds:
            return False
        return self.api_groups is None or ref.group in self.api_groups

    def accepts(self, obj: KubeObject) -> bool:
        return True

    def process(self, obj: KubeObject, ctx: ProcessContext) -> ProcessedResource | None:
        if not self.accepts(obj):
            return None
        if not obj.name:
            raise ProcessingError(obj.ref, "metadata.name is required")
        service = infer_service_name(obj)
        if not service:
            raise ProcessingError(obj.ref, "could not infer a service name")
        try:
            values = {"enabled": True}
            values.update(self.values(obj))
            dependencies = frozenset(self.dependencies(obj))
        except ProcessingError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ProcessingError(obj.ref, f"{self.name}: malformed {obj.kind}: {e}") from e

        template_name = self.category(obj)
        body = self.body(obj)
        result = ProcessedResource(
            original=obj,
            service_name=service,
            template_path=f"templates/{template_name}-{obj.name}.yaml",
            template_name=template_name,
            template_body=body,
            template_content="",
            values_path=self.values_path(obj, service),
            values=values,
            dependencies=dependencies,
        )
        result = replace(result, template_content=standalone_template(result, ctx.helpers))
        logger.debug("%s -> %s (service %s, values %s)", obj.ref, self.name, service, result.values_key)
        return result

    def category(self, obj: KubeObject) -> str:
        return self.template_name or obj.kind.lower()

    def values_path(self, obj: KubeObject, service: str) -> tuple[str, ...]:
        if self.nested_key:
            return ("services", service, self.nested_key, obj.name)
        key = self.values_key or lower_camel(obj.kind)
        if obj.name != service:
            key += pascal_case(obj.name)
        return ("services", service, key)

    def values(self, obj: KubeObject) -> dict[str, Any]:
        raise NotImplementedError

    def body(self, obj: KubeObject) -> str:
        raise NotImplementedError

    def dependencies(self, obj: KubeObject) -> set[ResourceRef]:
        return set()
