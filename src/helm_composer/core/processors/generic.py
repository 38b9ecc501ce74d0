"""Fallback rule for kinds without a dedicated rule, custom resources included."""

from __future__ import annotations

from typing import Any

from helm_composer.core.processors.base import KindRule, clean, header
from helm_composer.models.resource import KubeObject, ResourceRef

IDENTITY_FIELDS = ("apiVersion", "kind", "metadata", "status", "spec")

TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})
FALSE_STRINGS = frozenset({"false", "no", "off", "0"})


def as_bool(value: Any) -> bool | None:
    """Read a switch that may have been written as a string; None when it is not one."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    return None


class GenericRule(KindRule):
    """Keeps ``spec`` verbatim plus any other top-level payload (``data``, ``rules`` ...)."""

    priority = 0

    def matches(self, ref: ResourceRef) -> bool:
        return bool(ref.kind)

    def values(self, obj: KubeObject) -> dict[str, Any]:
        values: dict[str, Any] = {}
        spec = obj.raw.get("spec")
        if isinstance(spec, dict):
            enabled = as_bool(spec.get("enabled"))
            if enabled is not None:
                values["enabled"] = enabled
            values["spec"] = clean(spec)
        elif spec is not None:
            values["spec"] = spec
        fields = clean(obj.raw, drop=IDENTITY_FIELDS)
        if fields:
            values["fields"] = fields
        return values

    def body(self, obj: KubeObject) -> str:
        return "\n".join([
            header(obj.api_version, obj.kind),
            "{{- with $v.spec }}",
            "spec:",
            "  {{- toYaml . | nindent 2 }}",
            "{{- end }}",
            "{{- with $v.fields }}",
            "{{ toYaml . }}",
            "{{- end }}",
        ])
