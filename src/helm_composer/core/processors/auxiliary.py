"""Auxiliary kinds: networking, configuration, scaling, storage and RBAC."""

from __future__ import annotations

from typing import Any

from helm_composer.core.errors import ProcessingError
from helm_composer.core.processors.base import KindRule, clean, header
from helm_composer.models.resource import KubeObject

DASHBOARD_LABEL = "grafana_dashboard"

# Fields the API server fills in; carrying them over pins cluster-specific state.
SERVICE_ASSIGNED_FIELDS = (
    "clusterIP",
    "clusterIPs",
    "ipFamilies",
    "ipFamilyPolicy",
    "healthCheckNodePort",
)


class SpecRule(KindRule):
    """Kinds whose whole ``spec`` is kept verbatim as the values block."""

    drop_fields: tuple[str, ...] = ()
    required_fields: tuple[str, ...] = ()

    def values(self, obj: KubeObject) -> dict[str, Any]:
        spec = obj.raw.get("spec")
        if spec is not None and not isinstance(spec, dict):
            raise ProcessingError(obj.ref, "spec is not a mapping")
        for name in self.required_fields:
            if name not in obj.spec:
                raise ProcessingError(obj.ref, f"spec.{name} is required")
        values = clean(obj.spec, drop=self.drop_fields)
        values.pop("enabled", None)
        return values

    def body(self, obj: KubeObject) -> str:
        return "\n".join([
            header(obj.api_version, obj.kind),
            "spec:",
            '  {{- toYaml (omit $v "enabled" "namespace") | nindent 2 }}',
        ])


class ServiceRule(SpecRule):
    kinds = ("Service",)
    api_groups = ("",)
    values_key = "service"

    def values(self, obj: KubeObject) -> dict[str, Any]:
        values = super().values(obj)
        for name in SERVICE_ASSIGNED_FIELDS:
            values.pop(name, None)
        # Headless services must stay headless
        if obj.spec.get("clusterIP") == "None":
            values["clusterIP"] = "None"
        values.setdefault("type", "ClusterIP")
        ports = []
        for port in values.get("ports") or []:
            port = dict(port)
            if values["type"] == "ClusterIP":
                port.pop("nodePort", None)
            ports.append(port)
        if ports:
            values["ports"] = ports
        return values


class IngressRule(SpecRule):
    kinds = ("Ingress",)
    api_groups = ("networking.k8s.io", "extensions")
    values_key = "ingress"


class NetworkPolicyRule(SpecRule):
    kinds = ("NetworkPolicy",)
    api_groups = ("networking.k8s.io",)
    values_key = "networkPolicy"
    required_fields = ("podSelector",)


class HorizontalPodAutoscalerRule(SpecRule):
    kinds = ("HorizontalPodAutoscaler",)
    api_groups = ("autoscaling",)
    values_key = "hpa"
    required_fields = ("scaleTargetRef", "maxReplicas")


class PodDisruptionBudgetRule(SpecRule):
    kinds = ("PodDisruptionBudget",)
    api_groups = ("policy",)
    values_key = "pdb"


class PersistentVolumeClaimRule(SpecRule):
    kinds = ("PersistentVolumeClaim",)
    api_groups = ("",)
    values_key = "pvc"
    drop_fields = ("volumeName",)


class ObjectRule(KindRule):
    """Kinds without a ``spec``: every top-level field except identity is kept."""

    skip_fields = ("apiVersion", "kind", "metadata", "status")

    def values(self, obj: KubeObject) -> dict[str, Any]:
        return clean(obj.raw, drop=self.skip_fields + ("enabled",))

    def body(self, obj: KubeObject) -> str:
        return "\n".join([
            header(obj.api_version, obj.kind),
            '{{- with (omit $v "enabled" "namespace") }}',
            "{{ toYaml . }}",
            "{{- end }}",
        ])


class ServiceAccountRule(ObjectRule):
    kinds = ("ServiceAccount",)
    api_groups = ("",)
    values_key = "serviceAccount"


class RoleRule(ObjectRule):
    kinds = ("Role",)
    api_groups = ("rbac.authorization.k8s.io",)
    values_key = "role"


class ClusterRoleRule(ObjectRule):
    kinds = ("ClusterRole",)
    api_groups = ("rbac.authorization.k8s.io",)
    values_key = "clusterRole"


class RoleBindingRule(ObjectRule):
    kinds = ("RoleBinding", "ClusterRoleBinding")
    api_groups = ("rbac.authorization.k8s.io",)

    def values(self, obj: KubeObject) -> dict[str, Any]:
        role_ref = obj.raw.get("roleRef")
        if not isinstance(role_ref, dict) or not role_ref.get("name"):
            raise ProcessingError(obj.ref, "roleRef.name is required")
        return super().values(obj)


class ConfigMapRule(KindRule):
    kinds = ("ConfigMap",)
    api_groups = ("",)
    nested_key = "configMaps"

    def values(self, obj: KubeObject) -> dict[str, Any]:
        return clean({k: obj.raw.get(k) for k in ("data", "binaryData", "immutable")})

    def body(self, obj: KubeObject) -> str:
        return "\n".join([
            header(obj.api_version, obj.kind),
            "{{- with $v.data }}",
            "data:",
            "  {{- toYaml . | nindent 2 }}",
            "{{- end }}",
            "{{- with $v.binaryData }}",
            "binaryData:",
            "  {{- toYaml . | nindent 2 }}",
            "{{- end }}",
            '{{- if hasKey $v "immutable" }}',
            "immutable: {{ $v.immutable }}",
            "{{- end }}",
        ])


class GrafanaDashboardRule(ConfigMapRule):
    """ConfigMaps labelled ``grafana_dashboard: "1"`` get their own template category."""

    priority = 110
    nested_key = "dashboards"
    template_name = "grafanadashboard"

    def accepts(self, obj: KubeObject) -> bool:
        return str(obj.labels.get(DASHBOARD_LABEL, "")) == "1"

    def body(self, obj: KubeObject) -> str:
        return "\n".join([
            header(obj.api_version, obj.kind, extra_labels=f'{DASHBOARD_LABEL}: "1"'),
            "data:",
            "  {{- toYaml $v.data | nindent 2 }}",
        ])


class SecretRule(KindRule):
    kinds = ("Secret",)
    api_groups = ("",)
    nested_key = "secrets"

    def values(self, obj: KubeObject) -> dict[str, Any]:
        values = {"type": obj.raw.get("type") or "Opaque"}
        values.update(clean({k: obj.raw.get(k) for k in ("data", "stringData", "immutable")}))
        return values

    def body(self, obj: KubeObject) -> str:
        return "\n".join([
            header(obj.api_version, obj.kind),
            "type: {{ $v.type }}",
            "{{- with $v.data }}",
            "data:",
            "  {{- toYaml . | nindent 2 }}",
            "{{- end }}",
            "{{- with $v.stringData }}",
            "stringData:",
            "  {{- toYaml . | nindent 2 }}",
            "{{- end }}",
            '{{- if hasKey $v "immutable" }}',
            "immutable: {{ $v.immutable }}",
            "{{- end }}",
        ])


AUXILIARY_RULES: tuple[type[KindRule], ...] = (
    ServiceRule,
    IngressRule,
    NetworkPolicyRule,
    HorizontalPodAutoscalerRule,
    PodDisruptionBudgetRule,
    PersistentVolumeClaimRule,
    ServiceAccountRule,
    RoleRule,
    ClusterRoleRule,
    RoleBindingRule,
    ConfigMapRule,
    GrafanaDashboardRule,
    SecretRule,
)
