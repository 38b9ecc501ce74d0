"""Resource identity, generic object accessor and processed-resource models."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any


CLUSTER_SCOPED_KINDS: frozenset[str] = frozenset({
    "ClusterRole",
    "ClusterRoleBinding",
    "IngressClass",
    "CustomResourceDefinition",
    "Namespace",
    "PersistentVolume",
    "Node",
    "StorageClass",
    "PriorityClass",
    "MutatingWebhookConfiguration",
    "ValidatingWebhookConfiguration",
    "ClusterIssuer",
    "APIService",
})

WORKLOAD_KINDS: frozenset[str] = frozenset({
    "Deployment",
    "StatefulSet",
    "DaemonSet",
    "ReplicaSet",
    "Job",
    "CronJob",
    "Pod",
})


def split_api_version(api_version: str) -> tuple[str, str]:
    """Split ``group/version`` into its parts; the core group is empty."""
    group, _, version = (api_version or "").rpartition("/")
    return group, version


@dataclass(frozen=True, order=True)
class ResourceRef:
    """Identity of one Kubernetes object: (group, version, kind, namespace, name)."""

    group: str
    version: str
    kind: str
    namespace: str
    name: str

    @property
    def api_version(self) -> str:
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version

    @property
    def lookup_key(self) -> tuple[str, str, str]:
        """Version-independent key used to resolve references by kind and name."""
        return (self.kind, self.namespace, self.name)

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind}/{self.namespace}/{self.name}"
        return f"{self.kind}/{self.name}"

    @classmethod
    def from_object(cls, obj: dict) -> ResourceRef:
        group, version = split_api_version(obj.get("apiVersion", "") or "")
        kind = obj.get("kind", "") or ""
        metadata = obj.get("metadata") or {}
        namespace = "" if kind in CLUSTER_SCOPED_KINDS else (metadata.get("namespace", "") or "")
        return cls(
            group=group,
            version=version,
            kind=kind,
            namespace=namespace,
            name=metadata.get("name", "") or "",
        )

    @classmethod
    def of(cls, kind: str, name: str, namespace: str = "", api_version: str = "v1") -> ResourceRef:
        group, version = split_api_version(api_version)
        if kind in CLUSTER_SCOPED_KINDS:
            namespace = ""
        return cls(group=group, version=version, kind=kind, namespace=namespace, name=name)


@dataclass(frozen=True, eq=False)
class KubeObject:
    """Read-only accessor over a generic manifest tree."""

    raw: dict[str, Any]
    source_path: str = ""

    @cached_property
    def ref(self) -> ResourceRef:
        return ResourceRef.from_object(self.raw)

    @property
    def kind(self) -> str:
        return self.ref.kind

    @property
    def api_version(self) -> str:
        return self.raw.get("apiVersion", "") or ""

    @property
    def name(self) -> str:
        return self.ref.name

    @property
    def namespace(self) -> str:
        return self.ref.namespace

    @property
    def metadata(self) -> dict[str, Any]:
        return self.raw.get("metadata") or {}

    @property
    def labels(self) -> dict[str, str]:
        return self.metadata.get("labels") or {}

    @property
    def annotations(self) -> dict[str, str]:
        return self.metadata.get("annotations") or {}

    @property
    def spec(self) -> dict[str, Any]:
        spec = self.raw.get("spec")
        return spec if isinstance(spec, dict) else {}

    def get(self, *path: str | int, default: Any = None) -> Any:
        """Nested lookup; string keys index mappings, ints index lists."""
        node: Any = self.raw
        for key in path:
            if isinstance(key, int):
                if not isinstance(node, list) or not -len(node) <= key < len(node):
                    return default
                node = node[key]
            else:
                if not isinstance(node, dict) or key not in node:
                    return default
                node = node[key]
        if node is None:
            return default
        return node

    def describe(self) -> str:
        if self.source_path:
            return f"{self.ref} ({self.source_path})"
        return str(self.ref)


@dataclass(frozen=True, eq=False)
class ProcessedResource:
    """A resource turned into chart-ready form by a kind rule.

    ``values_path`` always starts with ``("services", service_name)``;
    ``template_body`` is the kind body shared by every output strategy and
    ``template_content`` is its standalone (universal) rendition.
    """

    original: KubeObject
    service_name: str
    template_path: str
    template_name: str
    template_body: str
    template_content: str
    values_path: tuple[str, ...]
    values: dict[str, Any] = field(default_factory=dict)
    dependencies: frozenset[ResourceRef] = frozenset()

    @property
    def ref(self) -> ResourceRef:
        return self.original.ref

    @property
    def kind(self) -> str:
        return self.original.kind

    @property
    def name(self) -> str:
        return self.original.name

    @property
    def values_key(self) -> str:
        return ".".join(self.values_path)

    @property
    def service_path(self) -> tuple[str, ...]:
        """Path of this resource's values inside its service block."""
        return self.values_path[2:]
