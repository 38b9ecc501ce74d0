"""Name-reference detectors: backends, scale targets, roles, config and mounts."""

from __future__ import annotations

from typing import Any, Iterable

from helm_composer.core.detectors.base import Detector, ResourceIndex
from helm_composer.models import RelationshipType
from helm_composer.models.graph import Relationship
from helm_composer.models.resource import WORKLOAD_KINDS, KubeObject


def pod_spec(obj: KubeObject) -> dict[str, Any]:
    if obj.kind == "Pod":
        return obj.spec
    if obj.kind == "CronJob":
        return obj.get("spec", "jobTemplate", "spec", "template", "spec", default={})
    return obj.get("spec", "template", "spec", default={})


def ingress_backends(obj: KubeObject) -> Iterable[tuple[str, str]]:
    """(service name, field) for networking.k8s.io/v1 and legacy Ingress backends."""
    spec = obj.spec
    default = spec.get("defaultBackend") or spec.get("backend") or {}
    name = (default.get("service") or {}).get("name") or default.get("serviceName")
    if name:
        yield name, "spec.defaultBackend"
    for i, rule in enumerate(spec.get("rules") or []):
        for j, path in enumerate((rule.get("http") or {}).get("paths") or []):
            backend = path.get("backend") or {}
            name = (backend.get("service") or {}).get("name") or backend.get("serviceName")
            if name:
                yield name, f"spec.rules[{i}].http.paths[{j}].backend"


class BackendReferenceDetector(Detector):
    """Ingress and HTTPRoute -> Service via named backends."""

    name = "backend-reference"
    priority = 90
    rel_type = RelationshipType.BACKEND_REFERENCE

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for ingress in index.of_kind("Ingress"):
            for name, via in ingress_backends(ingress.original):
                target = index.find("Service", name, ingress.ref.namespace)
                if target:
                    yield self.edge(ingress.ref, target, via)

        for route in index.of_kind("HTTPRoute", "GRPCRoute"):
            for i, rule in enumerate(route.original.spec.get("rules") or []):
                for j, ref in enumerate(rule.get("backendRefs") or []):
                    if ref.get("kind", "Service") != "Service":
                        continue
                    namespace = ref.get("namespace") or route.ref.namespace
                    target = index.find("Service", ref.get("name"), namespace)
                    if target:
                        yield self.edge(route.ref, target, f"spec.rules[{i}].backendRefs[{j}]")


class ScaleTargetDetector(Detector):
    """HPA and KEDA ScaledObject -> the workload named in scaleTargetRef."""

    name = "scale-target"
    priority = 85
    rel_type = RelationshipType.SCALE_TARGET

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for scaler in index.of_kind("HorizontalPodAutoscaler", "ScaledObject"):
            ref = scaler.original.spec.get("scaleTargetRef") or {}
            kind = ref.get("kind") or "Deployment"
            target = index.find(kind, ref.get("name"), scaler.ref.namespace)
            if target:
                yield self.edge(scaler.ref, target, "spec.scaleTargetRef")


class RoleReferenceDetector(Detector):
    name = "role-reference"
    priority = 70
    rel_type = RelationshipType.ROLE_REFERENCE

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for binding in index.of_kind("RoleBinding", "ClusterRoleBinding"):
            role_ref = binding.original.raw.get("roleRef") or {}
            kind = role_ref.get("kind") or ("ClusterRole" if binding.kind == "ClusterRoleBinding" else "Role")
            target = index.find(kind, role_ref.get("name"), binding.ref.namespace)
            if target:
                yield self.edge(binding.ref, target, "roleRef")


class ConfigReferenceDetector(Detector):
    """Workload -> ConfigMap/Secret, from dependencies recorded during processing."""

    name = "config-reference"
    priority = 60
    rel_type = RelationshipType.CONFIG_REFERENCE

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for resource in index.resources:
            for dep in sorted(resource.dependencies):
                target = index.find(dep.kind, dep.name, dep.namespace or resource.ref.namespace)
                if target:
                    yield self.edge(resource.ref, target, "dependencies")


class VolumeDetector(Detector):
    """Workload -> PersistentVolumeClaim it mounts."""

    name = "volume-reference"
    priority = 55
    rel_type = RelationshipType.VOLUME_MOUNT

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for workload in index.of_kind(*WORKLOAD_KINDS):
            for i, volume in enumerate(pod_spec(workload.original).get("volumes") or []):
                claim = (volume.get("persistentVolumeClaim") or {}).get("claimName")
                target = index.find("PersistentVolumeClaim", claim, workload.ref.namespace)
                if target:
                    yield self.edge(workload.ref, target, f"volumes[{i}]")


class StatefulSetServiceDetector(Detector):
    name = "statefulset-service"
    priority = 54
    rel_type = RelationshipType.SERVICE_NAME

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for sts in index.of_kind("StatefulSet"):
            target = index.find("Service", sts.original.spec.get("serviceName"), sts.ref.namespace)
            if target:
                yield self.edge(sts.ref, target, "spec.serviceName")


class ServiceAccountDetector(Detector):
    """Workloads and RoleBinding subjects -> ServiceAccount."""

    name = "service-account"
    priority = 50
    rel_type = RelationshipType.SERVICE_ACCOUNT

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for workload in index.of_kind(*WORKLOAD_KINDS):
            spec = pod_spec(workload.original)
            name = spec.get("serviceAccountName") or spec.get("serviceAccount")
            target = index.find("ServiceAccount", name, workload.ref.namespace)
            if target:
                yield self.edge(workload.ref, target, "serviceAccountName")

        for binding in index.of_kind("RoleBinding", "ClusterRoleBinding"):
            for i, subject in enumerate(binding.original.raw.get("subjects") or []):
                if subject.get("kind") != "ServiceAccount":
                    continue
                namespace = subject.get("namespace") or binding.ref.namespace
                target = index.find("ServiceAccount", subject.get("name"), namespace)
                if target:
                    yield self.edge(binding.ref, target, f"subjects[{i}]")


class ImagePullSecretDetector(Detector):
    name = "image-pull-secret"
    priority = 45
    rel_type = RelationshipType.IMAGE_PULL_SECRET

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for resource in index.resources:
            if resource.kind in WORKLOAD_KINDS:
                secrets = pod_spec(resource.original).get("imagePullSecrets") or []
            elif resource.kind == "ServiceAccount":
                secrets = resource.original.raw.get("imagePullSecrets") or []
            else:
                continue
            for secret in secrets:
                target = index.find("Secret", secret.get("name"), resource.ref.namespace)
                if target:
                    yield self.edge(resource.ref, target, "imagePullSecrets")


class IngressTLSDetector(Detector):
    name = "ingress-tls"
    priority = 42
    rel_type = RelationshipType.TLS_SECRET

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for ingress in index.of_kind("Ingress"):
            for i, tls in enumerate(ingress.original.spec.get("tls") or []):
                target = index.find("Secret", tls.get("secretName"), ingress.ref.namespace)
                if target:
                    yield self.edge(ingress.ref, target, f"spec.tls[{i}]")


DEPENDS_ON_ANNOTATION = "helm-composer/depends-on"

# Annotation -> issuer kind it names.
ISSUER_ANNOTATIONS = {
    "cert-manager.io/cluster-issuer": "ClusterIssuer",
    "cert-manager.io/issuer": "Issuer",
}


class AnnotationDetector(Detector):
    """Edges declared in annotations: cert-manager issuers and explicit depends-on lists.

    ``helm-composer/depends-on`` takes a comma-separated list of ``Kind/name``
    or bare names; a bare name matches any kind in the same namespace.
    """

    name = "annotation"
    priority = 70
    rel_type = RelationshipType.ANNOTATION_REFERENCE

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for resource in index.resources:
            annotations = resource.original.annotations
            namespace = resource.ref.namespace
            for key, kind in ISSUER_ANNOTATIONS.items():
                target = index.find(kind, annotations.get(key), namespace)
                if target:
                    yield self.edge(resource.ref, target, f"metadata.annotations[{key}]", detail=kind)

            for entry in (annotations.get(DEPENDS_ON_ANNOTATION) or "").split(","):
                entry = entry.strip()
                if not entry:
                    continue
                via = f"metadata.annotations[{DEPENDS_ON_ANNOTATION}]"
                if "/" in entry:
                    kind, _, name = entry.partition("/")
                    targets = [index.find(kind.strip(), name.strip(), namespace)]
                else:
                    targets = [
                        r.ref for r in index.resources
                        if r.name == entry and r.ref.namespace == namespace and r.ref != resource.ref
                    ]
                for target in targets:
                    if target and target != resource.ref:
                        yield self.edge(resource.ref, target, via, detail=entry)
