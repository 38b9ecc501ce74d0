"""Shared fixtures and manifest factories for helm-composer tests.

Factories return plain manifest dicts (as parsed from YAML); wrap them
with ``obj()`` to get a KubeObject.
"""

from __future__ import annotations

from typing import Any

import pytest

from helm_composer.config.settings import GeneratorOptions
from helm_composer.core.analyzer import DependencyAnalyzer
from helm_composer.core.generators import default_generator_registry
from helm_composer.core.pipeline import Pipeline
from helm_composer.core.processors import ProcessContext, default_registry
from helm_composer.models.resource import KubeObject

# ---------------------------------------------------------------------------
# Manifest factory helpers
# ---------------------------------------------------------------------------


def _metadata(name: str, namespace: str, labels: dict[str, str] | None, annotations: dict[str, str] | None) -> dict:
    meta: dict[str, Any] = {"name": name}
    if namespace:
        meta["namespace"] = namespace
    if labels:
        meta["labels"] = dict(labels)
    if annotations:
        meta["annotations"] = dict(annotations)
    return meta


def make_container(
    name: str = "app",
    image: str = "nginx:1.25",
    port: int | None = 8080,
    env_from_configmaps: list[str] | None = None,
    env_from_secrets: list[str] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    container: dict[str, Any] = {"name": name, "image": image}
    if port is not None:
        container["ports"] = [{"containerPort": port, "name": "http"}]
    env_from = [{"configMapRef": {"name": cm}} for cm in env_from_configmaps or []]
    env_from += [{"secretRef": {"name": s}} for s in env_from_secrets or []]
    if env_from:
        container["envFrom"] = env_from
    container.update(extra)
    return container


def make_pod_template(labels: dict[str, str], containers: list[dict] | None = None, **spec: Any) -> dict:
    pod_spec: dict[str, Any] = {"containers": containers or [make_container()]}
    pod_spec.update(spec)
    return {"metadata": {"labels": dict(labels)}, "spec": pod_spec}


def make_deployment(
    name: str = "webapp",
    namespace: str = "default",
    replicas: int | None = 3,
    labels: dict[str, str] | None = None,
    pod_labels: dict[str, str] | None = None,
    containers: list[dict] | None = None,
    annotations: dict[str, str] | None = None,
    **pod_spec: Any,
) -> dict[str, Any]:
    labels = {"app.kubernetes.io/name": name} if labels is None else labels
    pod_labels = pod_labels or {"app": name}
    spec: dict[str, Any] = {
        "selector": {"matchLabels": dict(pod_labels)},
        "template": make_pod_template(pod_labels, containers, **pod_spec),
    }
    if replicas is not None:
        spec["replicas"] = replicas
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": _metadata(name, namespace, labels, annotations),
        "spec": spec,
    }


def make_statefulset(
    name: str = "db",
    namespace: str = "default",
    service_name: str = "db",
    replicas: int = 1,
    pod_labels: dict[str, str] | None = None,
) -> dict[str, Any]:
    pod_labels = pod_labels or {"app": name}
    return {
        "apiVersion": "apps/v1",
        "kind": "StatefulSet",
        "metadata": _metadata(name, namespace, {"app.kubernetes.io/name": name}, None),
        "spec": {
            "serviceName": service_name,
            "replicas": replicas,
            "selector": {"matchLabels": dict(pod_labels)},
            "template": make_pod_template(pod_labels, [make_container(image="postgres:16", port=5432)]),
            "volumeClaimTemplates": [{
                "metadata": {"name": "data"},
                "spec": {"accessModes": ["ReadWriteOnce"], "resources": {"requests": {"storage": "1Gi"}}},
            }],
        },
    }


def make_cronjob(name: str = "backup", namespace: str = "default", schedule: str | None = "0 3 * * *") -> dict:
    spec: dict[str, Any] = {
        "jobTemplate": {
            "spec": {
                "backoffLimit": 2,
                "template": make_pod_template({"app": name}, restartPolicy="OnFailure"),
            },
        },
    }
    if schedule is not None:
        spec["schedule"] = schedule
    return {
        "apiVersion": "batch/v1",
        "kind": "CronJob",
        "metadata": _metadata(name, namespace, None, None),
        "spec": spec,
    }


def make_service(
    name: str = "webapp",
    namespace: str = "default",
    selector: dict[str, str] | None = None,
    port: int = 80,
    labels: dict[str, str] | None = None,
    **spec: Any,
) -> dict[str, Any]:
    labels = {"app.kubernetes.io/name": name} if labels is None else labels
    body: dict[str, Any] = {
        "selector": {"app": name} if selector is None else selector,
        "ports": [{"name": "http", "port": port, "targetPort": "http"}],
    }
    body.update(spec)
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": _metadata(name, namespace, labels, None),
        "spec": body,
    }


def make_configmap(
    name: str = "webapp-config",
    namespace: str = "default",
    data: dict[str, str] | None = None,
    labels: dict[str, str] | None = None,
) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": _metadata(name, namespace, labels, None),
        "data": {"LOG_LEVEL": "info"} if data is None else data,
    }


def make_secret(name: str = "webapp-secret", namespace: str = "default", secret_type: str | None = None) -> dict:
    manifest: dict[str, Any] = {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": _metadata(name, namespace, None, None),
        "data": {"password": "c2VjcmV0"},
    }
    if secret_type:
        manifest["type"] = secret_type
    return manifest


def make_ingress(name: str = "webapp", namespace: str = "default", service: str = "webapp", tls: str = "") -> dict:
    spec: dict[str, Any] = {
        "rules": [{
            "host": "example.com",
            "http": {"paths": [{
                "path": "/",
                "pathType": "Prefix",
                "backend": {"service": {"name": service, "port": {"number": 80}}},
            }]},
        }],
    }
    if tls:
        spec["tls"] = [{"hosts": ["example.com"], "secretName": tls}]
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": _metadata(name, namespace, None, None),
        "spec": spec,
    }


def make_hpa(name: str = "webapp", namespace: str = "default", target: str = "webapp", kind: str = "Deployment") -> dict:
    return {
        "apiVersion": "autoscaling/v2",
        "kind": "HorizontalPodAutoscaler",
        "metadata": _metadata(name, namespace, None, None),
        "spec": {
            "scaleTargetRef": {"apiVersion": "apps/v1", "kind": kind, "name": target},
            "minReplicas": 2,
            "maxReplicas": 5,
        },
    }


def make_pdb(name: str = "webapp", namespace: str = "default", match_labels: dict[str, str] | None = None) -> dict:
    return {
        "apiVersion": "policy/v1",
        "kind": "PodDisruptionBudget",
        "metadata": _metadata(name, namespace, None, None),
        "spec": {"minAvailable": 1, "selector": {"matchLabels": match_labels or {"app": name}}},
    }


def make_network_policy(name: str = "webapp", namespace: str = "default", pod_selector: dict | None = None) -> dict:
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "NetworkPolicy",
        "metadata": _metadata(name, namespace, None, None),
        "spec": {
            "podSelector": {"matchLabels": {"app": name}} if pod_selector is None else pod_selector,
            "policyTypes": ["Ingress"],
        },
    }


def make_role(name: str = "webapp", namespace: str = "default") -> dict:
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "Role",
        "metadata": _metadata(name, namespace, None, None),
        "rules": [{"apiGroups": [""], "resources": ["pods"], "verbs": ["get", "list"]}],
    }


def make_role_binding(
    name: str = "webapp",
    namespace: str = "default",
    role: str = "webapp",
    service_account: str = "webapp",
) -> dict:
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "RoleBinding",
        "metadata": _metadata(name, namespace, None, None),
        "roleRef": {"apiGroup": "rbac.authorization.k8s.io", "kind": "Role", "name": role},
        "subjects": [{"kind": "ServiceAccount", "name": service_account, "namespace": namespace}],
    }


def make_service_account(name: str = "webapp", namespace: str = "default") -> dict:
    return {"apiVersion": "v1", "kind": "ServiceAccount", "metadata": _metadata(name, namespace, None, None)}


def make_custom_resource(
    name: str = "webapp-cert",
    namespace: str = "default",
    kind: str = "Certificate",
    api_version: str = "cert-manager.io/v1",
    spec: dict | None = None,
) -> dict:
    return {
        "apiVersion": api_version,
        "kind": kind,
        "metadata": _metadata(name, namespace, {"app": "webapp"}, None),
        "spec": {"secretName": "webapp-tls", "dnsNames": ["example.com"]} if spec is None else spec,
    }


def obj(manifest: dict[str, Any], source_path: str = "test.yaml") -> KubeObject:
    return KubeObject(raw=manifest, source_path=source_path)


def objs(*manifests: dict[str, Any]) -> list[KubeObject]:
    return [obj(m) for m in manifests]


def webapp_stack(name: str = "webapp", namespace: str = "default") -> list[dict[str, Any]]:
    """A Deployment with its Service, ConfigMap and Secret."""
    return [
        make_deployment(
            name,
            namespace,
            containers=[make_container(
                env_from_configmaps=[f"{name}-config"], env_from_secrets=[f"{name}-secret"],
            )],
        ),
        make_service(name, namespace),
        make_configmap(f"{name}-config", namespace),
        make_secret(f"{name}-secret", namespace),
    ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def ctx() -> ProcessContext:
    return ProcessContext(chart_name="myapp")


@pytest.fixture
def analyzer() -> DependencyAnalyzer:
    return DependencyAnalyzer()


@pytest.fixture
def generators():
    return default_generator_registry()


@pytest.fixture
def pipeline() -> Pipeline:
    return Pipeline(workers=1)


@pytest.fixture
def options_factory():
    def _make(mode: str = "universal", **kwargs: Any) -> GeneratorOptions:
        kwargs.setdefault("chart_name", "myapp")
        kwargs.setdefault("chart_version", "0.1.0")
        kwargs.setdefault("app_version", "1.0.0")
        return GeneratorOptions(mode=mode, **kwargs)
    return _make
