"""Tests for kind rules and the processor registry."""

from __future__ import annotations

import pytest

from conftest import (
    make_configmap,
    make_container,
    make_cronjob,
    make_custom_resource,
    make_deployment,
    make_hpa,
    make_role_binding,
    make_secret,
    make_service,
    make_statefulset,
    obj,
    objs,
)
from helm_composer.core.errors import ProcessingError
from helm_composer.core.processors import ProcessorRegistry
from helm_composer.core.processors.auxiliary import ConfigMapRule, GrafanaDashboardRule
from helm_composer.core.processors.generic import GenericRule
from helm_composer.core.processors.registry import skip_reason
from helm_composer.core.processors.workloads import split_image
from helm_composer.models.resource import ResourceRef


class TestSplitImage:
    @pytest.mark.parametrize(
        "image, expected",
        [
            ("nginx", {"repository": "nginx", "tag": "latest"}),
            ("nginx:1.25", {"repository": "nginx", "tag": "1.25"}),
            ("registry:5000/team/app", {"repository": "registry:5000/team/app", "tag": "latest"}),
            ("registry:5000/team/app:v2", {"repository": "registry:5000/team/app", "tag": "v2"}),
            ("nginx@sha256:abc123", {"repository": "nginx", "digest": "sha256:abc123"}),
        ],
    )
    def test_split(self, image: str, expected: dict) -> None:
        assert split_image(image) == expected


class TestWorkloadRules:
    def test_deployment_values(self, registry, ctx) -> None:
        manifest = make_deployment(
            "webapp",
            containers=[make_container(env_from_configmaps=["webapp-config"])],
            serviceAccountName="webapp",
        )
        result = registry.process(obj(manifest), ctx)

        assert result.service_name == "webapp"
        assert result.values_path == ("services", "webapp", "deployment")
        assert result.template_path == "templates/deployment-webapp.yaml"
        assert result.template_name == "deployment"
        assert result.values["enabled"] is True
        assert result.values["replicas"] == 3
        assert result.values["serviceAccountName"] == "webapp"
        container = result.values["containers"][0]
        assert container["image"] == {"repository": "nginx", "tag": "1.25"}
        assert container["ports"] == [{"containerPort": 8080, "name": "http"}]
        assert ResourceRef.of("ConfigMap", "webapp-config", "default") in result.dependencies

    def test_replicas_default_and_zero(self, registry, ctx) -> None:
        assert registry.process(obj(make_deployment(replicas=None)), ctx).values["replicas"] == 1
        assert registry.process(obj(make_deployment(replicas=0)), ctx).values["replicas"] == 0

    def test_controller_pod_labels_are_dropped(self, registry, ctx) -> None:
        manifest = make_deployment(pod_labels={"app": "webapp", "pod-template-hash": "abc"})
        result = registry.process(obj(manifest), ctx)
        assert result.values["podLabels"] == {"app": "webapp"}

    def test_secret_and_volume_dependencies(self, registry, ctx) -> None:
        manifest = make_deployment(
            containers=[make_container(env=[
                {"name": "TOKEN", "valueFrom": {"secretKeyRef": {"name": "api-token", "key": "t"}}},
            ])],
            volumes=[
                {"name": "cfg", "configMap": {"name": "files"}},
                {"name": "all", "projected": {"sources": [{"secret": {"name": "certs"}}]}},
            ],
        )
        deps = registry.process(obj(manifest), ctx).dependencies
        assert deps == {
            ResourceRef.of("Secret", "api-token", "default"),
            ResourceRef.of("ConfigMap", "files", "default"),
            ResourceRef.of("Secret", "certs", "default"),
        }

    def test_deployment_without_selector_fails(self, registry, ctx) -> None:
        manifest = make_deployment()
        del manifest["spec"]["selector"]
        with pytest.raises(ProcessingError) as exc:
            registry.process(obj(manifest), ctx)
        assert "Deployment/default/webapp" in str(exc.value)

    def test_container_without_image_fails(self, registry, ctx) -> None:
        manifest = make_deployment(containers=[{"name": "app"}])
        with pytest.raises(ProcessingError, match="has no image"):
            registry.process(obj(manifest), ctx)

    def test_statefulset_keeps_claim_templates(self, registry, ctx) -> None:
        result = registry.process(obj(make_statefulset()), ctx)
        assert result.values_path == ("services", "db", "statefulSet")
        assert result.values["serviceName"] == "db"
        assert result.values["volumeClaimTemplates"][0]["metadata"] == {"name": "data"}

    def test_cronjob(self, registry, ctx) -> None:
        result = registry.process(obj(make_cronjob()), ctx)
        assert result.values["schedule"] == "0 3 * * *"
        assert result.values["jobSpec"] == {"backoffLimit": 2}
        assert result.values["restartPolicy"] == "OnFailure"

    def test_cronjob_requires_schedule(self, registry, ctx) -> None:
        with pytest.raises(ProcessingError, match="schedule"):
            registry.process(obj(make_cronjob(schedule=None)), ctx)


class TestAuxiliaryRules:
    def test_service_drops_assigned_fields(self, registry, ctx) -> None:
        manifest = make_service(clusterIP="10.0.0.12", clusterIPs=["10.0.0.12"])
        manifest["spec"]["ports"][0]["nodePort"] = 30080
        result = registry.process(obj(manifest), ctx)
        assert "clusterIP" not in result.values
        assert "clusterIPs" not in result.values
        assert result.values["type"] == "ClusterIP"
        assert "nodePort" not in result.values["ports"][0]

    def test_headless_service_stays_headless(self, registry, ctx) -> None:
        result = registry.process(obj(make_service("db-headless", clusterIP="None")), ctx)
        assert result.values["clusterIP"] == "None"
        assert result.service_name == "db"
        assert result.values_path == ("services", "db", "serviceDbHeadless")

    def test_configmaps_always_nest_by_name(self, registry, ctx) -> None:
        first = registry.process(obj(make_configmap("webapp-config")), ctx)
        second = registry.process(obj(make_configmap("webapp-env", data={"A": "1"})), ctx)
        assert first.values_path == ("services", "webapp", "configMaps", "webapp-config")
        assert second.values_path == ("services", "webapp", "configMaps", "webapp-env")
        assert first.values == {"enabled": True, "data": {"LOG_LEVEL": "info"}}

    def test_secret_defaults_to_opaque(self, registry, ctx) -> None:
        result = registry.process(obj(make_secret()), ctx)
        assert result.values_path == ("services", "webapp", "secrets", "webapp-secret")
        assert result.values["type"] == "Opaque"
        assert result.values["data"] == {"password": "c2VjcmV0"}

    def test_hpa_key(self, registry, ctx) -> None:
        result = registry.process(obj(make_hpa()), ctx)
        assert result.values_path == ("services", "webapp", "hpa")
        assert result.values["maxReplicas"] == 5

    def test_role_binding_requires_role_ref(self, registry, ctx) -> None:
        manifest = make_role_binding()
        manifest["roleRef"] = {}
        with pytest.raises(ProcessingError, match="roleRef"):
            registry.process(obj(manifest), ctx)

    def test_annotations_reach_the_template(self, registry, ctx) -> None:
        manifest = make_deployment(annotations={"helm.sh/hook": "pre-install"})
        result = registry.process(obj(manifest), ctx)
        assert '"helm.sh/hook" "pre-install"' in result.template_content
        assert "$annotations" in result.template_body


class TestDashboardSpecialization:
    def test_labelled_configmap_is_reclassified(self, registry, ctx) -> None:
        manifest = make_configmap("grafana-dashboard", labels={"grafana_dashboard": "1"})
        result = registry.process(obj(manifest), ctx)
        assert result.template_name == "grafanadashboard"
        assert result.values_path[2] == "dashboards"
        assert [type(r) for r in registry.rules_for(obj(manifest))][:2] == [GrafanaDashboardRule, ConfigMapRule]

    def test_plain_configmap_falls_through(self, registry, ctx) -> None:
        result = registry.process(obj(make_configmap("grafana-dashboard")), ctx)
        assert result.template_name == "configmap"


class TestGenericRule:
    def test_custom_resource(self, registry, ctx) -> None:
        result = registry.process(obj(make_custom_resource()), ctx)
        assert result.template_path == "templates/certificate-webapp-cert.yaml"
        assert result.values_path == ("services", "webapp", "certificateWebappCert")
        assert result.values["enabled"] is True
        assert result.values["spec"]["secretName"] == "webapp-tls"

    def test_spec_enabled_is_honoured(self, registry, ctx) -> None:
        manifest = make_custom_resource(spec={"enabled": False, "size": 3})
        result = registry.process(obj(manifest), ctx)
        assert result.values["enabled"] is False

    @pytest.mark.parametrize("raw, expected", [("false", False), ("Off", False), ("yes", True), ("1", True)])
    def test_string_spec_enabled_is_coerced(self, registry, ctx, raw: str, expected: bool) -> None:
        result = registry.process(obj(make_custom_resource(spec={"enabled": raw})), ctx)
        assert result.values["enabled"] is expected

    def test_unreadable_spec_enabled_is_ignored(self, registry, ctx) -> None:
        result = registry.process(obj(make_custom_resource(spec={"enabled": "sometimes"})), ctx)
        assert result.values["enabled"] is True
        assert result.values["spec"]["enabled"] == "sometimes"

    def test_values_path_uses_camel_kind(self, ctx) -> None:
        manifest = make_custom_resource("webapp", kind="ScaledObject", api_version="keda.sh/v1alpha1")
        result = GenericRule().process(obj(manifest), ctx)
        assert result.values_path == ("services", "webapp", "scaledObject")
        assert result.template_path == "templates/scaledobject-webapp.yaml"


class TestRegistry:
    def test_priority_order(self, registry) -> None:
        priorities = [r.priority for r in registry.rules]
        assert priorities == sorted(priorities, reverse=True)
        assert isinstance(registry.rules[-1], GenericRule)

    @pytest.mark.parametrize(
        "manifest, reason",
        [
            ({"apiVersion": "v1", "kind": "Event", "metadata": {"name": "e"}}, "runtime"),
            (make_secret("tok", secret_type="kubernetes.io/service-account-token"), "secret type"),
            (make_configmap("kube-root-ca.crt"), "CA bundle"),
        ],
    )
    def test_skipped_objects(self, registry, ctx, manifest: dict, reason: str) -> None:
        assert reason in skip_reason(obj(manifest))
        assert registry.process(obj(manifest), ctx) is None

    def test_owned_objects_are_skipped(self, registry, ctx) -> None:
        manifest = {
            "apiVersion": "apps/v1",
            "kind": "ReplicaSet",
            "metadata": {
                "name": "webapp-abc",
                "ownerReferences": [{"kind": "Deployment", "name": "webapp", "controller": True}],
            },
        }
        assert registry.process(obj(manifest), ctx) is None

    def test_rule_declining_falls_through(self, ctx) -> None:
        reg = ProcessorRegistry([GrafanaDashboardRule(), ConfigMapRule()])
        assert reg.process(obj(make_configmap()), ctx).template_name == "configmap"

    def test_unmatched_kind_without_fallback(self, ctx) -> None:
        reg = ProcessorRegistry([ConfigMapRule()])
        assert reg.process(obj(make_service()), ctx) is None

    def test_process_all_keeps_input_order(self, registry, ctx) -> None:
        manifests = [make_configmap(f"cm{i}") for i in range(20)]
        serial = registry.process_all(objs(*manifests), ctx, workers=1)
        parallel = registry.process_all(objs(*manifests), ctx, workers=8)
        assert [r.name for r in parallel] == [r.name for r in serial] == [f"cm{i}" for i in range(20)]

    def test_same_name_in_two_namespaces_is_split(self, registry, ctx) -> None:
        manifests = [make_deployment("web", "staging"), make_deployment("web", "prod"), make_service("web", "prod")]
        staging, prod, service = registry.process_all(objs(*manifests), ctx)
        assert staging.template_path == "templates/deployment-web_staging.yaml"
        assert prod.template_path == "templates/deployment-web_prod.yaml"
        assert staging.values_path == ("services", "web", "deployment_staging")
        assert prod.values_path == ("services", "web", "deployment_prod")
        assert (staging.values["namespace"], prod.values["namespace"]) == ("staging", "prod")
        assert "$svc.deployment_prod" in prod.template_content
        assert service.values_path == ("services", "web", "service")
        assert "namespace" not in service.values

    def test_same_namespace_is_left_alone(self, registry, ctx) -> None:
        manifests = [make_deployment("web", "prod"), make_configmap("web-config", "prod")]
        results = registry.process_all(objs(*manifests), ctx)
        assert [r.template_path for r in results] == [
            "templates/deployment-web.yaml",
            "templates/configmap-web-config.yaml",
        ]

    def test_missing_name_fails(self, registry, ctx) -> None:
        manifest = make_configmap()
        del manifest["metadata"]["name"]
        with pytest.raises(ProcessingError, match="metadata.name"):
            registry.process(obj(manifest), ctx)
