"""Workload kinds: Deployment, StatefulSet, DaemonSet, Job and CronJob."""

from __future__ import annotations

from typing import Any

from helm_composer.core.errors import ProcessingError
from helm_composer.core.processors.base import KindRule, clean, header
from helm_composer.models.resource import KubeObject, ResourceRef

CONTAINER_FIELDS = (
    "imagePullPolicy",
    "command",
    "args",
    "workingDir",
    "ports",
    "env",
    "envFrom",
    "volumeMounts",
    "resources",
    "livenessProbe",
    "readinessProbe",
    "startupProbe",
    "lifecycle",
    "securityContext",
)

POD_FIELDS = (
    "serviceAccountName",
    "automountServiceAccountToken",
    "imagePullSecrets",
    "restartPolicy",
    "volumes",
    "nodeSelector",
    "affinity",
    "tolerations",
    "topologySpreadConstraints",
    "priorityClassName",
    "terminationGracePeriodSeconds",
)

# Labels the controllers stamp on pods; templating them back breaks selectors.
CONTROLLER_LABELS = frozenset({
    "pod-template-hash",
    "controller-revision-hash",
    "statefulset.kubernetes.io/pod-name",
    "controller-uid",
    "batch.kubernetes.io/controller-uid",
    "job-name",
    "batch.kubernetes.io/job-name",
})

JOB_SPEC_DROP = ("template", "selector", "manualSelector")


def split_image(image: str) -> dict[str, str]:
    """Split an image reference into repository and tag (or digest).

    ``registry:5000/app`` has no tag: a colon before the last slash is a port.
    """
    if "@" in image:
        repository, digest = image.split("@", 1)
        return {"repository": repository, "digest": digest}
    slash = image.rfind("/")
    colon = image.rfind(":")
    if colon > slash:
        return {"repository": image[:colon], "tag": image[colon + 1:]}
    return {"repository": image, "tag": "latest"}


def container_values(container: dict[str, Any], ref: ResourceRef) -> dict[str, Any]:
    if not isinstance(container, dict):
        raise ProcessingError(ref, "container entry is not a mapping")
    name = container.get("name")
    image = container.get("image")
    if not name:
        raise ProcessingError(ref, "container without a name")
    if not image or not isinstance(image, str):
        raise ProcessingError(ref, f"container {name!r} has no image")
    values: dict[str, Any] = {"name": name, "image": split_image(image)}
    values.update(clean({k: container.get(k) for k in CONTAINER_FIELDS}))
    return values


def pod_values(template: dict[str, Any] | None, ref: ResourceRef) -> dict[str, Any]:
    """Values of a pod template: containers plus pod-level fields."""
    if not isinstance(template, dict):
        raise ProcessingError(ref, "pod template is missing")
    spec = template.get("spec")
    if not isinstance(spec, dict):
        raise ProcessingError(ref, "pod template has no spec")
    containers = spec.get("containers")
    if not isinstance(containers, list) or not containers:
        raise ProcessingError(ref, "pod template declares no containers")

    values: dict[str, Any] = {}
    metadata = template.get("metadata") or {}
    pod_labels = {k: v for k, v in (metadata.get("labels") or {}).items() if k not in CONTROLLER_LABELS}
    if pod_labels:
        values["podLabels"] = pod_labels
    if metadata.get("annotations"):
        values["podAnnotations"] = dict(metadata["annotations"])

    values["containers"] = [container_values(c, ref) for c in containers]
    if spec.get("initContainers"):
        values["initContainers"] = [container_values(c, ref) for c in spec["initContainers"]]

    pod = clean({k: spec.get(k) for k in POD_FIELDS})
    if not pod.get("serviceAccountName") and spec.get("serviceAccount"):
        pod["serviceAccountName"] = spec["serviceAccount"]
    if spec.get("securityContext"):
        pod["podSecurityContext"] = clean(spec["securityContext"])
    values.update(pod)
    return values


def pod_references(template: dict[str, Any] | None, namespace: str) -> set[ResourceRef]:
    """ConfigMaps and Secrets a pod template pulls in via env, envFrom or volumes."""
    refs: set[ResourceRef] = set()
    if not isinstance(template, dict):
        return refs
    spec = template.get("spec") or {}

    def add(kind: str, name: str | None) -> None:
        if name:
            refs.add(ResourceRef.of(kind, name, namespace))

    for container in (spec.get("initContainers") or []) + (spec.get("containers") or []):
        for env in container.get("env") or []:
            source = env.get("valueFrom") or {}
            add("ConfigMap", (source.get("configMapKeyRef") or {}).get("name"))
            add("Secret", (source.get("secretKeyRef") or {}).get("name"))
        for env_from in container.get("envFrom") or []:
            add("ConfigMap", (env_from.get("configMapRef") or {}).get("name"))
            add("Secret", (env_from.get("secretRef") or {}).get("name"))

    for volume in spec.get("volumes") or []:
        add("ConfigMap", (volume.get("configMap") or {}).get("name"))
        add("Secret", (volume.get("secret") or {}).get("secretName"))
        for source in (volume.get("projected") or {}).get("sources") or []:
            add("ConfigMap", (source.get("configMap") or {}).get("name"))
            add("Secret", (source.get("secret") or {}).get("name"))
    return refs


def pod_template_block(indent: int) -> str:
    """``template:`` block rendered from pod values, at ``indent`` spaces.

    Pod annotations carry a ``checksum/<key>`` digest of every template in
    ``$checksums`` so a config change rolls the pods.
    """
    pad = " " * indent
    lines = [
        "template:",
        "  metadata:",
        "    {{- with $v.podLabels }}",
        "    labels:",
        f"      {{{{- toYaml . | nindent {indent + 6} }}}}",
        "    {{- end }}",
        "    {{- if or $v.podAnnotations $checksums }}",
        "    annotations:",
        "      {{- range $key, $file := $checksums }}",
        '      checksum/{{ $key }}: {{ include (print $root.Template.BasePath "/" $file) $root | sha256sum }}',
        "      {{- end }}",
        "      {{- with $v.podAnnotations }}",
        f"      {{{{- toYaml . | nindent {indent + 6} }}}}",
        "      {{- end }}",
        "    {{- end }}",
        "  spec:",
        f'    {{{{- include "<H>.podSpec" (dict "values" $v "root" $root) | nindent {indent + 4} }}}}',
    ]
    return "\n".join(pad + line for line in lines)


def with_block(key: str, indent: int, expr: str | None = None) -> str:
    """Render ``key`` from ``$v`` only when set."""
    pad = " " * indent
    expr = expr or f"$v.{key}"
    return "\n".join([
        f"{pad}{{{{- with {expr} }}}}",
        f"{pad}{key}:",
        f"{pad}  {{{{- toYaml . | nindent {indent + 2} }}}}",
        f"{pad}{{{{- end }}}}",
    ])


class WorkloadRule(KindRule):
    """Shared extraction for kinds that carry a pod template."""

    api_groups = ("apps",)
    # Top-level spec fields copied into values next to the pod fields
    spec_fields: tuple[str, ...] = ()

    def pod_template(self, obj: KubeObject) -> dict[str, Any] | None:
        return obj.get("spec", "template")

    def values(self, obj: KubeObject) -> dict[str, Any]:
        if "selector" in self.spec_fields and not obj.spec.get("selector"):
            raise ProcessingError(obj.ref, f"{obj.kind} has no spec.selector")
        values: dict[str, Any] = clean({k: obj.spec.get(k) for k in self.spec_fields})
        values.update(pod_values(self.pod_template(obj), obj.ref))
        return values

    def dependencies(self, obj: KubeObject) -> set[ResourceRef]:
        return pod_references(self.pod_template(obj), obj.namespace)


class DeploymentRule(WorkloadRule):
    kinds = ("Deployment",)
    values_key = "deployment"
    spec_fields = ("strategy", "selector", "minReadySeconds", "revisionHistoryLimit")

    def values(self, obj: KubeObject) -> dict[str, Any]:
        replicas = obj.spec.get("replicas")
        values = {"replicas": 1 if replicas is None else replicas}
        values.update(super().values(obj))
        return values

    def body(self, obj: KubeObject) -> str:
        return "\n".join([
            header(obj.api_version, obj.kind),
            "spec:",
            "  replicas: {{ $v.replicas }}",
            with_block("strategy", 2),
            "  {{- with $v.minReadySeconds }}",
            "  minReadySeconds: {{ . }}",
            "  {{- end }}",
            "  {{- if hasKey $v \"revisionHistoryLimit\" }}",
            "  revisionHistoryLimit: {{ $v.revisionHistoryLimit }}",
            "  {{- end }}",
            "  selector:",
            "    {{- toYaml $v.selector | nindent 4 }}",
            pod_template_block(2),
        ])


class StatefulSetRule(WorkloadRule):
    kinds = ("StatefulSet",)
    values_key = "statefulSet"
    spec_fields = (
        "serviceName",
        "podManagementPolicy",
        "updateStrategy",
        "selector",
        "persistentVolumeClaimRetentionPolicy",
        "minReadySeconds",
    )

    def values(self, obj: KubeObject) -> dict[str, Any]:
        replicas = obj.spec.get("replicas")
        values = {"replicas": 1 if replicas is None else replicas}
        values.update(super().values(obj))
        templates = []
        for claim in obj.spec.get("volumeClaimTemplates") or []:
            claim = clean(claim, drop=("status",))
            if isinstance(claim.get("metadata"), dict):
                claim["metadata"] = clean(claim["metadata"], drop=("creationTimestamp",))
            templates.append(claim)
        if templates:
            values["volumeClaimTemplates"] = templates
        return values

    def body(self, obj: KubeObject) -> str:
        return "\n".join([
            header(obj.api_version, obj.kind),
            "spec:",
            "  replicas: {{ $v.replicas }}",
            "  {{- with $v.serviceName }}",
            "  serviceName: {{ . | quote }}",
            "  {{- end }}",
            "  {{- with $v.podManagementPolicy }}",
            "  podManagementPolicy: {{ . }}",
            "  {{- end }}",
            with_block("updateStrategy", 2),
            with_block("persistentVolumeClaimRetentionPolicy", 2),
            "  {{- with $v.minReadySeconds }}",
            "  minReadySeconds: {{ . }}",
            "  {{- end }}",
            "  selector:",
            "    {{- toYaml $v.selector | nindent 4 }}",
            pod_template_block(2),
            with_block("volumeClaimTemplates", 2),
        ])


class DaemonSetRule(WorkloadRule):
    kinds = ("DaemonSet",)
    values_key = "daemonSet"
    spec_fields = ("updateStrategy", "selector", "minReadySeconds", "revisionHistoryLimit")

    def body(self, obj: KubeObject) -> str:
        return "\n".join([
            header(obj.api_version, obj.kind),
            "spec:",
            with_block("updateStrategy", 2),
            "  {{- with $v.minReadySeconds }}",
            "  minReadySeconds: {{ . }}",
            "  {{- end }}",
            "  selector:",
            "    {{- toYaml $v.selector | nindent 4 }}",
            pod_template_block(2),
        ])


class JobRule(WorkloadRule):
    kinds = ("Job",)
    api_groups = ("batch",)
    values_key = "job"

    def values(self, obj: KubeObject) -> dict[str, Any]:
        values = super().values(obj)
        job_spec = clean(obj.spec, drop=JOB_SPEC_DROP)
        if job_spec:
            values["jobSpec"] = job_spec
        return values

    def body(self, obj: KubeObject) -> str:
        return "\n".join([
            header(obj.api_version, obj.kind),
            "spec:",
            "  {{- with $v.jobSpec }}",
            "  {{- toYaml . | nindent 2 }}",
            "  {{- end }}",
            pod_template_block(2),
        ])


class CronJobRule(WorkloadRule):
    kinds = ("CronJob",)
    api_groups = ("batch",)
    values_key = "cronJob"

    def pod_template(self, obj: KubeObject) -> dict[str, Any] | None:
        return obj.get("spec", "jobTemplate", "spec", "template")

    def values(self, obj: KubeObject) -> dict[str, Any]:
        schedule = obj.spec.get("schedule")
        if not schedule:
            raise ProcessingError(obj.ref, "CronJob has no schedule")
        values: dict[str, Any] = {"schedule": schedule}
        cron_spec = clean(obj.spec, drop=("schedule", "jobTemplate"))
        if cron_spec:
            values["cronJobSpec"] = cron_spec
        job_spec = clean(obj.get("spec", "jobTemplate", "spec", default={}), drop=JOB_SPEC_DROP)
        if job_spec:
            values["jobSpec"] = job_spec
        values.update(pod_values(self.pod_template(obj), obj.ref))
        return values

    def body(self, obj: KubeObject) -> str:
        return "\n".join([
            header(obj.api_version, obj.kind),
            "spec:",
            "  schedule: {{ $v.schedule | quote }}",
            "  {{- with $v.cronJobSpec }}",
            "  {{- toYaml . | nindent 2 }}",
            "  {{- end }}",
            "  jobTemplate:",
            "    spec:",
            "      {{- with $v.jobSpec }}",
            "      {{- toYaml . | nindent 6 }}",
            "      {{- end }}",
            pod_template_block(6),
        ])


WORKLOAD_RULES: tuple[type[KindRule], ...] = (
    DeploymentRule,
    StatefulSetRule,
    DaemonSetRule,
    JobRule,
    CronJobRule,
)
