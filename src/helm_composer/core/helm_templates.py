"""Static chart files: _helpers.tpl, NOTES.txt and .helmignore."""

from __future__ import annotations

from helm_composer.core.template_model import render_body

_NAMING_HELPERS = '''{{/*
Expand the name of the chart.
*/}}
{{- define "<H>.name" -}}
{{- default .Chart.Name .Values.nameOverride | trunc 63 | trimSuffix "-" }}
{{- end }}

{{/*
Create a default fully qualified app name.
Truncated at 63 chars because some Kubernetes name fields are limited to that.
If the release name contains the chart name it is used as the full name.
*/}}
{{- define "<H>.fullname" -}}
{{- if .Values.fullnameOverride }}
{{- .Values.fullnameOverride | trunc 63 | trimSuffix "-" }}
{{- else }}
{{- $name := default .Chart.Name .Values.nameOverride }}
{{- if contains $name .Release.Name }}
{{- .Release.Name | trunc 63 | trimSuffix "-" }}
{{- else }}
{{- printf "%s-%s" .Release.Name $name | trunc 63 | trimSuffix "-" }}
{{- end }}
{{- end }}
{{- end }}

{{/*
Chart name and version as used by the chart label.
*/}}
{{- define "<H>.chart" -}}
{{- printf "%s-%s" .Chart.Name .Chart.Version | replace "+" "_" | trunc 63 | trimSuffix "-" }}
{{- end }}

{{/*
Common labels
*/}}
{{- define "<H>.labels" -}}
helm.sh/chart: {{ include "<H>.chart" . }}
{{ include "<H>.selectorLabels" . }}
app.kubernetes.io/version: {{ .Chart.AppVersion | default .Chart.Version | quote }}
app.kubernetes.io/managed-by: {{ .Release.Service }}
{{- end }}

{{/*
Selector labels
*/}}
{{- define "<H>.selectorLabels" -}}
app.kubernetes.io/name: {{ include "<H>.name" . }}
app.kubernetes.io/instance: {{ .Release.Name }}
{{- end }}

{{/*
Service account of a workload values block.
*/}}
{{- define "<H>.serviceAccountName" -}}
{{- default "default" .serviceAccountName }}
{{- end }}

{{/*
Pull secrets: global ones first, then the workload's own.
Expects (dict "root" $ "values" <workload values>).
*/}}
{{- define "<H>.imagePullSecrets" -}}
{{- $global := .root.Values.global | default dict }}
{{- $secrets := concat ($global.imagePullSecrets | default list) (.values.imagePullSecrets | default list) }}
{{- with $secrets }}
imagePullSecrets:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- end }}
'''

_POD_HELPERS = '''
{{/*
Container image reference, honouring global.imageRegistry.
Expects (dict "image" <image values> "root" $).
*/}}
{{- define "<H>.image" -}}
{{- $global := .root.Values.global | default dict }}
{{- $repository := .image.repository }}
{{- with $global.imageRegistry }}
{{- $repository = printf "%s/%s" . $repository }}
{{- end }}
{{- if .image.digest }}
{{- printf "%s@%s" $repository .image.digest | quote }}
{{- else }}
{{- printf "%s:%s" $repository (.image.tag | default "latest" | toString) | quote }}
{{- end }}
{{- end }}

{{- define "<H>.env" -}}
{{- with .env }}
env:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- with .envFrom }}
envFrom:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- end }}

{{- define "<H>.probes" -}}
{{- with .livenessProbe }}
livenessProbe:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- with .readinessProbe }}
readinessProbe:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- with .startupProbe }}
startupProbe:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- end }}

{{- define "<H>.resources" -}}
{{- with .resources }}
resources:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- end }}

{{- define "<H>.volumeMounts" -}}
{{- with .volumeMounts }}
volumeMounts:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- end }}

{{- define "<H>.volumes" -}}
{{- with .volumes }}
volumes:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- end }}

{{/*
One container entry. Expects (dict "container" <container values> "root" $).
*/}}
{{- define "<H>.container" -}}
{{- $c := .container -}}
name: {{ $c.name }}
image: {{ include "<H>.image" (dict "image" $c.image "root" .root) }}
{{- with $c.imagePullPolicy }}
imagePullPolicy: {{ . }}
{{- end }}
{{- with $c.command }}
command:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- with $c.args }}
args:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- with $c.workingDir }}
workingDir: {{ . }}
{{- end }}
{{- with $c.ports }}
ports:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- include "<H>.env" $c }}
{{- include "<H>.volumeMounts" $c }}
{{- include "<H>.resources" $c }}
{{- include "<H>.probes" $c }}
{{- with $c.lifecycle }}
lifecycle:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- with $c.securityContext }}
securityContext:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- end }}

{{/*
Pod spec shared by every workload kind.
Expects (dict "values" <workload values> "root" $).
*/}}
{{- define "<H>.podSpec" -}}
{{- $v := .values -}}
{{- $root := .root -}}
serviceAccountName: {{ include "<H>.serviceAccountName" $v }}
{{- if kindIs "bool" $v.automountServiceAccountToken }}
automountServiceAccountToken: {{ $v.automountServiceAccountToken }}
{{- end }}
{{- include "<H>.imagePullSecrets" . }}
{{- with $v.restartPolicy }}
restartPolicy: {{ . }}
{{- end }}
{{- with $v.podSecurityContext }}
securityContext:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- with $v.initContainers }}
initContainers:
{{- range . }}
- {{- include "<H>.container" (dict "container" . "root" $root) | nindent 2 }}
{{- end }}
{{- end }}
containers:
{{- range $v.containers }}
- {{- include "<H>.container" (dict "container" . "root" $root) | nindent 2 }}
{{- end }}
{{- include "<H>.volumes" $v }}
{{- with $v.nodeSelector }}
nodeSelector:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- with $v.affinity }}
affinity:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- with $v.tolerations }}
tolerations:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- with $v.topologySpreadConstraints }}
topologySpreadConstraints:
  {{- toYaml . | nindent 2 }}
{{- end }}
{{- with $v.priorityClassName }}
priorityClassName: {{ . }}
{{- end }}
{{- with $v.terminationGracePeriodSeconds }}
terminationGracePeriodSeconds: {{ . }}
{{- end }}
{{- end }}
'''

# Named templates every chart defines, whatever its strategy.
REQUIRED_HELPERS = (
    "name",
    "fullname",
    "chart",
    "labels",
    "selectorLabels",
    "serviceAccountName",
    "imagePullSecrets",
)

# Sub-blocks factored out of the workload bodies.
SHARED_BLOCKS = (
    "image",
    "env",
    "probes",
    "resources",
    "volumeMounts",
    "volumes",
    "container",
    "podSpec",
)

# Define names a kind template must not take in a library chart.
RESERVED_DEFINES = frozenset(REQUIRED_HELPERS + SHARED_BLOCKS)


def generate_helpers(prefix: str, include_blocks: bool = True) -> str:
    """Return _helpers.tpl content with every define under ``prefix``."""
    text = _NAMING_HELPERS
    if include_blocks:
        text += _POD_HELPERS
    return render_body(text, prefix)


def generate_notes(
    chart_name: str,
    services: list[str],
    chart_dir: str | None = None,
    subcharts: bool = False,
) -> str:
    """Return NOTES.txt content for an installed chart."""
    chart_dir = chart_dir or chart_name
    lines = [
        f"Thank you for installing {chart_name}.",
        "",
        "Release {{ .Release.Name }} was deployed to namespace {{ .Release.Namespace }}.",
        "",
    ]
    if services:
        lines.append("Services in this chart:" if not subcharts else "Subcharts in this chart:")
        lines.extend(f"  - {svc}" for svc in services)
        lines.append("")
    lines += [
        "To verify the deployment, run:",
        "",
        "  kubectl get all -l app.kubernetes.io/instance={{ .Release.Name }} -n {{ .Release.Namespace }}",
        "",
        "To override values on upgrade, run:",
        "",
        f"  helm upgrade {{{{ .Release.Name }}}} ./{chart_dir} -n {{{{ .Release.Namespace }}}} -f my-values.yaml",
    ]
    if subcharts:
        lines += [
            "",
            "Disable a subchart with --set <name>.enabled=false.",
        ]
    return "\n".join(lines) + "\n"


def generate_library_notes(library: str) -> str:
    return (
        f"{library} is a library chart and cannot be installed on its own.\n"
        "Add it as a dependency of an application chart and call its named templates with include.\n"
    )


def generate_helmignore() -> str:
    return "\n".join([
        "# Patterns to ignore when building packages.",
        "# This supports shell glob matching, relative path matching, and",
        "# negation (prefixed with !). Only one pattern per line.",
        ".DS_Store",
        "# Common VCS dirs",
        ".git/",
        ".gitignore",
        ".bzr/",
        ".bzrignore",
        ".hg/",
        ".hgignore",
        ".svn/",
        "# Common backup files",
        "*.swp",
        "*.bak",
        "*.tmp",
        "*.orig",
        "*~",
        "# Various IDEs",
        ".project",
        ".idea/",
        "*.tmproj",
        ".vscode/",
    ]) + "\n"
