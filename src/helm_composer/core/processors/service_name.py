"""Service-name inference: the grouping key of every processed resource.

Policy, applied in order:

1. take the ``app.kubernetes.io/name`` label, else the legacy ``app``
   label, else ``metadata.name``;
2. lowercase it;
3. strip at most one known role suffix (``-config``, ``-secret``, ``-svc``,
   ``-headless`` ...), provided something is left.

So ``webapp``, ``webapp-config``, ``webapp-svc`` and ``webapp-secret``
all land in service ``webapp``. Label values go through the same
suffix stripping as names.
"""

from __future__ import annotations

from helm_composer.models.resource import KubeObject

NAME_LABELS: tuple[str, ...] = ("app.kubernetes.io/name", "app")

ROLE_SUFFIXES: tuple[str, ...] = tuple(sorted(
    (
        "-configmap",
        "-config",
        "-cm",
        "-secrets",
        "-secret",
        "-env",
        "-svc",
        "-service",
        "-headless",
        "-sa",
        "-serviceaccount",
        "-pdb",
        "-hpa",
        "-ingress",
        "-netpol",
        "-networkpolicy",
        "-rolebinding",
        "-role",
        "-pvc",
        "-data",
        "-dashboard",
        "-tls",
    ),
    key=lambda s: (-len(s), s),
))


def name_candidate(obj: KubeObject) -> str:
    labels = obj.labels
    for key in NAME_LABELS:
        value = labels.get(key)
        if value and str(value).strip():
            return str(value)
    return obj.name


def normalize_service_name(raw: str) -> str:
    name = raw.strip().lower()
    for suffix in ROLE_SUFFIXES:
        if name.endswith(suffix) and len(name) > len(suffix):
            stripped = name[: -len(suffix)].rstrip("-.")
            if stripped:
                return stripped
            break
    return name


def infer_service_name(obj: KubeObject) -> str:
    return normalize_service_name(name_candidate(obj))
