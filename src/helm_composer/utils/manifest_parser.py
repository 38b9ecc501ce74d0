"""Parse multi-document YAML manifests into individual resources."""

from __future__ import annotations

from typing import Any, Iterable

import yaml

from helm_composer.models.resource import KubeObject


def _documents(doc: Any) -> Iterable[dict[str, Any]]:
    if not doc or not isinstance(doc, dict):
        return
    kind = doc.get("kind", "") or ""
    # kubectl get -o yaml emits `kind: List` wrappers
    if kind == "List" or (kind.endswith("List") and isinstance(doc.get("items"), list)):
        for item in doc.get("items") or []:
            yield from _documents(item)
        return
    if not kind:
        return
    yield doc


def parse_manifest(manifest: str, source_path: str = "") -> list[KubeObject]:
    """Parse a multi-document YAML (or JSON) string into KubeObjects.

    Raises ``yaml.YAMLError`` on malformed input; callers decide whether that
    is fatal.
    """
    resources: list[KubeObject] = []
    if not manifest:
        return resources

    for doc in yaml.safe_load_all(manifest):
        for item in _documents(doc):
            resources.append(KubeObject(raw=item, source_path=source_path))
    return resources


def resource_counts(resources: Iterable[KubeObject]) -> dict[str, int]:
    """Count resources by kind."""
    counts: dict[str, int] = {}
    for res in resources:
        counts[res.kind] = counts.get(res.kind, 0) + 1
    return counts
