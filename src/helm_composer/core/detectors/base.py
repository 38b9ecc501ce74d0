"""Detector base class, resource index and label-selector matching."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from helm_composer.models import RelationshipType
from helm_composer.models.graph import Relationship
from helm_composer.models.resource import (
    CLUSTER_SCOPED_KINDS,
    WORKLOAD_KINDS,
    KubeObject,
    ProcessedResource,
    ResourceRef,
)


def pod_template_labels(obj: KubeObject) -> dict[str, str] | None:
    """Labels a workload stamps on its pods; None for non-workloads."""
    if obj.kind not in WORKLOAD_KINDS:
        return None
    if obj.kind == "Pod":
        return obj.labels
    if obj.kind == "CronJob":
        return obj.get("spec", "jobTemplate", "spec", "template", "metadata", "labels", default={})
    return obj.get("spec", "template", "metadata", "labels", default={})


def _expression_matches(expr: dict[str, Any], labels: dict[str, str]) -> bool:
    key = expr.get("key", "")
    operator = expr.get("operator", "")
    values = [str(v) for v in expr.get("values") or []]
    if operator == "In":
        return key in labels and str(labels[key]) in values
    if operator == "NotIn":
        return key not in labels or str(labels[key]) not in values
    if operator == "Exists":
        return key in labels
    if operator == "DoesNotExist":
        return key not in labels
    raise ValueError(f"unsupported selector operator {operator!r}")


def selector_matches(selector: dict[str, Any] | None, labels: dict[str, str], structured: bool = True) -> bool:
    """True when every selector term holds for ``labels``.

    ``structured`` selectors use ``matchLabels``/``matchExpressions``; plain
    ones (Service ``spec.selector``) are a bare label map.
    """
    selector = selector or {}
    if structured:
        match_labels = selector.get("matchLabels") or {}
        expressions = selector.get("matchExpressions") or []
    else:
        match_labels, expressions = selector, []
    for key, value in match_labels.items():
        if key not in labels or str(labels[key]) != str(value):
            return False
    return all(_expression_matches(e, labels) for e in expressions)


def is_empty_selector(selector: dict[str, Any] | None, structured: bool = True) -> bool:
    if not selector:
        return True
    if structured:
        return not selector.get("matchLabels") and not selector.get("matchExpressions")
    return False


class ResourceIndex:
    """Lookups over one batch of processed resources."""

    def __init__(self, resources: Sequence[ProcessedResource]):
        self.resources = list(resources)
        self._by_key: dict[tuple[str, str, str], ResourceRef] = {}
        for r in self.resources:
            self._by_key.setdefault(r.ref.lookup_key, r.ref)

    def find(self, kind: str, name: str | None, namespace: str = "") -> ResourceRef | None:
        if not name:
            return None
        if kind in CLUSTER_SCOPED_KINDS:
            namespace = ""
        return self._by_key.get((kind, namespace, name))

    def of_kind(self, *kinds: str) -> list[ProcessedResource]:
        return [r for r in self.resources if r.kind in kinds]

    def workloads(self, namespace: str) -> list[tuple[ProcessedResource, dict[str, str]]]:
        """(resource, pod labels) for every workload in ``namespace``."""
        result = []
        for r in self.resources:
            if r.ref.namespace != namespace:
                continue
            labels = pod_template_labels(r.original)
            if labels is not None:
                result.append((r, labels))
        return result


class Detector:
    """Finds one family of relationships across the whole batch."""

    name: str = ""
    priority: int = 50
    rel_type: RelationshipType

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        raise NotImplementedError

    def edge(self, source: ResourceRef, target: ResourceRef, via: str, detail: str = "") -> Relationship:
        return Relationship(source=source, target=target, type=self.rel_type, via=via, detail=detail)
