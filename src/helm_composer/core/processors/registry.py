"""Processor registry: dispatches each resource to the highest-priority matching rule."""

from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Iterable, Sequence

from helm_composer.core.errors import ProcessingError
from helm_composer.core.processors.auxiliary import AUXILIARY_RULES
from helm_composer.core.processors.base import KindRule, ProcessContext
from helm_composer.core.processors.generic import GenericRule
from helm_composer.core.processors.workloads import WORKLOAD_RULES
from helm_composer.core.template_model import standalone_template
from helm_composer.models.resource import KubeObject, ProcessedResource

logger = logging.getLogger(__name__)

# Objects owned by controllers or maintained by the cluster itself.
RUNTIME_KINDS = frozenset({
    "Event",
    "Endpoints",
    "EndpointSlice",
    "ControllerRevision",
    "Lease",
    "Namespace",
    "Node",
    "ComponentStatus",
})

SKIPPED_SECRET_TYPES = frozenset({
    "kubernetes.io/service-account-token",
    "helm.sh/release.v1",
})


def skip_reason(obj: KubeObject) -> str | None:
    """Why ``obj`` is not chart material, or None when it is."""
    if obj.kind in RUNTIME_KINDS:
        return f"{obj.kind} is runtime state"
    for owner in obj.metadata.get("ownerReferences") or []:
        if owner.get("controller"):
            return f"owned by {owner.get('kind', '?')}/{owner.get('name', '?')}"
    if obj.kind == "Secret" and obj.raw.get("type") in SKIPPED_SECRET_TYPES:
        return f"secret type {obj.raw.get('type')}"
    if obj.kind == "ConfigMap" and obj.name == "kube-root-ca.crt":
        return "cluster CA bundle"
    if obj.kind == "ServiceAccount" and obj.name == "default":
        return "default service account"
    return None


def disambiguate_namespaces(results: list[ProcessedResource], ctx: ProcessContext) -> list[ProcessedResource]:
    """Suffix the template file and values key of objects whose kind and name recur across namespaces.

    The suffix is ``_<namespace>``; Kubernetes names never contain an
    underscore, so a suffixed key cannot meet a real one. The namespace is
    also pinned in the values so each copy renders into its own namespace.
    """
    namespaces: dict[tuple[str, str], set[str]] = defaultdict(set)
    for r in results:
        namespaces[(r.kind, r.name)].add(r.original.namespace or "default")
    clashes = {key for key, seen in namespaces.items() if len(seen) > 1}
    if not clashes:
        return results
    out = []
    for r in results:
        if (r.kind, r.name) not in clashes:
            out.append(r)
            continue
        ns = r.original.namespace or "default"
        moved = replace(
            r,
            template_path=f"templates/{r.template_name}-{r.name}_{ns}.yaml",
            values_path=(*r.values_path[:-1], f"{r.values_path[-1]}_{ns}"),
            values={**r.values, "namespace": ns},
        )
        moved = replace(moved, template_content=standalone_template(moved, ctx.helpers))
        logger.debug("%s appears in several namespaces; values key %s", r.ref, moved.values_key)
        out.append(moved)
    return out


class ProcessorRegistry:
    """Immutable set of kind rules, built once and shared across runs."""

    def __init__(self, rules: Iterable[KindRule]):
        ordered = sorted(rules, key=lambda r: (-r.priority, r.name))
        self._rules: tuple[KindRule, ...] = tuple(ordered)

    @property
    def rules(self) -> tuple[KindRule, ...]:
        return self._rules

    def rules_for(self, obj: KubeObject) -> list[KindRule]:
        return [rule for rule in self._rules if rule.matches(obj.ref)]

    def process(self, obj: KubeObject, ctx: ProcessContext) -> ProcessedResource | None:
        """Process one object; None means it was intentionally skipped."""
        if not obj.kind:
            raise ProcessingError(obj.ref, "object has no kind")
        reason = skip_reason(obj)
        if reason:
            logger.debug("Skipping %s: %s", obj.describe(), reason)
            return None
        for rule in self.rules_for(obj):
            result = rule.process(obj, ctx)
            if result is not None:
                return result
            logger.debug("%s declined %s", rule.name, obj.ref)
        logger.debug("No rule accepted %s", obj.describe())
        return None

    def process_all(
        self,
        objects: Sequence[KubeObject],
        ctx: ProcessContext,
        workers: int = 1,
    ) -> list[ProcessedResource]:
        """Process a batch, preserving input order whatever the pool size.

        The first failure aborts the batch.
        """
        if workers <= 1 or len(objects) <= 1:
            results = [self.process(obj, ctx) for obj in objects]
        else:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(lambda o: self.process(o, ctx), objects))
        return disambiguate_namespaces([r for r in results if r is not None], ctx)


def default_rules() -> list[KindRule]:
    rules: list[KindRule] = [cls() for cls in WORKLOAD_RULES]
    rules.extend(cls() for cls in AUXILIARY_RULES)
    rules.append(GenericRule())
    return rules


def default_registry() -> ProcessorRegistry:
    return ProcessorRegistry(default_rules())
