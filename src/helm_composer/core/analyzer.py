"""Group processed resources into services and discover their relationships."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from helm_composer.core.detectors import Detector, ResourceIndex, default_detectors
from helm_composer.core.errors import AnalysisError
from helm_composer.models.graph import Relationship, ResourceGraph, ResourceGroup
from helm_composer.models.resource import ProcessedResource, ResourceRef

logger = logging.getLogger(__name__)


def group_resources(resources: Sequence[ProcessedResource]) -> list[ResourceGroup]:
    """Partition by service name, keeping first-seen order of groups and members."""
    groups: dict[str, ResourceGroup] = {}
    for r in resources:
        group = groups.get(r.service_name)
        if group is None:
            group = groups[r.service_name] = ResourceGroup(name=r.service_name)
        group.resources.append(r)
        if not group.namespace and r.ref.namespace:
            group.namespace = r.ref.namespace
    return list(groups.values())


class DependencyAnalyzer:
    """Runs a fixed detector set; shared read-only between pipeline runs."""

    def __init__(self, detectors: Iterable[Detector] | None = None):
        chosen = default_detectors() if detectors is None else list(detectors)
        self._detectors: tuple[Detector, ...] = tuple(sorted(chosen, key=lambda d: (-d.priority, d.name)))

    @property
    def detectors(self) -> tuple[Detector, ...]:
        return self._detectors

    def analyze(self, resources: Sequence[ProcessedResource]) -> ResourceGraph:
        seen: dict[ResourceRef, ProcessedResource] = {}
        for r in resources:
            if r.ref in seen:
                raise AnalysisError(
                    "grouping",
                    f"duplicate resource {r.ref} ({r.original.source_path or '?'} and "
                    f"{seen[r.ref].original.source_path or '?'})",
                )
            seen[r.ref] = r

        groups = group_resources(resources)
        index = ResourceIndex(resources)

        found: dict[Relationship, Relationship] = {}
        for detector in self._detectors:
            try:
                edges = list(detector.detect(index))
            except AnalysisError:
                raise
            except Exception as e:
                raise AnalysisError(detector.name, str(e)) from e
            for edge in edges:
                found.setdefault(edge, edge)
            logger.debug("Detector %s found %d relationship(s)", detector.name, len(edges))

        relationships = tuple(sorted(found.values(), key=Relationship.sort_key))
        logger.debug("Analyzed %d resource(s) into %d group(s), %d relationship(s)",
                     len(resources), len(groups), len(relationships))
        return ResourceGraph(groups=tuple(groups), relationships=relationships)
