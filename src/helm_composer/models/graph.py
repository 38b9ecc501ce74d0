"""Service groups, relationships and the resource graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property

from helm_composer.models import RelationshipType
from helm_composer.models.resource import ProcessedResource, ResourceRef


@dataclass
class ResourceGroup:
    name: str
    resources: list[ProcessedResource] = field(default_factory=list)
    namespace: str = ""

    @property
    def kinds(self) -> list[str]:
        seen: list[str] = []
        for r in self.resources:
            if r.kind not in seen:
                seen.append(r.kind)
        return seen

    @property
    def refs(self) -> list[ResourceRef]:
        return [r.ref for r in self.resources]


@dataclass(frozen=True)
class Relationship:
    """Directed edge: ``source`` depends on / references ``target``.

    Equality and hashing only consider ``(source, target, type)`` so the
    same edge found by two detectors collapses into one.
    """

    source: ResourceRef
    target: ResourceRef
    type: RelationshipType
    via: str = field(default="", compare=False)
    detail: str = field(default="", compare=False)

    @property
    def key(self) -> tuple[ResourceRef, ResourceRef, RelationshipType]:
        return (self.source, self.target, self.type)

    def sort_key(self) -> tuple[ResourceRef, ResourceRef, str]:
        return (self.source, self.target, self.type.value)


@dataclass(frozen=True)
class ResourceGraph:
    groups: tuple[ResourceGroup, ...] = ()
    relationships: tuple[Relationship, ...] = ()

    @cached_property
    def _membership(self) -> dict[ResourceRef, str]:
        return {r.ref: g.name for g in self.groups for r in g.resources}

    @cached_property
    def _resources(self) -> dict[ResourceRef, ProcessedResource]:
        return {r.ref: r for g in self.groups for r in g.resources}

    @property
    def resources(self) -> list[ProcessedResource]:
        return [r for g in self.groups for r in g.resources]

    @property
    def group_names(self) -> list[str]:
        return [g.name for g in self.groups]

    def group(self, name: str) -> ResourceGroup | None:
        for g in self.groups:
            if g.name == name:
                return g
        return None

    def group_of(self, ref: ResourceRef) -> str | None:
        return self._membership.get(ref)

    def resource(self, ref: ResourceRef) -> ProcessedResource | None:
        return self._resources.get(ref)

    def relationships_from(self, ref: ResourceRef) -> list[Relationship]:
        return [rel for rel in self.relationships if rel.source == ref]

    def relationships_of_type(self, rel_type: RelationshipType) -> list[Relationship]:
        return [rel for rel in self.relationships if rel.type == rel_type]

    def cross_group_edges(self) -> dict[str, list[str]]:
        """Map each group to the sorted groups its resources reference."""
        edges: dict[str, set[str]] = {}
        for rel in self.relationships:
            src = self.group_of(rel.source)
            dst = self.group_of(rel.target)
            if src is None or dst is None or src == dst:
                continue
            edges.setdefault(src, set()).add(dst)
        return {name: sorted(deps) for name, deps in sorted(edges.items())}
