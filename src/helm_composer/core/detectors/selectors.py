"""Selector-driven detectors: Service, NetworkPolicy, PDB and ServiceMonitor."""

from __future__ import annotations

from typing import Iterable

from helm_composer.core.detectors.base import Detector, ResourceIndex, is_empty_selector, selector_matches
from helm_composer.models import RelationshipType
from helm_composer.models.graph import Relationship


class ServiceSelectorDetector(Detector):
    """Service -> workloads whose pod template carries every selector label."""

    name = "selector-match"
    priority = 100
    rel_type = RelationshipType.LABEL_SELECTOR

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for svc in index.of_kind("Service"):
            selector = svc.original.spec.get("selector")
            if is_empty_selector(selector, structured=False):
                continue
            for workload, labels in index.workloads(svc.ref.namespace):
                if selector_matches(selector, labels, structured=False):
                    yield self.edge(svc.ref, workload.ref, "spec.selector")


class NetworkPolicyDetector(Detector):
    """NetworkPolicy -> workloads its podSelector applies to; ``{}`` selects all."""

    name = "network-policy"
    priority = 95
    rel_type = RelationshipType.NETWORK_POLICY

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for policy in index.of_kind("NetworkPolicy"):
            selector = policy.original.spec.get("podSelector") or {}
            for workload, labels in index.workloads(policy.ref.namespace):
                if selector_matches(selector, labels):
                    yield self.edge(policy.ref, workload.ref, "spec.podSelector")


class DisruptionBudgetDetector(Detector):
    name = "disruption-budget"
    priority = 80
    rel_type = RelationshipType.DISRUPTION_BUDGET

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        for pdb in index.of_kind("PodDisruptionBudget"):
            selector = pdb.original.spec.get("selector")
            if is_empty_selector(selector):
                continue
            for workload, labels in index.workloads(pdb.ref.namespace):
                if selector_matches(selector, labels):
                    yield self.edge(pdb.ref, workload.ref, "spec.selector")


class ServiceMonitorDetector(Detector):
    """ServiceMonitor -> Services whose own labels match its selector."""

    name = "service-monitor"
    priority = 40
    rel_type = RelationshipType.SERVICE_MONITOR

    def detect(self, index: ResourceIndex) -> Iterable[Relationship]:
        services = index.of_kind("Service")
        for monitor in index.of_kind("ServiceMonitor"):
            spec = monitor.original.spec
            selector = spec.get("selector")
            if is_empty_selector(selector):
                continue
            namespaces = (spec.get("namespaceSelector") or {}).get("matchNames") or [monitor.ref.namespace]
            for svc in services:
                if svc.ref.namespace in namespaces and selector_matches(selector, svc.original.labels):
                    yield self.edge(monitor.ref, svc.ref, "spec.selector")
