"""Relationship detectors run by the dependency analyzer."""

from __future__ import annotations

from helm_composer.core.detectors.base import Detector, ResourceIndex
from helm_composer.core.detectors.references import (
    AnnotationDetector,
    BackendReferenceDetector,
    ConfigReferenceDetector,
    ImagePullSecretDetector,
    IngressTLSDetector,
    RoleReferenceDetector,
    ScaleTargetDetector,
    ServiceAccountDetector,
    StatefulSetServiceDetector,
    VolumeDetector,
)
from helm_composer.core.detectors.selectors import (
    DisruptionBudgetDetector,
    NetworkPolicyDetector,
    ServiceMonitorDetector,
    ServiceSelectorDetector,
)


def default_detectors() -> list[Detector]:
    return [
        ServiceSelectorDetector(),
        NetworkPolicyDetector(),
        BackendReferenceDetector(),
        ScaleTargetDetector(),
        DisruptionBudgetDetector(),
        RoleReferenceDetector(),
        ConfigReferenceDetector(),
        VolumeDetector(),
        StatefulSetServiceDetector(),
        ServiceAccountDetector(),
        ImagePullSecretDetector(),
        IngressTLSDetector(),
        ServiceMonitorDetector(),
        AnnotationDetector(),
    ]


__all__ = ["Detector", "ResourceIndex", "default_detectors"]
