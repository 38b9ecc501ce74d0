"""Exception hierarchy for the conversion pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from helm_composer.models.resource import ResourceRef


class HelmComposerError(Exception):
    """Base class for every error raised by helm-composer."""


class ExtractionError(HelmComposerError):
    """A single input file could not be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class ProcessingError(HelmComposerError):
    """A kind rule could not interpret a resource."""

    def __init__(self, ref: ResourceRef, reason: str):
        self.ref = ref
        self.reason = reason
        super().__init__(f"processing {ref}: {reason}")


class AnalysisError(HelmComposerError):
    """A relationship detector failed."""

    def __init__(self, detector: str, reason: str):
        self.detector = detector
        self.reason = reason
        super().__init__(f"detector {detector}: {reason}")


class GenerationError(HelmComposerError):
    """Chart synthesis failed: unknown mode or inconsistent graph."""


class PipelineCancelled(HelmComposerError):
    """The run was cancelled at a stage boundary."""

    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"cancelled before {stage}")
