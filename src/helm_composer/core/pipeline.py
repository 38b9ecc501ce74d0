"""Process -> Analyze -> Generate over one in-memory batch."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Sequence

from helm_composer.config.settings import GeneratorOptions, settings
from helm_composer.core.analyzer import DependencyAnalyzer
from helm_composer.core.errors import PipelineCancelled
from helm_composer.core.generators import GeneratorRegistry, default_generator_registry
from helm_composer.core.processors import ProcessContext, ProcessorRegistry, default_registry
from helm_composer.models.chart import GeneratedChart
from helm_composer.models.graph import ResourceGraph
from helm_composer.models.resource import KubeObject, ProcessedResource

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    graph: ResourceGraph
    charts: list[GeneratedChart] = field(default_factory=list)
    processed: list[ProcessedResource] = field(default_factory=list)
    skipped: int = 0


def _check(cancel: threading.Event | None, stage: str) -> None:
    if cancel is not None and cancel.is_set():
        logger.debug("Cancellation requested before %s", stage)
        raise PipelineCancelled(stage)


class Pipeline:
    """Wires the registries together.

    Registries are built once and only read afterwards, so one pipeline
    can serve concurrent runs.
    """

    def __init__(
        self,
        processors: ProcessorRegistry | None = None,
        analyzer: DependencyAnalyzer | None = None,
        generators: GeneratorRegistry | None = None,
        workers: int | None = None,
    ):
        self.processors = processors or default_registry()
        self.analyzer = analyzer or DependencyAnalyzer()
        self.generators = generators or default_generator_registry()
        self.workers = workers or settings.workers

    def process(self, objects: Sequence[KubeObject], options: GeneratorOptions) -> list[ProcessedResource]:
        ctx = ProcessContext(chart_name=options.chart_name)
        return self.processors.process_all(objects, ctx, workers=self.workers)

    def analyze(
        self,
        objects: Sequence[KubeObject],
        options: GeneratorOptions,
        cancel: threading.Event | None = None,
    ) -> PipelineResult:
        """Process and analyze without generating charts."""
        _check(cancel, "process")
        processed = self.process(objects, options)
        _check(cancel, "analyze")
        graph = self.analyzer.analyze(processed)
        return PipelineResult(graph=graph, processed=processed, skipped=len(objects) - len(processed))

    def run(
        self,
        objects: Sequence[KubeObject],
        options: GeneratorOptions,
        cancel: threading.Event | None = None,
    ) -> PipelineResult:
        result = self.analyze(objects, options, cancel)
        _check(cancel, "generate")
        result.charts = self.generators.generate(result.graph, options)
        logger.info(
            "Converted %d resource(s) into %d chart(s) (%d skipped)",
            len(result.processed), len(result.charts), result.skipped,
        )
        return result
