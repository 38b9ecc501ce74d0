"""Output strategies turning a resource graph into Helm charts."""

from __future__ import annotations

from helm_composer.core.generators.base import ChartGenerator, GeneratorRegistry
from helm_composer.core.generators.library import LibraryGenerator
from helm_composer.core.generators.separate import SeparateGenerator
from helm_composer.core.generators.umbrella import UmbrellaGenerator
from helm_composer.core.generators.universal import UniversalGenerator


def default_generator_registry() -> GeneratorRegistry:
    return GeneratorRegistry([
        UniversalGenerator(),
        SeparateGenerator(),
        LibraryGenerator(),
        UmbrellaGenerator(),
    ])


__all__ = ["ChartGenerator", "GeneratorRegistry", "default_generator_registry"]
