"""Application configuration and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from helm_composer.core.errors import GenerationError
from helm_composer.models import OutputMode
from helm_composer.utils.naming import dns_label
from helm_composer.utils.version_compare import is_valid_chart_version


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        return max(1, int(raw)) if raw else default
    except ValueError:
        return default


@dataclass
class Settings:
    chart_version: str = field(default_factory=lambda: os.environ.get("HCOMP_CHART_VERSION", "0.1.0"))
    app_version: str = field(default_factory=lambda: os.environ.get("HCOMP_APP_VERSION", "latest"))
    output_mode: str = field(default_factory=lambda: os.environ.get("HCOMP_OUTPUT_MODE", "universal"))
    workers: int = field(default_factory=lambda: _env_int("HCOMP_WORKERS", 4))
    library_name: str = field(default_factory=lambda: os.environ.get("HCOMP_LIBRARY_NAME", "library"))
    helm_lib_repository: str = field(
        default_factory=lambda: os.environ.get("HCOMP_HELM_LIB_REPOSITORY", "https://deckhouse.github.io/lib-helm"),
    )
    helm_lib_version: str = "*"
    extensions: tuple[str, ...] = (".yaml", ".yml", ".json")


# Global singleton
settings = Settings()


@dataclass
class GeneratorOptions:
    """What the core needs to know about the chart(s) it produces."""

    chart_name: str
    chart_version: str = field(default_factory=lambda: settings.chart_version)
    app_version: str = field(default_factory=lambda: settings.app_version)
    namespace: str = ""
    mode: OutputMode = field(default_factory=lambda: OutputMode.parse(settings.output_mode))
    description: str = ""
    include_schema: bool = False
    module_scaffold: bool = False
    library_name: str = field(default_factory=lambda: settings.library_name)

    def __post_init__(self) -> None:
        self.mode = OutputMode.parse(self.mode)

    @property
    def helper_prefix(self) -> str:
        return dns_label(self.chart_name)

    @property
    def chart_description(self) -> str:
        return self.description or f"A Helm chart for {self.chart_name} generated from Kubernetes manifests"

    def validate(self) -> None:
        if not self.chart_name or not self.chart_name.strip():
            raise GenerationError("chart name must not be empty")
        if not is_valid_chart_version(self.chart_version):
            raise GenerationError(f"chart version {self.chart_version!r} is not a valid semantic version")
        if not self.app_version:
            raise GenerationError("app version must not be empty")
