"""Chart metadata and generated chart models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from helm_composer.utils.yaml_render import dump_yaml


@dataclass
class ChartDependency:
    name: str = ""
    version: str = ""
    repository: str = ""
    condition: str = ""
    alias: str = ""

    def to_dict(self) -> dict[str, str]:
        data = {"name": self.name, "version": self.version, "repository": self.repository}
        if self.condition:
            data["condition"] = self.condition
        if self.alias:
            data["alias"] = self.alias
        return data


@dataclass
class ChartMetadata:
    name: str = ""
    version: str = ""
    app_version: str = ""
    description: str = ""
    api_version: str = "v2"
    chart_type: str = "application"
    keywords: list[str] = field(default_factory=list)
    dependencies: list[ChartDependency] = field(default_factory=list)
    annotations: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Chart.yaml mapping in Helm's conventional key order, empties dropped."""
        data: dict[str, Any] = {
            "apiVersion": self.api_version,
            "name": self.name,
            "description": self.description,
            "type": self.chart_type,
            "version": self.version,
            "appVersion": self.app_version,
        }
        if self.keywords:
            data["keywords"] = list(self.keywords)
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.dependencies:
            data["dependencies"] = [d.to_dict() for d in self.dependencies]
        return {k: v for k, v in data.items() if v != ""}


@dataclass
class ExternalFile:
    """A non-template file placed relative to the chart root."""

    path: str
    content: str


@dataclass
class GeneratedChart:
    name: str
    path: str
    metadata: ChartMetadata
    values: dict[str, Any] = field(default_factory=dict)
    values_header: str = ""
    helpers: str = ""
    notes: str = ""
    templates: dict[str, str] = field(default_factory=dict)
    values_schema: str = ""
    helmignore: str = ""
    external_files: list[ExternalFile] = field(default_factory=list)

    @property
    def chart_yaml(self) -> str:
        return dump_yaml(self.metadata.to_dict())

    @property
    def values_yaml(self) -> str:
        if not self.values:
            return self.values_header
        return dump_yaml(self.values, header=self.values_header)

    @property
    def dependencies(self) -> list[ChartDependency]:
        return self.metadata.dependencies

    @property
    def is_library(self) -> bool:
        return self.metadata.chart_type == "library"
