"""Serialize generated charts to directory trees."""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path, PurePosixPath

from helm_composer.core.errors import GenerationError
from helm_composer.models.chart import GeneratedChart
from helm_composer.utils.yaml_render import dump_yaml

logger = logging.getLogger(__name__)


def lock_digest(declared: list[dict], locked: list[dict]) -> str:
    """sha256 over the dependency lists, the way Helm fingerprints Chart.lock."""
    payload = json.dumps([declared, locked], separators=(",", ":"), sort_keys=True)
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def chart_lock(chart: GeneratedChart) -> str:
    declared = [d.to_dict() for d in chart.dependencies]
    locked = [
        {"name": d.name, "repository": d.repository, "version": d.version}
        for d in chart.dependencies
    ]
    return dump_yaml({"dependencies": locked, "digest": lock_digest(declared, locked)})


def _safe_relative(path: str, chart: GeneratedChart) -> str:
    rel = PurePosixPath(path)
    if not path or rel.is_absolute() or ".." in rel.parts:
        raise GenerationError(f"{chart.name}: file path {path!r} escapes the chart directory")
    return str(rel)


def _text(content: str) -> str:
    return content if content.endswith("\n") else content + "\n"


def validate_chart(chart: GeneratedChart) -> None:
    """Refuse to emit a chart Helm would reject or that would install nothing."""
    if not chart.name:
        raise GenerationError("chart name is empty")
    if not chart.metadata.name or not chart.metadata.version:
        raise GenerationError(f"{chart.name}: Chart.yaml lacks a name or version")
    if not chart.values_yaml.strip():
        raise GenerationError(f"{chart.name}: values.yaml is empty")
    if not chart.templates and not chart.dependencies:
        raise GenerationError(f"{chart.name}: chart has no templates and no dependencies")


def render_chart(chart: GeneratedChart) -> dict[str, str]:
    """Every file of ``chart`` keyed by its path relative to the chart directory."""
    validate_chart(chart)
    files: dict[str, str] = {
        "Chart.yaml": chart.chart_yaml,
        "values.yaml": _text(chart.values_yaml),
    }
    if chart.dependencies:
        files["Chart.lock"] = chart_lock(chart)
    if chart.values_schema:
        files["values.schema.json"] = chart.values_schema
    if chart.helmignore:
        files[".helmignore"] = chart.helmignore
    if chart.helpers:
        files["templates/_helpers.tpl"] = _text(chart.helpers)
    if chart.notes:
        files["templates/NOTES.txt"] = _text(chart.notes)
    for path, content in chart.templates.items():
        rel = _safe_relative(path, chart)
        if not rel.startswith("templates/"):
            raise GenerationError(f"{chart.name}: template {path} is outside templates/")
        files[rel] = _text(content)
    for ext in chart.external_files:
        rel = _safe_relative(ext.path, chart)
        if rel in files:
            raise GenerationError(f"{chart.name}: external file {rel} overwrites a chart file")
        files[rel] = ext.content
    return files


def write_chart(chart: GeneratedChart, output_dir: str | Path) -> list[Path]:
    """Write ``chart`` below ``output_dir``/``chart.path``; returns the written files."""
    root = Path(output_dir) / _safe_relative(chart.path, chart)
    written: list[Path] = []
    for rel, content in render_chart(chart).items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        written.append(target)
    logger.debug("Wrote %d file(s) for chart %s to %s", len(written), chart.name, root)
    return written


def write_charts(charts: list[GeneratedChart], output_dir: str | Path) -> dict[str, list[Path]]:
    """Write every chart, after checking all of them so a bad one leaves no partial tree."""
    for chart in charts:
        validate_chart(chart)
    return {chart.path: write_chart(chart, output_dir) for chart in charts}
