"""Read manifests from files and directories into KubeObjects."""

from __future__ import annotations

import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import yaml

from helm_composer.config.settings import settings
from helm_composer.core.errors import ExtractionError, PipelineCancelled
from helm_composer.models.resource import KubeObject
from helm_composer.utils.manifest_parser import parse_manifest

logger = logging.getLogger(__name__)

STDIN = "-"


@dataclass
class LabelRequirement:
    key: str
    value: str
    negated: bool = False

    def matches(self, labels: dict[str, str]) -> bool:
        if self.negated:
            return labels.get(self.key) != self.value
        return labels.get(self.key) == self.value


def parse_selector(selector: str) -> list[LabelRequirement]:
    """Parse an equality-based selector such as ``app=web,tier!=cache``."""
    requirements: list[LabelRequirement] = []
    for term in (selector or "").split(","):
        term = term.strip()
        if not term:
            continue
        negated = "!=" in term
        key, sep, value = term.partition("!=" if negated else "=")
        if value.startswith("="):
            value = value[1:]  # k==v
        key, value = key.strip(), value.strip()
        if not sep or not key:
            raise ValueError(f"invalid label selector term {term!r}")
        requirements.append(LabelRequirement(key, value, negated))
    return requirements


@dataclass
class ExtractOptions:
    paths: list[str] = field(default_factory=list)
    recursive: bool = True
    namespaces: list[str] = field(default_factory=list)
    include_kinds: list[str] = field(default_factory=list)
    exclude_kinds: list[str] = field(default_factory=list)
    label_selector: str = ""

    def __post_init__(self) -> None:
        self.requirements = parse_selector(self.label_selector)

    def accepts(self, obj: KubeObject) -> bool:
        if self.namespaces and obj.namespace and obj.namespace not in self.namespaces:
            return False
        if self.include_kinds and obj.kind not in self.include_kinds:
            return False
        if obj.kind in self.exclude_kinds:
            return False
        labels = obj.labels
        return all(req.matches(labels) for req in self.requirements)


@dataclass
class ExtractionResult:
    resources: list[KubeObject] = field(default_factory=list)
    errors: list[ExtractionError] = field(default_factory=list)
    files: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors


def discover_files(paths: Iterable[str], recursive: bool = True) -> list[str]:
    """Expand directories into manifest files, keeping argument order.

    Missing paths are returned as-is so that reading them reports the error.
    """
    found: list[str] = []
    for raw in paths:
        if raw == STDIN:
            found.append(raw)
            continue
        path = Path(raw)
        if path.is_dir():
            pattern = "**/*" if recursive else "*"
            found.extend(
                str(p) for p in sorted(path.glob(pattern))
                if p.is_file() and p.suffix.lower() in settings.extensions
            )
        else:
            found.append(raw)
    # the same file named twice is read once
    return list(dict.fromkeys(found))


def read_file(path: str) -> list[KubeObject]:
    try:
        if path == STDIN:
            text = sys.stdin.read()
        else:
            text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ExtractionError(path, str(e)) from e
    try:
        return parse_manifest(text, source_path=path)
    except yaml.YAMLError as e:
        raise ExtractionError(path, f"invalid YAML: {e}") from e


def extract(
    options: ExtractOptions,
    workers: int | None = None,
    cancel: threading.Event | None = None,
) -> ExtractionResult:
    """Read every manifest file; a failing file is recorded and skipped.

    Output is ordered by file order, then document order, whatever the
    completion order of the pool.
    """
    files = discover_files(options.paths, options.recursive)
    result = ExtractionResult(files=len(files))
    if not files:
        return result

    per_file: dict[int, list[KubeObject]] = {}
    errors: dict[int, ExtractionError] = {}
    with ThreadPoolExecutor(max_workers=workers or settings.workers) as executor:
        futures = {executor.submit(read_file, path): i for i, path in enumerate(files)}
        for future in as_completed(futures):
            if cancel is not None and cancel.is_set():
                for pending in futures:
                    pending.cancel()
                raise PipelineCancelled("extraction")
            i = futures[future]
            try:
                per_file[i] = future.result()
            except ExtractionError as e:
                errors[i] = e
                logger.warning("Skipping %s: %s", e.path, e.reason)

    for i in sorted(per_file):
        kept = [obj for obj in per_file[i] if options.accepts(obj)]
        logger.debug("%s: %d document(s), %d kept", files[i], len(per_file[i]), len(kept))
        result.resources.extend(kept)
    result.errors = [errors[i] for i in sorted(errors)]
    return result
