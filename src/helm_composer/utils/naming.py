"""Name normalization helpers shared by kind rules and generators."""

from __future__ import annotations

import re

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")


def is_identifier(key: str) -> bool:
    """True when ``key`` can be addressed as ``.key`` in a Go template."""
    return bool(_IDENTIFIER.match(key))


def lower_camel(value: str) -> str:
    """``HorizontalPodAutoscaler`` -> ``horizontalPodAutoscaler``."""
    if not value:
        return value
    return value[0].lower() + value[1:]


def pascal_case(value: str) -> str:
    """``webapp-headless.v2`` -> ``WebappHeadlessV2``."""
    return "".join(part[:1].upper() + part[1:] for part in _WORD_SPLIT.split(value) if part)


def dns_label(value: str) -> str:
    """Coerce ``value`` into a lowercase DNS-1123 label usable as a chart name."""
    cleaned = re.sub(r"[^a-z0-9-]+", "-", value.lower()).strip("-")
    cleaned = re.sub(r"-{2,}", "-", cleaned)
    return cleaned[:63].rstrip("-") or "chart"
