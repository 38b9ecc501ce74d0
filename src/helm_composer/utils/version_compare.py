"""Chart version validation."""

from __future__ import annotations

from packaging.version import Version, InvalidVersion


def parse_version(v: str) -> Version | None:
    """Parse a version string, returning None on failure."""
    try:
        return Version(v)
    except InvalidVersion:
        # Try stripping leading 'v'
        if v.startswith("v"):
            try:
                return Version(v[1:])
            except InvalidVersion:
                pass
    return None


def is_valid_chart_version(v: str) -> bool:
    """Helm requires a three-part version; pre-release suffixes are allowed."""
    parsed = parse_version(v)
    if parsed is None:
        return False
    return len(v.lstrip("v").split("+")[0].split("-")[0].split(".")) == 3
