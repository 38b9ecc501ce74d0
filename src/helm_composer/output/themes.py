"""Relationship and output mode color maps."""

from helm_composer.models import OutputMode, RelationshipType

RELATIONSHIP_COLORS: dict[RelationshipType, str] = {
    RelationshipType.LABEL_SELECTOR: "green",
    RelationshipType.NETWORK_POLICY: "red",
    RelationshipType.BACKEND_REFERENCE: "cyan",
    RelationshipType.SCALE_TARGET: "magenta",
    RelationshipType.DISRUPTION_BUDGET: "magenta",
    RelationshipType.ROLE_REFERENCE: "yellow",
    RelationshipType.CONFIG_REFERENCE: "blue",
    RelationshipType.VOLUME_MOUNT: "blue",
    RelationshipType.SERVICE_NAME: "green",
    RelationshipType.SERVICE_ACCOUNT: "yellow",
    RelationshipType.IMAGE_PULL_SECRET: "dim",
    RelationshipType.TLS_SECRET: "dim",
    RelationshipType.SERVICE_MONITOR: "cyan",
    RelationshipType.ANNOTATION_REFERENCE: "dim",
}

MODE_COLORS: dict[OutputMode, str] = {
    OutputMode.UNIVERSAL: "green",
    OutputMode.SEPARATE: "cyan",
    OutputMode.LIBRARY: "magenta",
    OutputMode.UMBRELLA: "blue",
}


def styled_relationship(rel_type: RelationshipType) -> str:
    color = RELATIONSHIP_COLORS.get(rel_type, "white")
    return f"[{color}]{rel_type.value}[/{color}]"


def styled_mode(mode: OutputMode) -> str:
    color = MODE_COLORS.get(mode, "white")
    return f"[{color}]{mode.value}[/{color}]"


def styled_chart_type(chart_type: str) -> str:
    color = "magenta" if chart_type == "library" else "green"
    return f"[{color}]{chart_type}[/{color}]"
