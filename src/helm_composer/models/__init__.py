"""Data models for Helm Composer."""

from __future__ import annotations

import enum

from helm_composer.core.errors import GenerationError


class OutputMode(enum.Enum):
    UNIVERSAL = "universal"
    SEPARATE = "separate"
    LIBRARY = "library"
    UMBRELLA = "umbrella"

    @classmethod
    def parse(cls, value: str | OutputMode) -> OutputMode:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise GenerationError(f"no generator registered for mode {value}") from None


class RelationshipType(enum.Enum):
    LABEL_SELECTOR = "label_selector"
    NETWORK_POLICY = "network_policy"
    BACKEND_REFERENCE = "backend_reference"
    SCALE_TARGET = "scale_target"
    DISRUPTION_BUDGET = "disruption_budget"
    ROLE_REFERENCE = "role_reference"
    CONFIG_REFERENCE = "config_reference"
    VOLUME_MOUNT = "volume_mount"
    SERVICE_NAME = "service_name"
    SERVICE_ACCOUNT = "service_account"
    IMAGE_PULL_SECRET = "image_pull_secret"
    TLS_SECRET = "tls_secret"
    SERVICE_MONITOR = "service_monitor"
    ANNOTATION_REFERENCE = "annotation_reference"
