"""Schema inference from generated values: values.schema.json and OpenAPI files."""

from __future__ import annotations

import json
from typing import Any

JSON_SCHEMA_DRAFT = "https://json-schema.org/draft-07/schema#"


def infer_schema(value: Any) -> dict[str, Any]:
    """Describe ``value``'s shape; mapping keys are visited in sorted order."""
    if isinstance(value, bool):
        return {"type": "boolean"}
    if isinstance(value, int):
        return {"type": "integer"}
    if isinstance(value, float):
        return {"type": "number"}
    if isinstance(value, str):
        return {"type": "string"}
    if isinstance(value, dict):
        schema: dict[str, Any] = {"type": "object"}
        if value:
            schema["properties"] = {str(k): infer_schema(value[k]) for k in sorted(value, key=str)}
        return schema
    if isinstance(value, list):
        schema = {"type": "array"}
        if value:
            schema["items"] = infer_schema(value[0])
        return schema
    # null: any type is acceptable as an override
    return {}


def values_json_schema(values: dict[str, Any]) -> str:
    schema = {"$schema": JSON_SCHEMA_DRAFT}
    schema.update(infer_schema(values))
    return json.dumps(schema, indent=2, sort_keys=False) + "\n"


def openapi_schema(values: dict[str, Any]) -> dict[str, Any]:
    """OpenAPI v3 flavoured schema for module config values."""
    schema = infer_schema(values)
    schema.setdefault("type", "object")
    return schema
