"""Deterministic YAML rendering for chart files."""

from __future__ import annotations

from typing import Any

import yaml


class ChartDumper(yaml.SafeDumper):
    """Block-style dumper: indented sequences, literal blocks for multi-line strings."""

    def increase_indent(self, flow: bool = False, indentless: bool = False):
        return super().increase_indent(flow, False)


def _str_representer(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        # Literal style cannot carry trailing spaces on a line
        if any(line != line.rstrip() for line in data.splitlines()):
            return dumper.represent_scalar("tag:yaml.org,2002:str", data, style='"')
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


ChartDumper.add_representer(str, _str_representer)


def dump_yaml(data: Any, header: str = "") -> str:
    """Dump ``data`` preserving key insertion order, with an optional comment header."""
    body = yaml.dump(
        data,
        Dumper=ChartDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=1000,
    )
    if header:
        return header.rstrip("\n") + "\n" + body
    return body


def load_yaml(text: str) -> Any:
    return yaml.safe_load(text)
