"""Shared template model.

Every kind rule renders one *body* per kind. The body only talks to six
template variables, so the same text can be hosted by any output strategy:

    $root          the chart root context (``.`` of a template)
    $v             the resource's own values block
    $name          the object's metadata.name
    $component     the owning service name
    $annotations   the source annotations, as a dict
    $checksums     pod annotation key -> template file to hash, e.g.
                   ``config-web-config`` -> ``configmap-web-config.yaml``

Strategies differ only in the prelude that binds those variables: a
standalone template reads them from ``.Values`` while a library named
template receives them through an ``include`` dict.
"""

from __future__ import annotations

import json
from typing import Mapping, Sequence

from helm_composer.models.resource import ProcessedResource
from helm_composer.utils.naming import is_identifier

HELPERS_TOKEN = "<H>"


def render_body(body: str, helpers: str) -> str:
    """Bind a body written against ``<H>`` to a concrete helper prefix."""
    return body.replace(HELPERS_TOKEN, helpers)


def go_string(value: str) -> str:
    return json.dumps(str(value), ensure_ascii=False)


def values_expr(base: str, path: Sequence[str]) -> str:
    """Build a template expression reaching ``path`` below ``base``.

    Keys that are not plain identifiers go through ``index``.
    """
    expr = base
    for key in path:
        if is_identifier(key):
            expr = f"{expr}.{key}"
        else:
            expr = f"(index {expr} {go_string(key)})"
    return expr


def dict_literal(items: Mapping[str, str]) -> str:
    """A sprig ``dict`` call reproducing ``items`` in sorted key order."""
    if not items:
        return "dict"
    parts = " ".join(f"{go_string(k)} {go_string(v)}" for k, v in sorted(items.items()))
    return f"(dict {parts})"


def service_expr(service_name: str, flattened: bool) -> str:
    if flattened:
        return ".Values"
    return values_expr(".Values.services", [service_name])


def standalone_template(
    resource: ProcessedResource,
    helpers: str,
    flattened: bool = False,
    checksums: Mapping[str, str] | None = None,
) -> str:
    """Render a self-contained template for ``resource``.

    ``flattened`` charts hold a single service, so its block is ``.Values``
    itself instead of ``.Values.services.<name>``. ``checksums`` names the
    chart templates whose digest goes into the pod annotations.
    """
    svc = service_expr(resource.service_name, flattened)
    annotations = dict_literal(resource.original.annotations)
    lines = [
        "{{- $root := . -}}",
        f"{{{{- $svc := {svc} -}}}}",
        f"{{{{- $v := {values_expr('$svc', resource.service_path)} -}}}}",
        f"{{{{- $name := {go_string(resource.name)} -}}}}",
        f"{{{{- $component := {go_string(resource.service_name)} -}}}}",
        f"{{{{- $annotations := {annotations} -}}}}",
        f"{{{{- $checksums := {dict_literal(checksums or {})} -}}}}",
        "{{- if and $svc.enabled $v.enabled }}",
    ]
    return "\n".join(lines) + render_body(resource.template_body, helpers).rstrip("\n") + "\n{{- end }}\n"


def library_define(template_name: str, body: str, library: str) -> str:
    """The named template a library chart exports for one kind."""
    return (
        f'{{{{- define "{library}.{template_name}" -}}}}\n'
        "{{- $root := .context -}}\n"
        "{{- $v := .values -}}\n"
        "{{- $name := .name -}}\n"
        "{{- $component := .component -}}\n"
        "{{- $annotations := .annotations | default dict -}}\n"
        "{{- $checksums := .checksums | default dict -}}\n"
        "{{- if and .enabled $v.enabled }}"
        + render_body(body, library).rstrip("\n")
        + "\n{{- end }}\n{{- end }}\n"
    )


def library_include(
    resource: ProcessedResource,
    library: str,
    template_name: str,
    checksums: Mapping[str, str] | None = None,
) -> str:
    """A wrapper template: one include handing the resource values to the library."""
    svc = service_expr(resource.service_name, flattened=False)
    args = " ".join([
        '"context" $',
        f'"enabled" {svc}.enabled',
        f'"values" {values_expr(svc, resource.service_path)}',
        f'"name" {go_string(resource.name)}',
        f'"component" {go_string(resource.service_name)}',
        f'"annotations" {dict_literal(resource.original.annotations)}',
        f'"checksums" {dict_literal(checksums or {})}',
    ])
    return f'{{{{- include "{library}.{template_name}" (dict {args}) }}}}\n'


def guard_enabled(template: str) -> str:
    """Wrap a subchart template so ``<subchart>.enabled=false`` drops it."""
    return "{{- if .Values.enabled }}\n" + template.rstrip("\n") + "\n{{- end }}\n"


def prepend_comment(template: str, comment: str) -> str:
    """Lead ``template`` with template comments, which render to nothing."""
    lines = "".join(f"{{{{- /* {line} */ -}}}}\n" for line in comment.splitlines() if line.strip())
    return lines + template
