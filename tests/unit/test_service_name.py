"""Tests for service-name inference and normalization."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from conftest import make_configmap, make_deployment, make_secret, make_service, obj
from helm_composer.core.processors.service_name import (
    ROLE_SUFFIXES,
    infer_service_name,
    name_candidate,
    normalize_service_name,
)


class TestNameCandidate:
    def test_prefers_standard_name_label(self) -> None:
        manifest = make_deployment("web-v2", labels={"app.kubernetes.io/name": "web", "app": "legacy"})
        assert name_candidate(obj(manifest)) == "web"

    def test_falls_back_to_legacy_app_label(self) -> None:
        manifest = make_deployment("web-v2", labels={"app": "legacy"})
        assert name_candidate(obj(manifest)) == "legacy"

    def test_falls_back_to_metadata_name(self) -> None:
        manifest = make_deployment("web-v2", labels={})
        assert name_candidate(obj(manifest)) == "web-v2"

    def test_blank_label_is_ignored(self) -> None:
        manifest = make_deployment("web", labels={"app.kubernetes.io/name": "  "})
        assert name_candidate(obj(manifest)) == "web"


class TestNormalize:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("webapp", "webapp"),
            ("webapp-config", "webapp"),
            ("webapp-configmap", "webapp"),
            ("webapp-secret", "webapp"),
            ("webapp-svc", "webapp"),
            ("webapp-headless", "webapp"),
            ("WebApp-Service", "webapp"),
            ("webapp-hpa", "webapp"),
            ("redis-data", "redis"),
        ],
    )
    def test_known_suffixes(self, raw: str, expected: str) -> None:
        assert normalize_service_name(raw) == expected

    def test_strips_only_one_suffix(self) -> None:
        assert normalize_service_name("webapp-config-secret") == "webapp-config"

    def test_bare_suffix_is_kept(self) -> None:
        assert normalize_service_name("-config") == "-config"
        assert normalize_service_name("config") == "config"

    def test_longest_suffix_wins(self) -> None:
        # -configmap must not be read as -config + "map"
        assert normalize_service_name("app-configmap") == "app"
        assert normalize_service_name("app-serviceaccount") == "app"

    def test_unrelated_suffix_untouched(self) -> None:
        assert normalize_service_name("webapp-api") == "webapp-api"


class TestInferServiceName:
    def test_stack_converges_on_one_service(self) -> None:
        names = {
            infer_service_name(obj(make_deployment("webapp"))),
            infer_service_name(obj(make_service("webapp-svc", labels={}))),
            infer_service_name(obj(make_configmap("webapp-config"))),
            infer_service_name(obj(make_secret("webapp-secret"))),
        }
        assert names == {"webapp"}

    def test_label_value_is_normalized_too(self) -> None:
        manifest = make_configmap("settings", labels={"app": "Webapp-Config"})
        assert infer_service_name(obj(manifest)) == "webapp"


_name = st.from_regex(r"[a-z][a-z0-9]{0,10}(-[a-z0-9]{1,6}){0,2}", fullmatch=True)


@given(base=_name, suffix=st.sampled_from(ROLE_SUFFIXES))
def test_suffixed_names_fold_into_base(base: str, suffix: str) -> None:
    assert normalize_service_name(base + suffix) == normalize_service_name(base) or \
        normalize_service_name(base + suffix) == base


@given(raw=_name)
def test_normalization_is_lowercase_and_non_empty(raw: str) -> None:
    result = normalize_service_name(raw.upper())
    assert result
    assert result == result.lower()
