"""Properties that must hold for any input batch."""

from __future__ import annotations

from hypothesis import given, settings as hyp_settings, strategies as st

from conftest import (
    make_configmap,
    make_container,
    make_deployment,
    make_hpa,
    make_ingress,
    make_secret,
    make_service,
    objs,
    webapp_stack,
)
from helm_composer.config.settings import GeneratorOptions
from helm_composer.core.pipeline import Pipeline
from helm_composer.models import RelationshipType
from helm_composer.output.writer import render_chart

SERVICE_NAMES = ["web", "api", "worker", "cache", "auth"]

KIND_BUILDERS = {
    "Deployment": lambda n: make_deployment(n),
    "Service": lambda n: make_service(n),
    "ConfigMap": lambda n: make_configmap(f"{n}-config"),
    "Secret": lambda n: make_secret(f"{n}-secret"),
    "HorizontalPodAutoscaler": lambda n: make_hpa(f"{n}-hpa", target=n),
    "Ingress": lambda n: make_ingress(f"{n}-ingress", service=n),
}

batches = st.dictionaries(
    st.sampled_from(SERVICE_NAMES),
    st.sets(st.sampled_from(sorted(KIND_BUILDERS)), min_size=1),
    min_size=1,
)


def _manifests(batch: dict[str, set[str]]) -> list[dict]:
    return [KIND_BUILDERS[kind](name) for name, kinds in batch.items() for kind in sorted(kinds)]


def _options(mode: str = "universal") -> GeneratorOptions:
    return GeneratorOptions(chart_name="props", chart_version="0.1.0", app_version="1.0.0", mode=mode)


class TestPartition:
    @given(batch=batches)
    @hyp_settings(max_examples=40, deadline=None)
    def test_every_resource_in_exactly_one_group(self, batch: dict[str, set[str]]) -> None:
        manifests = _manifests(batch)
        graph = Pipeline(workers=1).analyze(objs(*manifests), _options()).graph
        members = [r.ref for g in graph.groups for r in g.resources]
        assert len(members) == len(manifests)
        assert len(set(members)) == len(members)
        assert sorted(graph.group_names) == sorted(batch)

    @given(batch=batches)
    @hyp_settings(max_examples=20, deadline=None)
    def test_one_template_per_resource(self, batch: dict[str, set[str]]) -> None:
        manifests = _manifests(batch)
        result = Pipeline(workers=1).run(objs(*manifests), _options())
        assert len(result.charts[0].templates) == len(manifests)


class TestDeterminism:
    def test_worker_count_does_not_change_output(self) -> None:
        manifests = [*webapp_stack("web"), *webapp_stack("api"), make_hpa("web-hpa", target="web")]
        for mode in ("universal", "separate", "library", "umbrella"):
            outputs = [
                [render_chart(c) for c in Pipeline(workers=n).run(objs(*manifests), _options(mode)).charts]
                for n in (1, 4, 1)
            ]
            assert outputs[0] == outputs[1] == outputs[2]


class TestRelationshipCompleteness:
    def test_every_resolvable_reference_becomes_an_edge(self) -> None:
        names = ["web", "api"]
        manifests = [m for n in names for m in webapp_stack(n)]
        manifests += [make_ingress("edge", service="web"), make_hpa("api-hpa", target="api")]
        graph = Pipeline(workers=1).analyze(objs(*manifests), _options()).graph

        def edges(rel_type: RelationshipType) -> set[tuple[str, str]]:
            return {(str(r.source), str(r.target)) for r in graph.relationships_of_type(rel_type)}

        for n in names:
            assert (f"Service/default/{n}", f"Deployment/default/{n}") in edges(RelationshipType.LABEL_SELECTOR)
            config = edges(RelationshipType.CONFIG_REFERENCE)
            assert (f"Deployment/default/{n}", f"ConfigMap/default/{n}-config") in config
            assert (f"Deployment/default/{n}", f"Secret/default/{n}-secret") in config
        assert ("Ingress/default/edge", "Service/default/web") in edges(RelationshipType.BACKEND_REFERENCE)
        assert ("HorizontalPodAutoscaler/default/api-hpa", "Deployment/default/api") in edges(
            RelationshipType.SCALE_TARGET,
        )

    def test_unresolved_references_produce_no_edges(self) -> None:
        manifests = [make_deployment("web", containers=[make_container(env_from_configmaps=["missing"])])]
        graph = Pipeline(workers=1).analyze(objs(*manifests), _options()).graph
        assert graph.relationships == ()

    def test_no_duplicate_edges(self) -> None:
        graph = Pipeline(workers=1).analyze(objs(*webapp_stack()), _options()).graph
        keys = [r.key for r in graph.relationships]
        assert len(keys) == len(set(keys))


class TestLibraryDry:
    def test_each_kind_defined_once(self) -> None:
        manifests = [m for n in SERVICE_NAMES for m in webapp_stack(n)]
        charts = Pipeline(workers=1).run(objs(*manifests), _options("library")).charts
        library = charts[0]
        defines = "".join(library.templates.values())
        assert len(library.templates) == 4
        for kind in ("deployment", "service", "configmap", "secret"):
            assert defines.count(f'define "library.{kind}"') == 1
        assert len(charts) == len(SERVICE_NAMES) + 1


class TestUmbrellaEnablement:
    def test_every_subchart_is_switchable(self) -> None:
        manifests = [m for n in ("web", "api", "worker") for m in webapp_stack(n)]
        charts = Pipeline(workers=1).run(objs(*manifests), _options("umbrella")).charts
        parent, subs = charts[0], charts[1:]
        assert [d.condition for d in parent.dependencies] == [f"{s.name}.enabled" for s in subs]
        for sub in subs:
            assert parent.values[sub.name]["enabled"] is True
            assert all(t.startswith("{{- if .Values.enabled }}") for t in sub.templates.values())
