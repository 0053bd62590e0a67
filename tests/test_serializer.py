from __future__ import annotations

import yaml

from acm_policy.bundle.pipeline import generate_policy_bundle, render_policy_bundle
from acm_policy.bundle.serializer import load_bundle_text, serialize_bundle, serialize_document
from acm_policy.schemas.policy import PolicySpec, Targeting


def _spec(targeting: Targeting, **overrides: object) -> PolicySpec:
    values: dict[str, object] = {
        "name": "demo",
        "namespace": "policies",
        "remediation": "enforce",
        "targeting": targeting,
        "manifests": [
            {
                "apiVersion": "v1",
                "kind": "ConfigMap",
                "metadata": {"name": "banner"},
                "data": {
                    "message": "Bienvenue à bord, ようこそ",
                    "motd": "x" * 300,
                },
            }
        ],
    }
    values.update(overrides)
    return PolicySpec(**values)  # type: ignore[arg-type]


def _separator_lines(text: str) -> list[int]:
    return [index for index, line in enumerate(text.splitlines()) if line == "---"]


def test_four_documents_have_three_separators() -> None:
    text = render_policy_bundle(_spec(Targeting(cluster_sets=["east"])))

    separators = _separator_lines(text)
    assert len(separators) == 3
    assert not text.startswith("---")
    assert not text.rstrip("\n").endswith("---")


def test_null_renders_as_empty_scalar() -> None:
    text = render_policy_bundle(_spec(Targeting(selectors={"environment": "prod"})))

    assert "null" not in text
    (placement_line,) = [line for line in text.splitlines() if "numberOfClusters" in line]
    assert placement_line.strip() == "numberOfClusters:"
    assert "clusterSets: []" in text


def test_key_order_follows_construction() -> None:
    text = serialize_document({"zeta": 1, "alpha": {"b": 2, "a": 1}})
    assert text == "zeta: 1\nalpha:\n  b: 2\n  a: 1\n"


def test_policy_document_starts_with_api_version_and_kind() -> None:
    text = render_policy_bundle(_spec(Targeting(selectors={"environment": "prod"})))
    lines = text.splitlines()
    assert lines[0] == "apiVersion: policy.open-cluster-management.io/v1"
    assert lines[1] == "kind: Policy"


def test_unicode_and_long_values_are_not_escaped_or_wrapped() -> None:
    text = render_policy_bundle(_spec(Targeting(selectors={"environment": "prod"})))

    assert "Bienvenue à bord, ようこそ" in text
    assert "\\u" not in text
    assert f"motd: {'x' * 300}" in text


def test_round_trip_preserves_documents() -> None:
    spec = _spec(
        Targeting(cluster_sets=["east", "west"]),
        placement_labels=[{"environment": "dev"}],
        prune_object_behavior="DeleteAll",
    )
    bundle = generate_policy_bundle(spec)

    reparsed = load_bundle_text(serialize_bundle(bundle))

    assert reparsed == bundle.bodies()
    assert [list(document) for document in reparsed] == [list(body) for body in bundle.bodies()]


def test_selector_round_trip_restores_null() -> None:
    bundle = generate_policy_bundle(_spec(Targeting(selectors={"environment": "prod"})))
    reparsed = list(yaml.safe_load_all(serialize_bundle(bundle)))

    placement = reparsed[1]
    assert placement["spec"]["numberOfClusters"] is None
    assert reparsed == bundle.bodies()
