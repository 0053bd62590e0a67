from __future__ import annotations

import logging

import pytest

from acm_policy.bundle.placement import (
    ClusterSetPlacement,
    MatchExpression,
    SelectorPlacement,
    normalize_label_predicate,
    normalize_label_predicates,
    resolve_placement_rule,
)
from acm_policy.errors import ConfigError, LabelPredicateError
from acm_policy.schemas.policy import Targeting


def test_shorthand_list_expands_to_in_expression() -> None:
    expressions = normalize_label_predicate({"environment": ["dev", "test"]})
    assert [expression.to_dict() for expression in expressions] == [
        {"key": "environment", "operator": "In", "values": ["dev", "test"]}
    ]


def test_shorthand_scalar_becomes_single_value_list() -> None:
    (expression,) = normalize_label_predicate({"environment": "dev"})
    assert expression == MatchExpression(key="environment", operator="In", values=("dev",))


def test_shorthand_expands_one_entry_per_key_in_order() -> None:
    expressions = normalize_label_predicate({"region": "us-east", "tier": ["web", "db"]})
    assert [expression.key for expression in expressions] == ["region", "tier"]
    assert expressions[1].values == ("web", "db")


def test_full_form_passes_through() -> None:
    (expression,) = normalize_label_predicate({"key": "env", "operator": "NotIn", "values": ["prod"]})
    assert expression.to_dict() == {"key": "env", "operator": "NotIn", "values": ["prod"]}


def test_full_form_defaults_operator_and_values() -> None:
    (expression,) = normalize_label_predicate({"key": "gpu"})
    assert expression.operator == "In"
    assert expression.values == ()

    (exists,) = normalize_label_predicate({"key": "gpu", "operator": "Exists"})
    assert exists.to_dict() == {"key": "gpu", "operator": "Exists", "values": []}


def test_predicates_preserve_outer_then_inner_order() -> None:
    expressions = normalize_label_predicates(
        [
            {"key": "env", "operator": "In", "values": ["dev"]},
            {"zone": ["a", "b"], "arch": "arm64"},
        ]
    )
    assert [expression.key for expression in expressions] == ["env", "zone", "arch"]


@pytest.mark.parametrize(
    "entry",
    [
        "environment=dev",
        ["environment"],
        {},
        {"key": ""},
        {"key": 3, "values": ["x"]},
        {"key": "env", "operator": ["In"]},
        {"key": "env", "values": {"nested": "map"}},
        {"environment": {"nested": "map"}},
        {"environment": [["dev"]]},
    ],
)
def test_malformed_predicates_are_rejected(entry: object) -> None:
    with pytest.raises(LabelPredicateError) as excinfo:
        normalize_label_predicates([{"key": "ok"}, entry])
    assert excinfo.value.index == 1
    assert excinfo.value.field == "placementLabels"


def test_selector_targeting_resolves_verbatim() -> None:
    selectors = {"environment": "prod", "region": "us-east"}
    rule = resolve_placement_rule(Targeting(selectors=selectors))
    assert isinstance(rule, SelectorPlacement)
    assert rule.match_labels == selectors
    assert list(rule.match_labels) == ["environment", "region"]


def test_selector_targeting_ignores_labels(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="acm_policy.bundle.placement"):
        rule = resolve_placement_rule(Targeting(selectors={"env": "prod"}), [{"bad": {"shape": 1}}])
    assert isinstance(rule, SelectorPlacement)
    assert "Ignoring 1 placement label" in caplog.text


def test_cluster_set_targeting_normalizes_labels() -> None:
    rule = resolve_placement_rule(
        Targeting(cluster_sets=["east", "west"]),
        [{"environment": ["dev", "test"]}],
    )
    assert isinstance(rule, ClusterSetPlacement)
    assert rule.cluster_sets == ("east", "west")
    assert rule.match_expressions == (
        MatchExpression(key="environment", operator="In", values=("dev", "test")),
    )


def test_cluster_set_targeting_without_labels_has_no_expressions() -> None:
    rule = resolve_placement_rule(Targeting(cluster_sets=["east"]))
    assert isinstance(rule, ClusterSetPlacement)
    assert rule.match_expressions == ()


@pytest.mark.parametrize(
    "targeting",
    [
        Targeting(selectors={"env": "prod"}, cluster_sets=["east"]),
        Targeting(),
        Targeting(selectors={}, cluster_sets=[]),
    ],
)
def test_invalid_targeting_union_raises(targeting: Targeting) -> None:
    with pytest.raises(ConfigError) as excinfo:
        resolve_placement_rule(targeting)
    assert excinfo.value.field == "targeting"


def test_labels_may_be_any_iterable(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="acm_policy.bundle.placement"):
        rule = resolve_placement_rule(Targeting(selectors={"env": "prod"}), (label for label in [{"tier": "web"}]))
    assert isinstance(rule, SelectorPlacement)
    assert "Ignoring 1 placement label" in caplog.text

    rule = resolve_placement_rule(Targeting(cluster_sets=["east"]), (label for label in [{"tier": "web"}]))
    assert isinstance(rule, ClusterSetPlacement)
    assert rule.match_expressions == (MatchExpression(key="tier", operator="In", values=("web",)),)
