"""Placement rule resolution and label predicate normalization."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import LabelPredicateError
from ..schemas.policy import Targeting, validate_targeting

logger = logging.getLogger(__name__)

DEFAULT_OPERATOR = "In"

_SCALAR_TYPES = (str, int, float, bool)


@dataclass(frozen=True, slots=True)
class MatchExpression:
    """Normalized ``{key, operator, values}`` cluster label predicate."""

    key: str
    operator: str = DEFAULT_OPERATOR
    values: Tuple[Any, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "operator": self.operator,
            "values": list(self.values),
        }


@dataclass(frozen=True, slots=True)
class SelectorPlacement:
    """Clusters chosen by exact label match."""

    match_labels: Mapping[str, str]


@dataclass(frozen=True, slots=True)
class ClusterSetPlacement:
    """Clusters chosen from named cluster sets, optionally filtered by labels."""

    cluster_sets: Tuple[str, ...]
    match_expressions: Tuple[MatchExpression, ...] = ()


PlacementRule = Union[SelectorPlacement, ClusterSetPlacement]


def resolve_placement_rule(targeting: Targeting, labels: Optional[Iterable[Any]] = None) -> PlacementRule:
    """Resolve targeting input into a single placement rule.

    Label predicates only apply to cluster-set placement; they are ignored for
    selector placement.
    """

    validate_targeting(targeting)
    labels = tuple(labels or ())

    if targeting.uses_selectors:
        if labels:
            logger.warning("Ignoring %d placement label(s): only used with cluster sets", len(labels))
        rule: PlacementRule = SelectorPlacement(match_labels=dict(targeting.selectors or {}))
        logger.debug("Resolved selector placement with %d label(s)", len(rule.match_labels))
        return rule

    rule = ClusterSetPlacement(
        cluster_sets=tuple(targeting.cluster_sets or ()),
        match_expressions=normalize_label_predicates(labels),
    )
    logger.debug(
        "Resolved cluster set placement: sets=%s expressions=%d",
        list(rule.cluster_sets),
        len(rule.match_expressions),
    )
    return rule


def normalize_label_predicates(entries: Iterable[Any]) -> Tuple[MatchExpression, ...]:
    """Normalize every predicate, preserving input and key order."""

    expressions: List[MatchExpression] = []
    for index, entry in enumerate(entries):
        expressions.extend(normalize_label_predicate(entry, index=index))
    return tuple(expressions)


def normalize_label_predicate(entry: Any, *, index: Optional[int] = None) -> List[MatchExpression]:
    """Normalize one predicate given in full or shorthand form.

    Full form ``{key, operator, values}`` yields one expression; shorthand
    ``{label: values, ...}`` yields one ``In`` expression per label.
    """

    where = _describe(index)
    if not isinstance(entry, Mapping):
        raise LabelPredicateError(
            f"Placement label{where} must be a mapping, got {type(entry).__name__}",
            field="placementLabels",
            index=index,
        )
    if not entry:
        raise LabelPredicateError(
            f"Placement label{where} is empty",
            field="placementLabels",
            index=index,
        )

    if "key" in entry:
        key = entry.get("key")
        if not isinstance(key, str) or not key:
            raise LabelPredicateError(
                f"Placement label{where} has an invalid key: {key!r}",
                field="placementLabels",
                index=index,
            )
        operator = entry.get("operator") or DEFAULT_OPERATOR
        if not isinstance(operator, str):
            raise LabelPredicateError(
                f"Placement label{where} has an invalid operator: {operator!r}",
                field="placementLabels",
                index=index,
            )
        values = _coerce_values(entry.get("values", []), label=key, where=where, index=index)
        return [MatchExpression(key=key, operator=operator, values=values)]

    expressions: List[MatchExpression] = []
    for key, raw_values in entry.items():
        values = _coerce_values(raw_values, label=key, where=where, index=index)
        expressions.append(MatchExpression(key=str(key), operator=DEFAULT_OPERATOR, values=values))
    return expressions


def _coerce_values(raw: Any, *, label: Any, where: str, index: Optional[int]) -> Tuple[Any, ...]:
    if raw is None:
        values: Sequence[Any] = []
    elif isinstance(raw, _SCALAR_TYPES):
        values = [raw]
    elif isinstance(raw, (list, tuple)):
        values = raw
    else:
        raise LabelPredicateError(
            f"Placement label{where} '{label}' values must be a string or a list, got {type(raw).__name__}",
            field="placementLabels",
            index=index,
        )
    for item in values:
        if not isinstance(item, _SCALAR_TYPES):
            raise LabelPredicateError(
                f"Placement label{where} '{label}' has a non-scalar value: {item!r}",
                field="placementLabels",
                index=index,
            )
    return tuple(values)


def _describe(index: Optional[int]) -> str:
    return f" #{index}" if index is not None else ""


__all__ = [
    "ClusterSetPlacement",
    "DEFAULT_OPERATOR",
    "MatchExpression",
    "PlacementRule",
    "SelectorPlacement",
    "normalize_label_predicate",
    "normalize_label_predicates",
    "resolve_placement_rule",
]
