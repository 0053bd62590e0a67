"""Bundle assembly utilities."""

from .builder import PolicyBundleBuilder, ResourceBundle, ResourceDocument
from .generator import render_kustomization, render_policy_generator
from .pipeline import generate_policy_bundle, render_policy_bundle
from .placement import (
    ClusterSetPlacement,
    MatchExpression,
    PlacementRule,
    SelectorPlacement,
    normalize_label_predicate,
    normalize_label_predicates,
    resolve_placement_rule,
)
from .serializer import load_bundle_text, serialize_bundle, serialize_document

__all__ = [
    "ClusterSetPlacement",
    "MatchExpression",
    "PlacementRule",
    "PolicyBundleBuilder",
    "ResourceBundle",
    "ResourceDocument",
    "SelectorPlacement",
    "generate_policy_bundle",
    "load_bundle_text",
    "normalize_label_predicate",
    "normalize_label_predicates",
    "render_kustomization",
    "render_policy_bundle",
    "render_policy_generator",
    "resolve_placement_rule",
    "serialize_bundle",
    "serialize_document",
]
