"""Resolve -> build -> serialize chain for one policy intent."""

from __future__ import annotations

from typing import Optional

from ..schemas.policy import PolicySpec, validate_policy_spec
from .builder import PolicyBundleBuilder, ResourceBundle
from .placement import resolve_placement_rule
from .serializer import serialize_bundle


def generate_policy_bundle(spec: PolicySpec, *, builder: Optional[PolicyBundleBuilder] = None) -> ResourceBundle:
    """Validate ``spec`` and build its resource bundle."""

    validate_policy_spec(spec)
    rule = resolve_placement_rule(spec.targeting, spec.placement_labels)
    return (builder or PolicyBundleBuilder()).build(spec, rule)


def render_policy_bundle(spec: PolicySpec) -> str:
    """Return the serialized multi-document bundle for ``spec``."""

    return serialize_bundle(generate_policy_bundle(spec))
