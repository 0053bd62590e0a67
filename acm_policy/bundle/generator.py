"""PolicyGenerator and kustomization documents for the policy workspace."""

from __future__ import annotations

from typing import Any, Dict

from ..schemas.policy import PolicySpec, validate_targeting
from .builder import POLICY_API_VERSION

POLICY_GENERATOR_FILENAME = "policygenerator.yaml"
KUSTOMIZATION_FILENAME = "kustomization.yaml"


def render_policy_generator(spec: PolicySpec, manifests_path: str = "manifests") -> Dict[str, Any]:
    """Return the PolicyGenerator document describing ``spec``.

    Unlike the processed bundle, the policy-level ``complianceType`` is carried
    here when set.
    """

    validate_targeting(spec.targeting)

    policy_entry: Dict[str, Any] = {
        "name": spec.name,
        "manifests": [{"path": manifests_path}],
    }
    if spec.compliance_type is not None:
        policy_entry["complianceType"] = spec.compliance_type.value

    placement_entry: Dict[str, Any] = {"name": spec.placement_name}
    if spec.targeting.uses_cluster_sets:
        placement_entry["clusterSets"] = list(spec.targeting.cluster_sets or ())
    else:
        placement_entry["clusterSelectors"] = dict(spec.targeting.selectors or {})

    return {
        "apiVersion": POLICY_API_VERSION,
        "kind": "PolicyGenerator",
        "metadata": {"name": spec.name},
        "policyDefaults": {
            "namespace": spec.namespace,
            "remediationAction": spec.remediation.value,
        },
        "policies": [policy_entry],
        "placement": [placement_entry],
    }


def render_kustomization() -> Dict[str, Any]:
    return {"resources": [POLICY_GENERATOR_FILENAME]}


__all__ = [
    "KUSTOMIZATION_FILENAME",
    "POLICY_GENERATOR_FILENAME",
    "render_kustomization",
    "render_policy_generator",
]
