"""Schema definitions for policy intent and configuration."""

from .config import PolicyConfig
from .policy import (
    ComplianceType,
    ManifestSet,
    PolicySpec,
    PruneObjectBehavior,
    RemediationAction,
    Targeting,
    validate_policy_spec,
)

__all__ = [
    "ComplianceType",
    "ManifestSet",
    "PolicyConfig",
    "PolicySpec",
    "PruneObjectBehavior",
    "RemediationAction",
    "Targeting",
    "validate_policy_spec",
]
