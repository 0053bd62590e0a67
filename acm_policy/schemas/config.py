"""Pydantic model for the policy configuration file."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .policy import ComplianceType, PruneObjectBehavior, RemediationAction


class PolicyConfig(BaseModel):
    """Configuration accepted from a YAML file and/or command-line flags."""

    policy_name: str = Field(..., alias="policyName", min_length=1)
    namespace: str = "policies"
    remediation_action: RemediationAction = Field(default=RemediationAction.ENFORCE, alias="remediationAction")
    compliance_type: Optional[ComplianceType] = Field(default=None, alias="complianceType")
    prune_object_behavior: Optional[PruneObjectBehavior] = Field(default=None, alias="pruneObjectBehavior")
    files: List[str] = Field(default_factory=list)
    cluster_selectors: Dict[str, str] = Field(default_factory=dict, alias="clusterSelectors")
    cluster_sets: List[str] = Field(default_factory=list, alias="clusterSets")
    placement_labels: List[Any] = Field(
        default_factory=list,
        alias="placementLabels",
        description="Full {key, operator, values} or shorthand {label: values} predicates.",
    )
    output_dir: Optional[str] = Field(default=None, alias="outputDir")
    process_policy_generator: bool = Field(default=True, alias="processPolicyGenerator")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("compliance_type", "prune_object_behavior", mode="before")
    @classmethod
    def _empty_as_unset(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @field_validator("cluster_selectors", mode="before")
    @classmethod
    def _stringify_selector_values(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(key): _scalar_to_str(item) for key, item in value.items()}
        return value

    @field_validator("files", "cluster_sets", "placement_labels", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        if value is None:
            return []
        return value

    @property
    def resolved_output_dir(self) -> str:
        return self.output_dir or f"acm-policy-{self.policy_name}"


def _scalar_to_str(value: Any) -> Any:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return value


__all__ = ["PolicyConfig"]
