"""Policy bundle assembly."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from ..schemas.policy import PolicySpec, validate_manifests
from .placement import ClusterSetPlacement, PlacementRule, SelectorPlacement

logger = logging.getLogger(__name__)

POLICY_API_GROUP = "policy.open-cluster-management.io"
CLUSTER_API_GROUP = "cluster.open-cluster-management.io"

POLICY_API_VERSION = f"{POLICY_API_GROUP}/v1"
PLACEMENT_API_VERSION = f"{CLUSTER_API_GROUP}/v1beta1"
CLUSTER_SET_BINDING_API_VERSION = f"{CLUSTER_API_GROUP}/v1beta2"

OBJECT_TEMPLATE_COMPLIANCE = "musthave"
CONFIGURATION_POLICY_SEVERITY = "low"

KIND_POLICY = "Policy"
KIND_CONFIGURATION_POLICY = "ConfigurationPolicy"
KIND_PLACEMENT = "Placement"
KIND_PLACEMENT_BINDING = "PlacementBinding"
KIND_CLUSTER_SET_BINDING = "ManagedClusterSetBinding"


@dataclass(frozen=True, slots=True)
class ResourceDocument:
    """One resource of the bundle with its identity."""

    kind: str
    name: str
    namespace: Optional[str]
    body: Dict[str, Any]


@dataclass(frozen=True, slots=True)
class ResourceBundle:
    """Ordered resources: Policy, cluster set bindings, Placement, PlacementBinding."""

    documents: Tuple[ResourceDocument, ...]

    def __iter__(self) -> Iterator[ResourceDocument]:
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    def kinds(self) -> List[str]:
        return [document.kind for document in self.documents]

    def of_kind(self, kind: str) -> List[ResourceDocument]:
        return [document for document in self.documents if document.kind == kind]

    def bodies(self) -> List[Dict[str, Any]]:
        return [document.body for document in self.documents]


class PolicyBundleBuilder:
    """Builds the resource bundle for one policy intent."""

    def build(self, spec: PolicySpec, rule: PlacementRule) -> ResourceBundle:
        """Return the ordered bundle for ``spec`` targeted by ``rule``."""

        validate_manifests(spec.manifests)

        documents: List[ResourceDocument] = [self._policy(spec)]
        if isinstance(rule, ClusterSetPlacement):
            documents.extend(self._cluster_set_binding(spec, name) for name in rule.cluster_sets)
            placement_spec = self._cluster_set_placement_spec(rule)
        elif isinstance(rule, SelectorPlacement):
            placement_spec = self._selector_placement_spec(rule)
        else:
            raise TypeError(f"Unsupported placement rule: {type(rule).__name__}")

        documents.append(self._placement(spec, placement_spec))
        documents.append(self._placement_binding(spec))

        bundle = ResourceBundle(documents=tuple(documents))
        logger.debug("Built bundle for policy %s: %s", spec.name, bundle.kinds())
        return bundle

    def _policy(self, spec: PolicySpec) -> ResourceDocument:
        remediation = spec.remediation.value
        body = {
            "apiVersion": POLICY_API_VERSION,
            "kind": KIND_POLICY,
            "metadata": {
                "name": spec.name,
                "namespace": spec.namespace,
            },
            "spec": {
                "remediationAction": remediation,
                "disabled": False,
                "policy-templates": [
                    {
                        "objectDefinition": {
                            "apiVersion": POLICY_API_VERSION,
                            "kind": KIND_CONFIGURATION_POLICY,
                            "metadata": {"name": spec.name},
                            "spec": {
                                "remediationAction": remediation,
                                "severity": CONFIGURATION_POLICY_SEVERITY,
                                "object-templates": self._object_templates(spec),
                            },
                        }
                    }
                ],
                "placement": [
                    {
                        "placement": spec.placement_name,
                        "placementBinding": spec.binding_name,
                    }
                ],
            },
        }
        return ResourceDocument(kind=KIND_POLICY, name=spec.name, namespace=spec.namespace, body=body)

    def _object_templates(self, spec: PolicySpec) -> List[Dict[str, Any]]:
        # complianceType is fixed per object; spec.compliance_type only reaches the PolicyGenerator.
        templates: List[Dict[str, Any]] = []
        for manifest in spec.manifests:
            template: Dict[str, Any] = {
                "complianceType": OBJECT_TEMPLATE_COMPLIANCE,
                "objectDefinition": _plain(manifest),
            }
            if spec.prune_object_behavior is not None:
                template["pruneObjectBehavior"] = spec.prune_object_behavior.value
            templates.append(template)
        return templates

    def _cluster_set_binding(self, spec: PolicySpec, cluster_set: str) -> ResourceDocument:
        body = {
            "apiVersion": CLUSTER_SET_BINDING_API_VERSION,
            "kind": KIND_CLUSTER_SET_BINDING,
            "metadata": {
                "name": cluster_set,
                "namespace": spec.namespace,
            },
            "spec": {"clusterSet": cluster_set},
        }
        return ResourceDocument(
            kind=KIND_CLUSTER_SET_BINDING,
            name=cluster_set,
            namespace=spec.namespace,
            body=body,
        )

    def _selector_placement_spec(self, rule: SelectorPlacement) -> Dict[str, Any]:
        return {
            "clusterSets": [],
            "numberOfClusters": None,
            "predicates": [
                {
                    "requiredClusterSelector": {
                        "labelSelector": {"matchLabels": dict(rule.match_labels)},
                    }
                }
            ],
        }

    def _cluster_set_placement_spec(self, rule: ClusterSetPlacement) -> Dict[str, Any]:
        placement_spec: Dict[str, Any] = {"clusterSets": list(rule.cluster_sets)}
        if rule.match_expressions:
            placement_spec["predicates"] = [
                {
                    "requiredClusterSelector": {
                        "labelSelector": {
                            "matchExpressions": [expression.to_dict() for expression in rule.match_expressions],
                        }
                    }
                }
            ]
        return placement_spec

    def _placement(self, spec: PolicySpec, placement_spec: Dict[str, Any]) -> ResourceDocument:
        body = {
            "apiVersion": PLACEMENT_API_VERSION,
            "kind": KIND_PLACEMENT,
            "metadata": {
                "name": spec.placement_name,
                "namespace": spec.namespace,
            },
            "spec": placement_spec,
        }
        return ResourceDocument(
            kind=KIND_PLACEMENT,
            name=spec.placement_name,
            namespace=spec.namespace,
            body=body,
        )

    def _placement_binding(self, spec: PolicySpec) -> ResourceDocument:
        body = {
            "apiVersion": POLICY_API_VERSION,
            "kind": KIND_PLACEMENT_BINDING,
            "metadata": {
                "name": spec.binding_name,
                "namespace": spec.namespace,
            },
            "placementRef": {
                "name": spec.placement_name,
                "kind": KIND_PLACEMENT,
                "apiGroup": CLUSTER_API_GROUP,
            },
            "subjects": [
                {
                    "name": spec.name,
                    "kind": KIND_POLICY,
                    "apiGroup": POLICY_API_GROUP,
                }
            ],
        }
        return ResourceDocument(
            kind=KIND_PLACEMENT_BINDING,
            name=spec.binding_name,
            namespace=spec.namespace,
            body=body,
        )


def _plain(value: Any) -> Any:
    """Copy manifest content into plain dicts and lists the YAML dumper can represent."""

    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return copy.deepcopy(value)


__all__ = [
    "PolicyBundleBuilder",
    "ResourceBundle",
    "ResourceDocument",
]
