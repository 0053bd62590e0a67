"""In-memory policy intent consumed by the bundle builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional, Sequence, Type, TypeVar, Union

from ..errors import ConfigError, ManifestError


class RemediationAction(str, Enum):
    ENFORCE = "enforce"
    INFORM = "inform"


class ComplianceType(str, Enum):
    MUSTHAVE = "musthave"
    MUSTNOTHAVE = "mustnothave"


class PruneObjectBehavior(str, Enum):
    NONE = "none"
    DELETE_ALL = "DeleteAll"
    DELETE_IF_CREATED = "DeleteIfCreated"


_E = TypeVar("_E", bound=Enum)


def coerce_enum(enum_cls: Type[_E], value: Union[str, _E], *, field_name: str) -> _E:
    """Return ``value`` as a member of ``enum_cls`` or raise ``ConfigError``."""

    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(f"'{member.value}'" for member in enum_cls)
        raise ConfigError(
            f"Invalid {field_name} '{value}' (expected one of {allowed})",
            field=field_name,
        ) from None


@dataclass(slots=True)
class Targeting:
    """Cluster targeting input; exactly one of the two fields must be non-empty."""

    selectors: Optional[Mapping[str, str]] = None
    cluster_sets: Optional[Sequence[str]] = None

    @property
    def uses_selectors(self) -> bool:
        return bool(self.selectors)

    @property
    def uses_cluster_sets(self) -> bool:
        return bool(self.cluster_sets)


@dataclass(slots=True)
class ManifestSet:
    """Ordered, already-parsed manifest documents."""

    documents: Sequence[Any]
    sources: Sequence[Path] = ()

    def __iter__(self) -> Iterator[Any]:
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)

    def __getitem__(self, index: int) -> Any:
        return self.documents[index]

    def source_for(self, index: int) -> Optional[Path]:
        if index < len(self.sources):
            return self.sources[index]
        return None


@dataclass(slots=True)
class PolicySpec:
    """Resolved policy intent.

    Enum fields accept their string values and are coerced on construction.
    """

    name: str
    namespace: str
    remediation: RemediationAction
    targeting: Targeting
    manifests: Union[ManifestSet, Sequence[Any]]
    compliance_type: Optional[ComplianceType] = None
    prune_object_behavior: Optional[PruneObjectBehavior] = None
    placement_labels: Sequence[Any] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        self.remediation = coerce_enum(RemediationAction, self.remediation, field_name="remediationAction")
        if self.compliance_type:
            self.compliance_type = coerce_enum(ComplianceType, self.compliance_type, field_name="complianceType")
        else:
            self.compliance_type = None
        if self.prune_object_behavior:
            self.prune_object_behavior = coerce_enum(
                PruneObjectBehavior,
                self.prune_object_behavior,
                field_name="pruneObjectBehavior",
            )
        else:
            self.prune_object_behavior = None
        if not isinstance(self.manifests, ManifestSet):
            self.manifests = ManifestSet(documents=tuple(self.manifests))

    @property
    def placement_name(self) -> str:
        return f"placement-{self.name}"

    @property
    def binding_name(self) -> str:
        return f"binding-{self.name}"


def validate_targeting(targeting: Targeting) -> None:
    """Raise ``ConfigError`` unless exactly one targeting variant is set."""

    if targeting.uses_selectors and targeting.uses_cluster_sets:
        raise ConfigError(
            "Cannot use both cluster selectors and cluster sets. Choose one.",
            field="targeting",
        )
    if not targeting.uses_selectors and not targeting.uses_cluster_sets:
        raise ConfigError(
            "Either cluster selectors or cluster sets are required",
            field="targeting",
        )


def validate_manifests(manifests: ManifestSet) -> None:
    """Raise ``ManifestError`` for an empty set or a non-mapping document."""

    if not len(manifests):
        raise ManifestError("At least one manifest is required", field="manifests")
    for index, document in enumerate(manifests):
        if not isinstance(document, Mapping):
            source = manifests.source_for(index)
            where = f" ({source})" if source else ""
            raise ManifestError(
                f"Manifest #{index}{where} must be a mapping, got {type(document).__name__}",
                field="manifests",
                index=index,
            )


def validate_policy_spec(spec: PolicySpec) -> None:
    """Check the invariants the builder relies on."""

    if not spec.name or not spec.name.strip():
        raise ConfigError("Policy name is required", field="name")
    if not spec.namespace:
        raise ConfigError("Policy namespace is required", field="namespace")
    validate_targeting(spec.targeting)
    validate_manifests(spec.manifests)


__all__ = [
    "ComplianceType",
    "ManifestSet",
    "PolicySpec",
    "PruneObjectBehavior",
    "RemediationAction",
    "Targeting",
    "coerce_enum",
    "validate_manifests",
    "validate_policy_spec",
    "validate_targeting",
]
