"""ACM policy bundle generation."""

__version__ = "0.1.0"
from .bundle import (
    ClusterSetPlacement,
    MatchExpression,
    PolicyBundleBuilder,
    ResourceBundle,
    ResourceDocument,
    SelectorPlacement,
    generate_policy_bundle,
    normalize_label_predicate,
    render_policy_bundle,
    resolve_placement_rule,
    serialize_bundle,
)
from .errors import ConfigError, LabelPredicateError, ManifestError, PolicyBundleError
from .schemas import (
    ComplianceType,
    ManifestSet,
    PolicyConfig,
    PolicySpec,
    PruneObjectBehavior,
    RemediationAction,
    Targeting,
)
from .workspace import WorkspaceRequest, WorkspaceResult, write_policy_workspace

__all__ = [
    "__version__",
    "ClusterSetPlacement",
    "ComplianceType",
    "ConfigError",
    "LabelPredicateError",
    "ManifestError",
    "ManifestSet",
    "MatchExpression",
    "PolicyBundleBuilder",
    "PolicyBundleError",
    "PolicyConfig",
    "PolicySpec",
    "PruneObjectBehavior",
    "RemediationAction",
    "ResourceBundle",
    "ResourceDocument",
    "SelectorPlacement",
    "Targeting",
    "WorkspaceRequest",
    "WorkspaceResult",
    "generate_policy_bundle",
    "normalize_label_predicate",
    "render_policy_bundle",
    "resolve_placement_rule",
    "serialize_bundle",
    "write_policy_workspace",
]
