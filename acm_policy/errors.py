"""Error types raised while resolving and building policy bundles."""

from __future__ import annotations

from typing import Optional


class PolicyBundleError(ValueError):
    """Base error for invalid policy input.

    ``field`` names the offending input field and ``index`` its position when the
    field is a sequence (manifest number, label predicate number).
    """

    def __init__(self, message: str, *, field: Optional[str] = None, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.field = field
        self.index = index


class ConfigError(PolicyBundleError):
    """Raised for invalid targeting, enum values or configuration sources."""


class ManifestError(PolicyBundleError):
    """Raised when the manifest set is empty or a manifest is not a mapping."""


class LabelPredicateError(PolicyBundleError):
    """Raised when a placement label predicate matches neither accepted shape."""


__all__ = [
    "PolicyBundleError",
    "ConfigError",
    "ManifestError",
    "LabelPredicateError",
]
