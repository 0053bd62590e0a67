"""Configuration and manifest loading for the policy generator."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import yaml
from pydantic import ValidationError

from .errors import ConfigError, ManifestError
from .schemas.config import PolicyConfig
from .schemas.policy import ManifestSet, PolicySpec, Targeting

logger = logging.getLogger(__name__)


def load_config_file(path: Path) -> Dict[str, Any]:
    """Read a YAML config file into a raw mapping."""

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}", field="config")
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file {path}: {exc}", field="config") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(
            f"Config file {path} must contain a mapping, got {type(payload).__name__}",
            field="config",
        )
    return payload


def parse_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated flag value, dropping blanks."""

    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_selectors(value: Optional[str]) -> Dict[str, str]:
    """Parse ``key=value,key2=value2`` into an ordered mapping."""

    selectors: Dict[str, str] = {}
    for entry in parse_list(value):
        key, sep, raw_value = entry.partition("=")
        key = key.strip()
        raw_value = raw_value.strip()
        if not sep or not key or not raw_value:
            raise ConfigError(
                f"Invalid selector format: {entry} (expected key=value)",
                field="clusterSelectors",
            )
        selectors[key] = raw_value
    return selectors


def resolve_config(cli_values: Mapping[str, Any], config_path: Optional[Path] = None) -> PolicyConfig:
    """Merge command-line values with an optional config file.

    Keys present in the config file override command-line values. ``None``
    command-line values are treated as not provided.
    """

    payload: Dict[str, Any] = {key: value for key, value in cli_values.items() if value is not None}
    if config_path is not None:
        logger.debug("Loading configuration from %s", config_path)
        payload.update(load_config_file(config_path))
    try:
        return PolicyConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc


def load_manifests(paths: Iterable[str], *, base_dir: Optional[Path] = None) -> ManifestSet:
    """Load one YAML document per file, keeping the given order."""

    documents: List[Any] = []
    sources: List[Path] = []
    for index, raw_path in enumerate(paths):
        path = Path(raw_path)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        if not path.is_file():
            raise ManifestError(f"File not found: {path}", field="files", index=index)
        try:
            document = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ManifestError(f"Failed to parse manifest {path}: {exc}", field="files", index=index) from exc
        if not isinstance(document, dict):
            raise ManifestError(
                f"Manifest {path} must contain a mapping, got {type(document).__name__}",
                field="files",
                index=index,
            )
        documents.append(document)
        sources.append(path)
    if not documents:
        raise ManifestError("At least one YAML file is required", field="files")
    logger.debug("Loaded %d manifest(s)", len(documents))
    return ManifestSet(documents=tuple(documents), sources=tuple(sources))


def build_policy_spec(config: PolicyConfig, manifests: ManifestSet) -> PolicySpec:
    """Translate a validated config plus loaded manifests into a ``PolicySpec``."""

    return PolicySpec(
        name=config.policy_name,
        namespace=config.namespace,
        remediation=config.remediation_action,
        compliance_type=config.compliance_type,
        prune_object_behavior=config.prune_object_behavior,
        targeting=Targeting(
            selectors=dict(config.cluster_selectors) or None,
            cluster_sets=list(config.cluster_sets) or None,
        ),
        placement_labels=tuple(config.placement_labels),
        manifests=manifests,
    )


def _format_validation_error(exc: ValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "config"
        messages.append(f"{location}: {error.get('msg')}")
    return "Invalid configuration: " + "; ".join(messages)


__all__ = [
    "build_policy_spec",
    "load_config_file",
    "load_manifests",
    "parse_list",
    "parse_selectors",
    "resolve_config",
]
