"""Multi-document YAML rendering for policy bundles."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

import yaml

from .builder import ResourceBundle

DOCUMENT_SEPARATOR = "---\n"


class BundleDumper(yaml.SafeDumper):
    """Safe dumper that renders ``None`` as an empty scalar."""


def _represent_none(dumper: yaml.SafeDumper, _: None) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:null", "")


BundleDumper.add_representer(type(None), _represent_none)


def serialize_document(body: Mapping[str, Any]) -> str:
    """Render one document in block style, keeping insertion order."""

    return yaml.dump(
        body,
        Dumper=BundleDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=float("inf"),
    )


def serialize_bundle(bundle: ResourceBundle) -> str:
    """Render the bundle with a ``---`` line between consecutive documents."""

    return DOCUMENT_SEPARATOR.join(serialize_document(document.body) for document in bundle)


def load_bundle_text(text: str) -> List[Dict[str, Any]]:
    """Parse a serialized bundle back into its documents."""

    return [document for document in yaml.safe_load_all(text) if document is not None]


__all__ = [
    "BundleDumper",
    "DOCUMENT_SEPARATOR",
    "load_bundle_text",
    "serialize_bundle",
    "serialize_document",
]
