"""Policy workspace output: copied manifests, PolicyGenerator and processed bundle."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .bundle.builder import ResourceBundle
from .bundle.generator import (
    KUSTOMIZATION_FILENAME,
    POLICY_GENERATOR_FILENAME,
    render_kustomization,
    render_policy_generator,
)
from .bundle.pipeline import generate_policy_bundle
from .bundle.serializer import serialize_bundle, serialize_document
from .errors import ManifestError
from .schemas.policy import ManifestSet, PolicySpec, validate_policy_spec

logger = logging.getLogger(__name__)

MANIFESTS_DIRNAME = "manifests"
PROCESSED_FILENAME = "processed-resources.yaml"


@dataclass(slots=True)
class WorkspaceRequest:
    """Inputs for one workspace run."""

    spec: PolicySpec
    output_dir: Path
    process: bool = True


@dataclass(slots=True)
class WorkspaceResult:
    output_dir: Path
    policy_generator_path: Path
    kustomization_path: Path
    manifest_paths: List[Path]
    processed_path: Optional[Path] = None
    bundle: Optional[ResourceBundle] = None
    logs: List[str] = field(default_factory=list)

    @property
    def next_step(self) -> str:
        if self.processed_path is not None:
            return f"oc apply -f {self.processed_path}"
        return f"oc apply -f {self.policy_generator_path}"


def write_policy_workspace(request: WorkspaceRequest) -> WorkspaceResult:
    """Recreate ``request.output_dir`` and write every workspace artifact.

    The bundle is built before anything touches the filesystem so invalid input
    leaves an existing workspace untouched.
    """

    spec = request.spec
    validate_policy_spec(spec)
    sources = _manifest_sources(spec.manifests, request.output_dir)
    bundle = generate_policy_bundle(spec) if request.process else None

    output_dir = request.output_dir
    if output_dir.exists():
        logger.debug("Removing existing workspace %s", output_dir)
        shutil.rmtree(output_dir)
    manifests_dir = output_dir / MANIFESTS_DIRNAME
    manifests_dir.mkdir(parents=True, exist_ok=True)

    logs: List[str] = []
    manifest_paths: List[Path] = []
    for source in sources:
        target = manifests_dir / source.name
        shutil.copy2(source, target)
        manifest_paths.append(target)
        logs.append(f"Copied {source} -> {MANIFESTS_DIRNAME}/{source.name}")

    policy_generator_path = output_dir / POLICY_GENERATOR_FILENAME
    _write_text(policy_generator_path, serialize_document(render_policy_generator(spec, MANIFESTS_DIRNAME)))
    logs.append(f"PolicyGenerator written to {policy_generator_path}")

    kustomization_path = output_dir / KUSTOMIZATION_FILENAME
    _write_text(kustomization_path, serialize_document(render_kustomization()))
    logs.append(f"Kustomization written to {kustomization_path}")

    processed_path: Optional[Path] = None
    if bundle is not None:
        processed_path = output_dir / PROCESSED_FILENAME
        _write_text(processed_path, serialize_bundle(bundle))
        logs.append(f"Processed resources written to {processed_path}")

    for line in logs:
        logger.debug(line)

    return WorkspaceResult(
        output_dir=output_dir,
        policy_generator_path=policy_generator_path,
        kustomization_path=kustomization_path,
        manifest_paths=manifest_paths,
        processed_path=processed_path,
        bundle=bundle,
        logs=logs,
    )


def _manifest_sources(manifests: ManifestSet, output_dir: Path) -> List[Path]:
    workspace_root = output_dir.resolve()
    sources: List[Path] = []
    seen: dict[str, Path] = {}
    for index in range(len(manifests)):
        source = manifests.source_for(index)
        if source is None:
            raise ManifestError(
                f"Manifest #{index} has no source file to copy into the workspace",
                field="files",
                index=index,
            )
        if source.resolve().is_relative_to(workspace_root):
            raise ManifestError(
                f"Manifest {source} is inside the output directory {output_dir}, which is recreated on every run",
                field="files",
                index=index,
            )
        if source.name in seen:
            raise ManifestError(
                f"Duplicate manifest file name '{source.name}': {seen[source.name]} and {source}",
                field="files",
                index=index,
            )
        seen[source.name] = source
        sources.append(source)
    return sources


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


__all__ = [
    "MANIFESTS_DIRNAME",
    "PROCESSED_FILENAME",
    "WorkspaceRequest",
    "WorkspaceResult",
    "write_policy_workspace",
]
