"""Command-line entry point for ACM policy generation."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from acm_policy.bundle.pipeline import render_policy_bundle
from acm_policy.config import (
    build_policy_spec,
    load_manifests,
    parse_list,
    parse_selectors,
    resolve_config,
)
from acm_policy.errors import PolicyBundleError
from acm_policy.schemas.config import PolicyConfig
from acm_policy.schemas.policy import ComplianceType, PolicySpec, PruneObjectBehavior, RemediationAction
from acm_policy.workspace import WorkspaceRequest, write_policy_workspace


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        if args.command == "generate":
            return _handle_generate(args)
        if args.command == "render":
            return _handle_render(args)
    except (PolicyBundleError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    parser.error(f"Unknown command '{args.command}'")
    return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acm-policy",
        description="Generate ACM Policy, Placement, PlacementBinding and ManagedClusterSetBinding resources.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging on stderr.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Write a policy workspace with processed resources.")
    _add_policy_arguments(generate)
    generate.add_argument("-o", "--output", help="Output directory (default: acm-policy-<name>).")
    generate.add_argument(
        "-p",
        "--process",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Write processed-resources.yaml (default: true).",
    )

    render = subparsers.add_parser("render", help="Print the processed resources without writing a workspace.")
    _add_policy_arguments(render)
    render.add_argument("--output-file", help="Write the bundle to this file instead of stdout.")

    return parser


def _add_policy_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", help="Load configuration from a YAML file (overrides flags).")
    parser.add_argument("-n", "--name", help="Policy name.")
    parser.add_argument("-f", "--files", help="Comma-separated list of manifest files.")
    parser.add_argument("-s", "--selectors", help="Comma-separated cluster selectors (key=value).")
    parser.add_argument("--clustersets", help="Comma-separated cluster set names (alternative to selectors).")
    parser.add_argument("-ns", "--namespace", help="Policy namespace (default: policies).")
    parser.add_argument(
        "-r",
        "--remediation",
        choices=[member.value for member in RemediationAction],
        help="Remediation action (default: enforce).",
    )
    parser.add_argument("--compliance-type", choices=[member.value for member in ComplianceType])
    parser.add_argument("--prune-object-behavior", choices=[member.value for member in PruneObjectBehavior])
    parser.add_argument("--workspace-root", help="Base directory for relative paths (default: cwd).")


def _handle_generate(args: argparse.Namespace) -> int:
    workspace = _resolve_workspace(args.workspace_root)
    overrides: Dict[str, Any] = {
        "outputDir": args.output,
        "processPolicyGenerator": args.process,
    }
    config, spec = _load_policy(args, workspace, overrides)

    output_dir = _resolve_path(config.resolved_output_dir, workspace)
    result = write_policy_workspace(
        WorkspaceRequest(spec=spec, output_dir=output_dir, process=config.process_policy_generator)
    )

    payload = {
        "output_dir": str(result.output_dir),
        "policy_generator_path": str(result.policy_generator_path),
        "processed_path": str(result.processed_path) if result.processed_path else None,
        "policy_name": spec.name,
        "namespace": spec.namespace,
        "remediation": spec.remediation.value,
        "compliance_type": spec.compliance_type.value if spec.compliance_type else None,
        "prune_object_behavior": spec.prune_object_behavior.value if spec.prune_object_behavior else None,
        "manifests": [path.name for path in result.manifest_paths],
        "documents": _describe_documents(result.bundle),
        "logs": result.logs,
        "next_steps": [result.next_step],
    }
    _print_json(payload)
    return 0


def _handle_render(args: argparse.Namespace) -> int:
    workspace = _resolve_workspace(args.workspace_root)
    _, spec = _load_policy(args, workspace, {})
    text = render_policy_bundle(spec)

    if args.output_file:
        output_path = _resolve_path(args.output_file, workspace)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        _print_json({"output_file": str(output_path)})
    else:
        sys.stdout.write(text)
    return 0


def _load_policy(
    args: argparse.Namespace,
    workspace: Path,
    overrides: Mapping[str, Any],
) -> tuple[PolicyConfig, PolicySpec]:
    cli_values: Dict[str, Any] = {
        "policyName": args.name,
        "namespace": args.namespace,
        "remediationAction": args.remediation,
        "complianceType": args.compliance_type,
        "pruneObjectBehavior": args.prune_object_behavior,
        "files": parse_list(args.files) or None,
        "clusterSelectors": parse_selectors(args.selectors) or None,
        "clusterSets": parse_list(args.clustersets) or None,
    }
    cli_values.update(overrides)
    config_path = _resolve_path(args.config, workspace) if args.config else None

    config = resolve_config(cli_values, config_path)
    manifests = load_manifests(config.files, base_dir=workspace)
    return config, build_policy_spec(config, manifests)


def _describe_documents(bundle: Any) -> list[dict[str, Optional[str]]]:
    if bundle is None:
        return []
    return [
        {"kind": document.kind, "name": document.name, "namespace": document.namespace}
        for document in bundle
    ]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_workspace(value: Optional[str]) -> Path:
    return Path(value).resolve() if value else Path.cwd()


def _resolve_path(value: str, workspace: Path) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = workspace / path
    return path.resolve()


def _print_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":
    sys.exit(main())
