"""Rust edition conformance for every discovered manifest."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from guardian.checks.manifest import (
    MANIFEST_NAME,
    find_manifests,
    get_path,
    is_workspace,
    load_manifest,
    try_load_manifest,
)
from guardian.checks.models import CheckResult, Severity

CHECK_NAME = "rust-edition"


def check_rust_edition(project_root: Path, required_edition: str) -> list[CheckResult]:
    """Compare each manifest's ``package.edition`` against the required edition."""
    manifests = find_manifests(project_root)
    if not manifests:
        return [CheckResult.fail(CHECK_NAME, Severity.warning, f"No {MANIFEST_NAME} found")]

    root_manifest = try_load_manifest(project_root / MANIFEST_NAME)
    return [
        check_manifest(path, project_root, required_edition, root_manifest)
        for path in manifests
    ]


def check_manifest(
    path: Path,
    project_root: Path,
    required: str,
    root_manifest: dict[str, Any] | None = None,
) -> CheckResult:
    label = _label(path, project_root)
    try:
        manifest = load_manifest(path)
    except OSError as e:
        return CheckResult.fail(
            CHECK_NAME, Severity.error, f"{label}: Failed to read: {e}", file=str(path)
        )
    except tomllib.TOMLDecodeError as e:
        return CheckResult.fail(
            CHECK_NAME, Severity.error, f"{label}: Invalid TOML: {e}", file=str(path)
        )

    edition = get_path(manifest, "package.edition")
    inherited = isinstance(edition, dict) and edition.get("workspace") is True
    if inherited:
        edition = get_path(root_manifest or {}, "workspace.package.edition")
        if not isinstance(edition, str):
            return CheckResult.fail(
                CHECK_NAME,
                Severity.error,
                f"{label}: Edition inherited from workspace, but the workspace declares none",
                file=str(path),
                fix=f'Add edition = "{required}" to [workspace.package] in the root {MANIFEST_NAME}',
            )

    if isinstance(edition, str):
        if edition == required:
            return CheckResult.ok(
                CHECK_NAME, f"{label}: Using Rust {required} edition", file=str(path)
            )
        where = " (inherited from workspace)" if inherited else ""
        return CheckResult.fail(
            CHECK_NAME,
            Severity.error,
            f"{label}: Using edition '{edition}'{where}, expected '{required}'",
            file=str(path),
            fix=f'Change edition = "{edition}" to edition = "{required}"',
        )

    if is_workspace(manifest) and "package" not in manifest:
        return CheckResult.ok(
            CHECK_NAME, f"{label}: Workspace root (no edition required)", file=str(path)
        )
    return CheckResult.fail(
        CHECK_NAME,
        Severity.error,
        f"{label}: No edition specified",
        file=str(path),
        fix=f'Add edition = "{required}" to [package] section',
    )


def _label(path: Path, project_root: Path) -> str:
    try:
        return path.relative_to(project_root).as_posix()
    except ValueError:
        return path.name
