"""Module-count limits per crate."""

from __future__ import annotations

from pathlib import Path

from guardian.checks.manifest import (
    MANIFEST_NAME,
    is_workspace,
    try_load_manifest,
    workspace_members,
)
from guardian.checks.models import CheckResult, Severity

CHECK_NAME = "module-count"

ENTRY_POINTS = frozenset({"main.rs", "lib.rs", "mod.rs"})
AGGREGATOR_FILE = "mod.rs"


def check_module_count(project_root: Path, max_modules: int) -> list[CheckResult]:
    """One result per crate: the single crate, or the root plus each workspace member."""
    manifest = try_load_manifest(project_root / MANIFEST_NAME)
    if manifest is not None and is_workspace(manifest):
        return _check_workspace(project_root, manifest, max_modules)

    src_dir = project_root / "src"
    if not src_dir.is_dir():
        return []
    crate_name = project_root.resolve().name or "crate"
    return [check_crate(src_dir, crate_name, max_modules)]


def _check_workspace(
    workspace_root: Path, manifest: dict, max_modules: int
) -> list[CheckResult]:
    results: list[CheckResult] = []
    root_src = workspace_root / "src"
    if root_src.is_dir():
        results.append(check_crate(root_src, "root", max_modules))

    for member in workspace_members(workspace_root, manifest):
        src_dir = member / "src"
        if src_dir.is_dir():
            results.append(check_crate(src_dir, member.name, max_modules))
    return results


def check_crate(src_dir: Path, crate_name: str, max_modules: int) -> CheckResult:
    count = count_modules(src_dir)
    if count > max_modules:
        return CheckResult.fail(
            CHECK_NAME,
            Severity.error,
            f"{crate_name}: {count} modules exceeds max {max_modules}",
            file=str(src_dir),
            fix="Consider splitting into multiple crates or reducing module count",
        )
    return CheckResult.ok(CHECK_NAME, f"{crate_name}: {count} modules (OK)", file=str(src_dir))


def count_modules(src_dir: Path) -> int:
    """Count top-level modules in a ``src`` directory.

    A module is a ``.rs`` file other than an entry point, or a subdirectory
    holding ``mod.rs`` or any ``.rs`` file.
    """
    try:
        entries = list(src_dir.iterdir())
    except OSError:
        return 0

    count = 0
    for path in entries:
        if path.is_file():
            if path.suffix == ".rs" and path.name not in ENTRY_POINTS:
                count += 1
        elif path.is_dir():
            if (path / AGGREGATOR_FILE).exists() or _has_rs_files(path):
                count += 1
    return count


def _has_rs_files(directory: Path) -> bool:
    try:
        return any(p.suffix == ".rs" for p in directory.iterdir())
    except OSError:
        return False
