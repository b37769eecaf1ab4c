"""Check pipeline: runs the selected checks over a project in a fixed order."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from guardian.checks.cache_busting import check_cache_busting
from guardian.checks.clippy_disables import check_clippy_disables
from guardian.checks.function_count import check_function_count
from guardian.checks.loc_limits import check_loc_limits
from guardian.checks.models import CheckConfig, CheckResult, CheckSummary
from guardian.checks.module_count import check_module_count
from guardian.checks.rust_edition import check_rust_edition
from guardian.checks.test_quality import check_test_quality

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredCheck:
    name: str
    description: str
    run: Callable[[Path, CheckConfig], list[CheckResult]]


# Manifest checks, then per-file source checks, then documentation checks.
REGISTRY: tuple[RegisteredCheck, ...] = (
    RegisteredCheck(
        "rust-edition",
        "Cargo manifests declare the required Rust edition",
        lambda root, cfg: check_rust_edition(root, cfg.required_edition),
    ),
    RegisteredCheck(
        "module-count",
        "Crates stay under the module limit",
        lambda root, cfg: check_module_count(root, cfg.max_modules_per_crate),
    ),
    RegisteredCheck(
        "loc-limits",
        "Source files stay under the line limits",
        lambda root, cfg: check_loc_limits(root, cfg.max_file_loc, cfg.warn_file_loc),
    ),
    RegisteredCheck(
        "function-count",
        "Source files stay under the function limit",
        lambda root, cfg: check_function_count(root, cfg.max_functions_per_module),
    ),
    RegisteredCheck(
        "test-quality",
        "Tests contain no placeholder assertions",
        lambda root, cfg: check_test_quality(root),
    ),
    RegisteredCheck(
        "clippy-disables",
        "No lint suppression attributes",
        lambda root, cfg: check_clippy_disables(root),
    ),
    RegisteredCheck(
        "cache-busting",
        "README/docs image links carry a cache-busting query",
        lambda root, cfg: check_cache_busting(root),
    ),
)

CHECK_NAMES: tuple[str, ...] = tuple(c.name for c in REGISTRY)


def parse_filter(only: str | None) -> set[str] | None:
    """Turn ``"a, b"`` into ``{"a", "b"}``; None means no filter."""
    if only is None:
        return None
    return {name.strip() for name in only.split(",") if name.strip()}


def select_checks(only: str | None) -> list[RegisteredCheck]:
    selected = parse_filter(only)
    if selected is None:
        return list(REGISTRY)
    return [c for c in REGISTRY if c.name in selected]


def run_checks(
    project_root: Path,
    config: CheckConfig | None = None,
    only: str | None = None,
    log: logging.Logger | None = None,
) -> list[CheckResult]:
    """Run the selected checks and concatenate their results.

    Unknown names in ``only`` match nothing. Raises FileNotFoundError or
    NotADirectoryError when ``project_root`` is unusable.
    """
    log = log or logger
    project_root = Path(project_root)
    if not project_root.exists():
        raise FileNotFoundError(f"Project directory not found: {project_root}")
    if not project_root.is_dir():
        raise NotADirectoryError(f"Project path is not a directory: {project_root}")

    config = config or CheckConfig()
    results: list[CheckResult] = []
    for check in select_checks(only):
        check_results = check.run(project_root, config)
        log.debug("Check %s produced %d results", check.name, len(check_results))
        results.extend(check_results)

    summary = CheckSummary.from_results(results)
    log.info(
        "Checks complete for %s: %d passed, %d warnings, %d errors",
        project_root,
        summary.passed,
        summary.warnings,
        summary.errors,
    )
    return results
