"""Function-count limits per source file."""

from __future__ import annotations

from pathlib import Path

from guardian.checks.models import CheckResult, Severity
from guardian.checks.scanner import scan_source
from guardian.checks.walk import iter_files, read_error, read_text

CHECK_NAME = "function-count"

FN_PATTERNS = (
    "fn ",
    "pub fn ",
    "pub(crate) fn ",
    "pub(super) fn ",
    "async fn ",
    "pub async fn ",
    "const fn ",
    "pub const fn ",
    "unsafe fn ",
    "pub unsafe fn ",
)


def check_function_count(project_root: Path, max_functions: int) -> list[CheckResult]:
    """Emit one result per source file comparing its function count to the max."""
    results: list[CheckResult] = []
    for path in iter_files(project_root):
        try:
            content = read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            results.append(read_error(CHECK_NAME, path, e))
            continue

        count = count_functions(content)
        name = path.name
        if count > max_functions:
            results.append(
                CheckResult.fail(
                    CHECK_NAME,
                    Severity.error,
                    f"{name}: {count} functions exceeds max {max_functions}",
                    file=str(path),
                    fix=f"Split {name} into smaller modules with fewer functions",
                )
            )
        else:
            results.append(
                CheckResult.ok(CHECK_NAME, f"{name}: {count} functions (OK)", file=str(path))
            )
    return results


def count_functions(content: str) -> int:
    """Count function definitions outside test modules, comments and raw strings."""
    count = 0
    for line in scan_source(content):
        if line.in_test_scope or not line.is_code:
            continue
        if "(" in line.stripped and any(p in line.stripped for p in FN_PATTERNS):
            count += 1
    return count
