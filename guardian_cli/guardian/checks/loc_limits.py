"""Line-count limits for source files."""

from __future__ import annotations

from pathlib import Path

from guardian.checks.models import CheckResult, Severity
from guardian.checks.scanner import split_lines
from guardian.checks.walk import iter_files, read_error, read_text

CHECK_NAME = "loc-limits"


def check_loc_limits(project_root: Path, max_loc: int, warn_loc: int) -> list[CheckResult]:
    """Check the line count of every source file under the project."""
    results: list[CheckResult] = []
    for path in iter_files(project_root):
        try:
            content = read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            results.append(read_error(CHECK_NAME, path, e))
            continue
        results.append(classify_file(path, len(split_lines(content)), max_loc, warn_loc))
    return results


def classify_file(path: Path, loc: int, max_loc: int, warn_loc: int) -> CheckResult:
    name = path.name
    if loc > max_loc:
        return CheckResult.fail(
            CHECK_NAME,
            Severity.error,
            f"{name}: {loc} lines exceeds max {max_loc}",
            file=str(path),
            fix=f"Split {name} into smaller modules (each under {max_loc} lines)",
        )
    if loc > warn_loc:
        return CheckResult.fail(
            CHECK_NAME,
            Severity.warning,
            f"{name}: {loc} lines exceeds warning threshold {warn_loc}",
            file=str(path),
            fix="Consider splitting into smaller modules",
        )
    return CheckResult.ok(CHECK_NAME, f"{name}: {loc} lines (OK)", file=str(path))
