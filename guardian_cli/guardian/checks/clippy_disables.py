"""Detect lint suppression attributes in source files."""

from __future__ import annotations

from pathlib import Path

from guardian.checks.models import CheckResult, Severity
from guardian.checks.scanner import scan_source
from guardian.checks.walk import iter_files, read_error, read_text

CHECK_NAME = "clippy-disables"

SUPPRESS_PATTERNS = ("#[allow(", "#![allow(", "#[cfg_attr(")
CFG_ATTR_PATTERN = "#[cfg_attr("
ALLOW_OPEN = "allow("

# Tolerated while code is still being written.
ALLOWED_LINTS = ("dead_code", "unused")

STRICT_NAMESPACE = "clippy::"


def check_clippy_disables(project_root: Path) -> list[CheckResult]:
    results: list[CheckResult] = []
    for path in iter_files(project_root):
        try:
            content = read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            results.append(read_error(CHECK_NAME, path, e))
            continue
        results.extend(check_content(content, path))
    return results


def check_content(content: str, path: Path) -> list[CheckResult]:
    """One failing result per offending line, or a single pass for the file."""
    results: list[CheckResult] = []
    name = path.name

    for line in scan_source(content):
        if not line.is_code:
            continue
        text = line.stripped
        if not any(p in text for p in SUPPRESS_PATTERNS):
            continue
        if CFG_ATTR_PATTERN in text and ALLOW_OPEN not in text:
            continue

        lints = extract_lint_names(text)
        reported = [lint for lint in lints if not is_allowed_lint(lint)]
        if lints and not reported:
            continue

        severity = (
            Severity.error
            if any(lint.startswith(STRICT_NAMESPACE) for lint in reported)
            else Severity.warning
        )
        results.append(
            CheckResult.fail(
                CHECK_NAME,
                severity,
                f"{name}: Lint suppression found: {text}",
                file=str(path),
                line=line.number,
                fix="Remove the #[allow(...)] and fix the underlying issue instead",
            )
        )

    if not results:
        results.append(
            CheckResult.ok(CHECK_NAME, f"{name}: No lint suppressions found", file=str(path))
        )
    return results


def extract_lint_names(text: str) -> list[str]:
    """Lint identifiers inside the first ``allow(...)`` on the line."""
    start = text.find(ALLOW_OPEN)
    if start == -1:
        return []
    rest = text[start + len(ALLOW_OPEN):]
    end = rest.find(")")
    if end == -1:
        return []
    return [part.strip() for part in rest[:end].split(",") if part.strip()]


def is_allowed_lint(lint: str) -> bool:
    """True for ``dead_code``, ``unused`` and ``unused_*`` rustc lints.

    Matching is per lint name, not by substring: namespaced lints such as
    ``clippy::unused_self`` are always reported, and a tolerated lint does
    not excuse others on the same line (``allow(dead_code, clippy::x)`` is
    reported).
    """
    if "::" in lint:
        return False
    return any(lint == allowed or lint.startswith(f"{allowed}_") for allowed in ALLOWED_LINTS)
