"""Evaluation prompt: ask the model to explain and prioritize check violations."""

from __future__ import annotations

from io import StringIO
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

from guardian.checks.models import CheckResult

_yaml = YAML()
_yaml.default_flow_style = False

EVALUATE_SYSTEM_PROMPT = """\
You are a code quality guardian enforcing development process rules.

## Your Role
You receive the results of static checks run against a Rust project and \
explain what must change. You do not re-run the checks and you do not \
invent violations that are not listed.

## Severity Levels
- **error**: blocks the change until fixed
- **warning**: should be addressed, does not block
- **info**: passing check, listed for context only
"""

EVALUATE_TASK = """\
## Your Task

Analyze the FAILED checks above and provide:
1. A brief summary of the violations
2. For each ERROR, explain WHY this violates good architecture/process
3. Specific, actionable instructions to fix each violation
4. Priority order for fixes (most critical first)

Be concise and direct. Focus on actionable guidance.
"""


def results_to_yaml(results: list[CheckResult]) -> str:
    """Dump results grouped by check name, keeping check order."""
    grouped: dict[str, list[dict[str, Any]]] = {}
    for result in results:
        entry: dict[str, Any] = {
            "status": "PASS" if result.passed else "FAIL",
            "severity": result.severity.value,
            "message": result.message,
        }
        if result.file is not None:
            entry["file"] = result.file
        if result.line is not None:
            entry["line"] = result.line
        if result.fix is not None:
            entry["fix"] = result.fix
        grouped.setdefault(result.check_name, []).append(entry)

    buf = StringIO()
    _yaml.dump(grouped, buf)
    return buf.getvalue().rstrip()


def build_evaluation_user_prompt(results: list[CheckResult], project_root: Path) -> str:
    """Build the user prompt for an evaluation request."""
    parts = ["## Project", f"Directory: {project_root}\n", "## Check Results\n"]
    parts.append(f"```yaml\n{results_to_yaml(results)}\n```\n")
    parts.append(EVALUATE_TASK)
    return "\n".join(parts)
