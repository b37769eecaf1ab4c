"""Static checks over a Rust project tree."""

from guardian.checks.models import CheckConfig, CheckResult, CheckSummary, Severity
from guardian.checks.pipeline import CHECK_NAMES, REGISTRY, run_checks

__all__ = [
    "CHECK_NAMES",
    "REGISTRY",
    "CheckConfig",
    "CheckResult",
    "CheckSummary",
    "Severity",
    "run_checks",
]
