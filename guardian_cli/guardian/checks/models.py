"""Check result data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Severity(str, Enum):
    """Severity level for check results."""

    info = "info"
    warning = "warning"
    error = "error"


class CheckResult(BaseModel):
    """A single finding produced by a check."""

    model_config = ConfigDict(frozen=True)

    check_name: str
    passed: bool
    severity: Severity
    message: str = Field(min_length=1)
    file: str | None = None
    line: int | None = None
    fix: str | None = None

    @model_validator(mode="after")
    def _severity_matches_outcome(self) -> CheckResult:
        if self.passed and self.severity is not Severity.info:
            raise ValueError("a passing result must have info severity")
        if not self.passed and self.severity is Severity.info:
            raise ValueError("a failing result must be a warning or an error")
        return self

    @classmethod
    def ok(cls, check_name: str, message: str, *, file: str | None = None) -> CheckResult:
        return cls(
            check_name=check_name,
            passed=True,
            severity=Severity.info,
            message=message,
            file=file,
        )

    @classmethod
    def fail(
        cls,
        check_name: str,
        severity: Severity,
        message: str,
        *,
        file: str | None = None,
        line: int | None = None,
        fix: str | None = None,
    ) -> CheckResult:
        return cls(
            check_name=check_name,
            passed=False,
            severity=severity,
            message=message,
            file=file,
            line=line,
            fix=fix,
        )


class CheckConfig(BaseModel):
    """Thresholds shared by all checks for a single run."""

    model_config = ConfigDict(frozen=True)

    max_file_loc: int = Field(500, ge=1)
    warn_file_loc: int = Field(350, ge=0)
    max_functions_per_module: int = Field(7, ge=0)
    max_modules_per_crate: int = Field(4, ge=0)
    required_edition: str = "2024"

    @model_validator(mode="after")
    def _warning_below_max(self) -> CheckConfig:
        if self.warn_file_loc >= self.max_file_loc:
            raise ValueError(
                f"warn_file_loc ({self.warn_file_loc}) must be below max_file_loc ({self.max_file_loc})"
            )
        return self

    def with_overrides(self, **overrides: object) -> CheckConfig:
        """Copy with the non-None overrides applied, re-validated."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        return CheckConfig.model_validate({**self.model_dump(), **updates})


class CheckSummary(BaseModel):
    """Pass/warn/error counts over a list of results."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    errors: int = 0
    warnings: int = 0

    @classmethod
    def from_results(cls, results: list[CheckResult]) -> CheckSummary:
        passed = sum(1 for r in results if r.passed)
        errors = sum(1 for r in results if not r.passed and r.severity is Severity.error)
        failed = len(results) - passed
        return cls(
            total=len(results),
            passed=passed,
            failed=failed,
            errors=errors,
            warnings=failed - errors,
        )

    @property
    def has_errors(self) -> bool:
        return self.errors > 0
