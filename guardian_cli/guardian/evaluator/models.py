"""Data models for check evaluation and free-form questions."""

from __future__ import annotations

from pydantic import BaseModel, Field

from guardian.checks.models import CheckResult, CheckSummary


class EvaluationResult(BaseModel):
    """Check results plus the model's remediation guidance, if any was requested."""

    project: str
    results: list[CheckResult] = Field(default_factory=list)
    summary: CheckSummary = Field(default_factory=CheckSummary)
    host: str | None = None
    model: str | None = None
    evaluation: str | None = None
    total_duration_ns: int | None = None
    eval_count: int | None = None
    llm_error: str | None = None

    @property
    def violations(self) -> list[CheckResult]:
        return [r for r in self.results if not r.passed]


class AskResult(BaseModel):
    host: str
    model: str
    prompt: str
    response: str
    done: bool = True
    total_duration_ns: int | None = None
    eval_count: int | None = None
