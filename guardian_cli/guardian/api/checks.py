"""Checks API: run the deterministic checklist over a project directory."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, ValidationError

from guardian.checks.models import CheckResult, CheckSummary
from guardian.checks.pipeline import REGISTRY, run_checks
from guardian.config import GuardianConfig
from guardian.deps import get_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["checks"])


class CheckRequest(BaseModel):
    path: str = Field(..., description="Project directory to check")
    only: str | None = Field(None, description="Comma-separated check names to run")
    max_file_loc: int | None = Field(None, ge=1)
    warn_file_loc: int | None = Field(None, ge=1)
    max_functions_per_module: int | None = Field(None, ge=1)
    max_modules_per_crate: int | None = Field(None, ge=1)
    required_edition: str | None = None


class CheckResponse(BaseModel):
    project: str
    summary: CheckSummary
    results: list[CheckResult] = Field(default_factory=list)


class RegisteredCheckResponse(BaseModel):
    name: str
    description: str


@router.get("/checks", response_model=list[RegisteredCheckResponse])
async def list_checks() -> list[RegisteredCheckResponse]:
    """Return the registered checks in run order."""
    return [RegisteredCheckResponse(name=c.name, description=c.description) for c in REGISTRY]


@router.post("/checks", response_model=CheckResponse)
def run_project_checks(
    body: CheckRequest,
    config: GuardianConfig = Depends(get_config),
) -> CheckResponse:
    """Run the checklist with optional per-request threshold overrides.

    A plain ``def`` route so the scan runs in FastAPI's threadpool.
    """
    try:
        check_config = config.checks.with_overrides(
            **body.model_dump(exclude={"path", "only"})
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        results = run_checks(Path(body.path), check_config, body.only)
    except OSError as e:
        raise HTTPException(status_code=400, detail=str(e))

    summary = CheckSummary.from_results(results)
    logger.info("Checked %s: %d/%d passed", body.path, summary.passed, summary.total)
    return CheckResponse(project=body.path, summary=summary, results=results)
