"""Evaluate API: checks plus LLM guidance on the violations."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from guardian.deps import get_evaluation_engine
from guardian.evaluator.engine import EvaluationEngine
from guardian.evaluator.models import EvaluationResult

router = APIRouter(prefix="/api", tags=["evaluate"])


class EvaluateRequest(BaseModel):
    path: str = Field(..., description="Project directory to evaluate")
    only: str | None = None
    model: str | None = None
    host: str | None = None


@router.post("/evaluate", response_model=EvaluationResult)
async def evaluate_project(
    body: EvaluateRequest,
    engine: EvaluationEngine = Depends(get_evaluation_engine),
) -> EvaluationResult:
    """Run checks, then ask the selected host to explain any failures.

    LLM failures are reported in ``llm_error``; only an unusable project
    path is an HTTP error.
    """
    try:
        return await engine.evaluate(Path(body.path), body.only, body.model, body.host)
    except OSError as e:
        raise HTTPException(status_code=400, detail=str(e))
