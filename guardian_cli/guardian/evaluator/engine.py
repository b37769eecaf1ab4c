"""Evaluation engine: deterministic checks first, then LLM guidance on failures."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from guardian.checks.models import CheckConfig, CheckSummary
from guardian.checks.pipeline import run_checks
from guardian.evaluator.models import AskResult, EvaluationResult
from guardian.llm.hosts import HostPool
from guardian.llm.ollama import OllamaClient, OllamaError
from guardian.llm.prompts.evaluate import EVALUATE_SYSTEM_PROMPT, build_evaluation_user_prompt
from guardian.llm.resolver import HostResolver, ResolutionError

logger = logging.getLogger(__name__)


class EvaluationEngine:
    """Runs checks over a project and asks an Ollama host to explain the failures."""

    def __init__(
        self,
        client: OllamaClient,
        pool: HostPool,
        check_config: CheckConfig | None = None,
        default_model: str | None = None,
    ) -> None:
        self._client = client
        self._pool = pool
        self._check_config = check_config or CheckConfig()
        self._default_model = default_model
        self._resolver = HostResolver(client)

    async def evaluate(
        self,
        project_root: Path,
        only: str | None = None,
        model: str | None = None,
        host_name: str | None = None,
    ) -> EvaluationResult:
        """Run the checks; if any fail, send them to the model for guidance.

        Host resolution and generation failures are recorded in ``llm_error``
        so the check results are still returned.
        """
        results = await asyncio.to_thread(run_checks, project_root, self._check_config, only)
        summary = CheckSummary.from_results(results)
        evaluation = EvaluationResult(project=str(project_root), results=results, summary=summary)

        if summary.failed == 0:
            logger.info("All checks passed, skipping LLM evaluation")
            return evaluation

        logger.info("Sending %d violations to LLM for evaluation", summary.failed)
        try:
            host = await self._resolver.resolve_named(self._pool, host_name)
            evaluation.host = host.name
            model_name = await self._resolver.resolve_model(host, model, self._default_model)
            evaluation.model = model_name

            prompt = build_evaluation_user_prompt(results, project_root)
            response = await self._client.generate(
                host, model_name, prompt, system=EVALUATE_SYSTEM_PROMPT
            )
        except ResolutionError as e:
            logger.warning("No host available for evaluation: %s", e)
            evaluation.llm_error = str(e)
            return evaluation
        except OllamaError as e:
            logger.exception("LLM evaluation failed, returning check results only")
            evaluation.llm_error = str(e)
            return evaluation

        evaluation.evaluation = response.response
        evaluation.total_duration_ns = response.total_duration
        evaluation.eval_count = response.eval_count
        return evaluation

    async def ask(
        self,
        prompt: str,
        model: str | None = None,
        host_name: str | None = None,
    ) -> AskResult:
        """Send a free-form prompt. Resolution and transport errors propagate."""
        host = await self._resolver.resolve_named(self._pool, host_name)
        model_name = await self._resolver.resolve_model(host, model, self._default_model)
        response = await self._client.generate(host, model_name, prompt)
        return AskResult(
            host=host.name,
            model=model_name,
            prompt=prompt,
            response=response.response,
            done=response.done,
            total_duration_ns=response.total_duration,
            eval_count=response.eval_count,
        )
