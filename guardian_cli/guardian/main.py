"""FastAPI application -- Guardian HTTP entrypoint."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI

import guardian.deps as deps
from guardian.api.checks import router as checks_router
from guardian.api.evaluate import router as evaluate_router
from guardian.api.hosts import router as hosts_router
from guardian.config import GuardianConfig
from guardian.evaluator.engine import EvaluationEngine
from guardian.llm.ollama import OllamaClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: load config and create the Ollama client."""
    log_level = logging.DEBUG if os.environ.get("GUARDIAN_DEV_MODE") else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    config_path = os.environ.get("GUARDIAN_CONFIG")
    deps._config = GuardianConfig.load(Path(config_path) if config_path else None)
    logger.info(
        "Guardian starting with %d host(s), timeout %dms",
        len(deps._config.ollama.hosts),
        deps._config.timeout_ms,
    )

    deps._ollama_client = OllamaClient(timeout_ms=deps._config.timeout_ms)
    deps._evaluation_engine = EvaluationEngine(
        deps._ollama_client,
        deps._config.host_pool,
        deps._config.checks,
        deps._config.ollama.default_model,
    )

    yield

    await deps._ollama_client.close()
    deps._config = None
    deps._ollama_client = None
    deps._evaluation_engine = None


app = FastAPI(
    title="Guardian",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(checks_router)
app.include_router(hosts_router)
app.include_router(evaluate_router)
