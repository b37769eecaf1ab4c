"""Shared FastAPI dependencies."""

from __future__ import annotations

from guardian.config import GuardianConfig
from guardian.evaluator.engine import EvaluationEngine
from guardian.llm.ollama import OllamaClient

_config: GuardianConfig | None = None
_ollama_client: OllamaClient | None = None
_evaluation_engine: EvaluationEngine | None = None


def get_config() -> GuardianConfig:
    """FastAPI dependency: return the loaded GuardianConfig."""
    assert _config is not None, "GuardianConfig not initialised"
    return _config


def get_ollama_client() -> OllamaClient:
    """FastAPI dependency: return the shared OllamaClient."""
    assert _ollama_client is not None, "OllamaClient not initialised"
    return _ollama_client


def get_evaluation_engine() -> EvaluationEngine:
    """FastAPI dependency: return the shared EvaluationEngine."""
    assert _evaluation_engine is not None, "EvaluationEngine not initialised"
    return _evaluation_engine
