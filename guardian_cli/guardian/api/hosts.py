"""Hosts API: probe, select and inspect configured Ollama hosts."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from guardian.config import GuardianConfig
from guardian.deps import get_config, get_ollama_client
from guardian.llm.ollama import OllamaClient, OllamaError
from guardian.llm.resolver import HostResolver, ResolutionError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hosts", tags=["hosts"])


class PingResponse(BaseModel):
    name: str
    base_url: str
    fallback: bool = False
    reachable: bool
    latency_ms: int | None = None
    error: str | None = None


class SelectedHostResponse(BaseModel):
    name: str
    base_url: str
    fallback: bool = False


class HostModelsResponse(BaseModel):
    host: str
    models: list[str] = Field(default_factory=list)


@router.get("/ping", response_model=list[PingResponse])
async def ping_hosts(
    config: GuardianConfig = Depends(get_config),
    client: OllamaClient = Depends(get_ollama_client),
) -> list[PingResponse]:
    """Probe every enabled host concurrently; results keep configured order."""
    results = await client.probe_all(config.host_pool.enabled_hosts())
    return [
        PingResponse(
            name=r.host.name,
            base_url=r.host.base_url,
            fallback=r.host.fallback,
            reachable=r.reachable,
            latency_ms=r.latency_ms,
            error=r.error,
        )
        for r in results
    ]


@router.get("/select", response_model=SelectedHostResponse)
async def select_host(
    model: str | None = Query(None, description="Require this model to be served"),
    config: GuardianConfig = Depends(get_config),
    client: OllamaClient = Depends(get_ollama_client),
) -> SelectedHostResponse:
    try:
        host = await HostResolver(client).resolve(config.host_pool, model)
    except ResolutionError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return SelectedHostResponse(name=host.name, base_url=host.base_url, fallback=host.fallback)


@router.get("/{name}/models", response_model=HostModelsResponse)
async def host_models(
    name: str,
    config: GuardianConfig = Depends(get_config),
    client: OllamaClient = Depends(get_ollama_client),
) -> HostModelsResponse:
    """List the models served by one enabled host."""
    host = config.host_pool.get_enabled(name)
    if host is None:
        raise HTTPException(status_code=404, detail=f"Host '{name}' not found or disabled")
    try:
        models = await client.list_models(host)
    except OllamaError as e:
        logger.warning("Model listing failed on %s: %s", name, e)
        raise HTTPException(status_code=502, detail=str(e))
    return HostModelsResponse(host=host.name, models=[m.name for m in models])
