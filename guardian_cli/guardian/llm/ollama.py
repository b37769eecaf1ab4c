"""Ollama HTTP client: probing, model listing and generation."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from guardian.llm.hosts import OllamaHost, PingResult

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT_MS = 2500
DEFAULT_GENERATE_TIMEOUT_S = 180.0
PROBE_PATH = "/api/tags"
GENERATE_PATH = "/api/generate"


class OllamaError(RuntimeError):
    """An Ollama request failed or returned an unusable payload."""


class OllamaModel(BaseModel):
    """A model advertised by an Ollama server."""

    name: str
    modified_at: str | None = None
    size: int | None = None
    digest: str | None = None


class TagsResponse(BaseModel):
    models: list[OllamaModel] = Field(default_factory=list)


class GenerateResponse(BaseModel):
    """Non-streaming /api/generate payload."""

    response: str
    done: bool = True
    model: str | None = None
    total_duration: int | None = None
    eval_count: int | None = None


class OllamaClient:
    """Talks to any number of Ollama hosts through one shared httpx client."""

    def __init__(
        self,
        timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS,
        generate_timeout_s: float = DEFAULT_GENERATE_TIMEOUT_S,
        log: logging.Logger | None = None,
    ) -> None:
        self._timeout_s = timeout_ms / 1000
        self._generate_timeout_s = generate_timeout_s
        self._log = log or logger
        self._client: httpx.AsyncClient | None = None

    @property
    def timeout_ms(self) -> int:
        return int(self._timeout_s * 1000)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout_s))
        return self._client

    async def probe(self, host: OllamaHost) -> PingResult:
        """Check whether a host answers on the tags endpoint. Never raises."""
        url = f"{host.api_root}{PROBE_PATH}"
        self._log.debug("Pinging Ollama host %s at %s", host.name, url)
        start = time.perf_counter()

        try:
            client = await self._get_client()
            resp = await asyncio.wait_for(client.get(url), timeout=self._timeout_s)
        except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as e:
            error = str(e) or f"timed out after {self.timeout_ms}ms"
            self._log.warning("Failed to reach host %s: %s", host.name, error)
            return PingResult(host=host, reachable=False, error=error)

        latency = int((time.perf_counter() - start) * 1000)
        if resp.status_code == httpx.codes.OK:
            self._log.info("Host %s reachable (%dms)", host.name, latency)
            return PingResult(host=host, reachable=True, latency_ms=latency)

        self._log.warning("Host %s returned HTTP %d", host.name, resp.status_code)
        return PingResult(
            host=host,
            reachable=False,
            latency_ms=latency,
            error=f"HTTP status: {resp.status_code} {resp.reason_phrase}".rstrip(),
        )

    async def probe_all(self, hosts: list[OllamaHost]) -> list[PingResult]:
        """Probe all hosts concurrently; results keep the input order."""
        return list(await asyncio.gather(*(self.probe(h) for h in hosts)))

    async def list_models(self, host: OllamaHost) -> list[OllamaModel]:
        url = f"{host.api_root}{PROBE_PATH}"
        self._log.debug("Listing models on %s", host.name)
        client = await self._get_client()

        try:
            resp = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise OllamaError(f"Failed to connect to {host.name}: {e}") from e

        if not resp.is_success:
            self._log.warning("Failed to list models on %s: HTTP %d", host.name, resp.status_code)
            raise OllamaError(
                f"Host {host.name} returned HTTP {resp.status_code}: {resp.reason_phrase}"
            )

        tags = self._parse(TagsResponse, resp, host)
        self._log.info("Listed %d models on %s", len(tags.models), host.name)
        return tags.models

    async def generate(
        self,
        host: OllamaHost,
        model: str,
        prompt: str,
        system: str | None = None,
    ) -> GenerateResponse:
        """Send a single non-streaming generation request."""
        url = f"{host.api_root}{GENERATE_PATH}"
        payload: dict[str, Any] = {"model": model, "prompt": prompt, "stream": False}
        if system:
            payload["system"] = system

        self._log.info(
            "Sending generate request: host=%s, model=%s, prompt_len=%d",
            host.name,
            model,
            len(prompt),
        )
        client = await self._get_client()
        start = time.perf_counter()

        try:
            resp = await client.post(url, json=payload, timeout=self._generate_timeout_s)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise OllamaError(f"Failed to connect to {host.name}: {e}") from e

        if not resp.is_success:
            self._log.warning(
                "Generate request to %s failed: HTTP %d: %s",
                host.name,
                resp.status_code,
                resp.text,
            )
            raise OllamaError(f"Host {host.name} returned HTTP {resp.status_code}: {resp.text}")

        result = self._parse(GenerateResponse, resp, host)
        self._log.info(
            "Generate complete: host=%s, model=%s, response_len=%d, duration_ms=%d, eval_count=%s",
            host.name,
            model,
            len(result.response),
            int((time.perf_counter() - start) * 1000),
            result.eval_count,
        )
        return result

    def _parse(self, schema: type[BaseModel], resp: httpx.Response, host: OllamaHost) -> Any:
        try:
            return schema.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            preview = resp.text[:200] if resp.text else "(empty)"
            raise OllamaError(
                f"Failed to parse response from {host.name}: {e}. Body: {preview}"
            ) from e

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
