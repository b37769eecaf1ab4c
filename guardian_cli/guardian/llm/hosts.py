"""Ollama host definitions and the prioritized host pool."""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


class OllamaHost(BaseModel):
    """A named Ollama endpoint."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    base_url: str = Field(min_length=1)
    enabled: bool = True
    fallback: bool = False
    description: str | None = None

    @property
    def api_root(self) -> str:
        return self.base_url.rstrip("/")


def ensure_unique_names(hosts: list[OllamaHost]) -> list[OllamaHost]:
    seen: set[str] = set()
    for host in hosts:
        if host.name in seen:
            raise ValueError(f"duplicate host name: {host.name!r}")
        seen.add(host.name)
    return hosts


class HostPool(BaseModel):
    """Ordered hosts; primary and fallback views are derived on each call."""

    model_config = ConfigDict(frozen=True)

    hosts: Annotated[list[OllamaHost], AfterValidator(ensure_unique_names)] = Field(
        default_factory=list
    )

    def primary_hosts(self) -> list[OllamaHost]:
        return [h for h in self.hosts if h.enabled and not h.fallback]

    def fallback_hosts(self) -> list[OllamaHost]:
        return [h for h in self.hosts if h.enabled and h.fallback]

    def enabled_hosts(self) -> list[OllamaHost]:
        """Primaries first, then fallbacks, each in declaration order."""
        return self.primary_hosts() + self.fallback_hosts()

    def get_enabled(self, name: str) -> OllamaHost | None:
        return next((h for h in self.enabled_hosts() if h.name == name), None)


class PingResult(BaseModel):
    """Outcome of probing one host."""

    host: OllamaHost
    reachable: bool
    latency_ms: int | None = None
    error: str | None = None
