"""Host and model resolution over a prioritized host pool."""

from __future__ import annotations

import logging

from guardian.llm.hosts import HostPool, OllamaHost
from guardian.llm.ollama import OllamaClient, OllamaError

logger = logging.getLogger(__name__)


class ResolutionError(LookupError):
    """Base class for expected "nothing qualifies" outcomes."""


class NoSuitableHostError(ResolutionError):
    """No configured host is reachable (and, if required, serves the model)."""


class NoModelAvailableError(ResolutionError):
    """A host was selected but no model could be chosen on it."""


class HostResolver:
    """Selects an endpoint: primaries in order, then fallbacks in order."""

    def __init__(self, client: OllamaClient, log: logging.Logger | None = None) -> None:
        self._client = client
        self._log = log or logger

    async def resolve(self, pool: HostPool, required_model: str | None = None) -> OllamaHost:
        """Return the first reachable host that satisfies ``required_model``.

        Each host is probed at most once. With a required model, a host whose
        model listing fails or lacks the model is passed over.
        """
        for host in pool.enabled_hosts():
            if await self._qualifies(host, required_model):
                self._log.info("Selected host %s", host.name)
                return host

        if required_model:
            raise NoSuitableHostError(f"No reachable host serves model '{required_model}'")
        raise NoSuitableHostError("No suitable hosts available")

    async def resolve_named(self, pool: HostPool, name: str | None) -> OllamaHost:
        """Use the enabled host called ``name`` if given, else ``resolve``."""
        if name is None:
            return await self.resolve(pool)
        host = pool.get_enabled(name)
        if host is None:
            raise NoSuitableHostError(f"Host '{name}' not found or disabled")
        return host

    async def resolve_model(
        self,
        host: OllamaHost,
        model: str | None = None,
        default_model: str | None = None,
    ) -> str:
        """Explicit model, then the configured default, then the host's first model."""
        if model:
            return model
        if default_model:
            return default_model
        models = await self._client.list_models(host)
        if not models:
            raise NoModelAvailableError(f"No models available on host {host.name}")
        return models[0].name

    async def _qualifies(self, host: OllamaHost, required_model: str | None) -> bool:
        ping = await self._client.probe(host)
        if not ping.reachable:
            self._log.debug("Skipping unreachable host %s: %s", host.name, ping.error)
            return False
        if not required_model:
            return True

        try:
            models = await self._client.list_models(host)
        except OllamaError as e:
            self._log.warning("Could not list models on %s: %s", host.name, e)
            return False
        if any(m.name == required_model for m in models):
            return True
        self._log.debug("Host %s does not serve %s", host.name, required_model)
        return False
