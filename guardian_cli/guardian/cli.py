"""Command-line interface for the Guardian governor."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from guardian import output
from guardian.checks.pipeline import REGISTRY, run_checks
from guardian.config import ConfigError, GuardianConfig, default_config_path
from guardian.evaluator.engine import EvaluationEngine
from guardian.llm.ollama import OllamaClient, OllamaError
from guardian.llm.resolver import HostResolver, ResolutionError

ASK_TIMEOUT_S = 120.0
EVALUATE_TIMEOUT_S = 180.0

app = typer.Typer(
    name="guardian",
    help="Local LLM governor for development process enforcement.",
    no_args_is_help=True,
)


@dataclass
class CliState:
    config_path: Path | None = None
    json_output: bool = False
    _config: GuardianConfig | None = field(default=None, repr=False)

    def config(self) -> GuardianConfig:
        if self._config is None:
            try:
                self._config = GuardianConfig.load(self.config_path)
            except ConfigError as e:
                output.error(str(e), self.json_output)
                raise typer.Exit(code=1)
        return self._config

    def client(self, generate_timeout_s: float = EVALUATE_TIMEOUT_S) -> OllamaClient:
        return OllamaClient(
            timeout_ms=self.config().timeout_ms,
            generate_timeout_s=generate_timeout_s,
        )


def _init_logging(verbose: bool) -> None:
    dev_mode = os.environ.get("GUARDIAN_DEV_MODE", "").lower() == "true"
    logging.basicConfig(
        level=logging.DEBUG if verbose or dev_mode else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _run(client: OllamaClient, coro: Any) -> Any:
    async def runner() -> Any:
        try:
            return await coro
        finally:
            await client.close()

    return asyncio.run(runner())


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (default: ~/.config/guardian-cli/guardian.toml)",
        ),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output in JSON format")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose output")] = False,
) -> None:
    """Local LLM governor for development process enforcement."""
    _init_logging(verbose)
    ctx.obj = CliState(config_path=config, json_output=json_output)


@app.command()
def check(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Project directory")] = Path("."),
    only: Annotated[
        str | None, typer.Option("--only", help="Only run specific check(s), comma-separated")
    ] = None,
    max_loc: Annotated[int | None, typer.Option(help="Maximum lines of code per file")] = None,
    warn_loc: Annotated[int | None, typer.Option(help="Warning threshold for file LOC")] = None,
    max_functions: Annotated[int | None, typer.Option(help="Maximum functions per module")] = None,
    max_modules: Annotated[int | None, typer.Option(help="Maximum modules per crate")] = None,
    edition: Annotated[str | None, typer.Option(help="Required Rust edition")] = None,
) -> None:
    """Run checklist validation on a project."""
    state: CliState = ctx.obj
    try:
        check_config = state.config().checks.with_overrides(
            max_file_loc=max_loc,
            warn_file_loc=warn_loc,
            max_functions_per_module=max_functions,
            max_modules_per_crate=max_modules,
            required_edition=edition,
        )
    except ValidationError as e:
        output.error(f"Invalid thresholds: {e}", state.json_output)
        raise typer.Exit(code=1)

    try:
        results = run_checks(path, check_config, only)
    except OSError as e:
        output.error(str(e), state.json_output)
        raise typer.Exit(code=1)

    summary = output.check_results(results, state.json_output)
    if summary.has_errors:
        raise typer.Exit(code=1)


@app.command(name="list-checks")
def list_checks(ctx: typer.Context) -> None:
    """List the available checks in run order."""
    state: CliState = ctx.obj
    if state.json_output:
        output.print_json([{"name": c.name, "description": c.description} for c in REGISTRY])
        return
    for c in REGISTRY:
        output.console.print(f"  {c.name:<16} {c.description}")


@app.command(name="ping-hosts")
def ping_hosts(ctx: typer.Context) -> None:
    """Ping all configured Ollama hosts to check availability."""
    state: CliState = ctx.obj
    hosts = state.config().host_pool.enabled_hosts()
    if not hosts:
        output.error("No hosts configured. Add hosts to your guardian.toml file.", state.json_output)
        raise typer.Exit(code=1)

    client = state.client()
    results = _run(client, client.probe_all(hosts))
    output.ping_results(results, state.json_output)


@app.command(name="list-models")
def list_models(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option(help="Only query a specific host by name")] = None,
) -> None:
    """List models available on reachable Ollama hosts."""
    state: CliState = ctx.obj
    hosts = state.config().host_pool.enabled_hosts()
    if host is not None:
        hosts = [h for h in hosts if h.name == host]
    if not hosts:
        output.error("No matching hosts found", state.json_output)
        raise typer.Exit(code=1)

    client = state.client()

    async def collect() -> list[dict[str, Any]]:
        entries: list[dict[str, Any]] = []
        for h in hosts:
            ping = await client.probe(h)
            if not ping.reachable:
                if not state.json_output:
                    output.console.print(f"\n{h.name} ({h.base_url}): UNREACHABLE", markup=False)
                entries.append(output.host_models_entry(h, False, []))
                continue
            try:
                models = await client.list_models(h)
            except OllamaError as e:
                if not state.json_output:
                    output.console.print(f"\n{h.name} ({h.base_url}): ERROR - {e}", markup=False)
                entries.append(output.host_models_entry(h, True, [], str(e)))
                continue
            if not state.json_output:
                output.models_list(h, models)
            entries.append(output.host_models_entry(h, True, models))
        return entries

    entries = _run(client, collect())
    if state.json_output:
        output.print_json(entries)


@app.command(name="select-host")
def select_host(
    ctx: typer.Context,
    model: Annotated[
        str | None, typer.Option(help="Require a specific model to be available")
    ] = None,
) -> None:
    """Select the best available host (for scripting)."""
    state: CliState = ctx.obj
    client = state.client()
    resolver = HostResolver(client)
    try:
        host = _run(client, resolver.resolve(state.config().host_pool, model))
    except ResolutionError as e:
        output.error(str(e), state.json_output)
        raise typer.Exit(code=1)
    output.selected_host(host, state.json_output)


@app.command(name="show-config")
def show_config(ctx: typer.Context) -> None:
    """Show current configuration."""
    state: CliState = ctx.obj
    output.show_config(state.config(), state.json_output)


@app.command(name="config-path")
def config_path(ctx: typer.Context) -> None:
    """Show default config file path."""
    state: CliState = ctx.obj
    path = default_config_path()
    if state.json_output:
        output.print_json({"path": str(path)})
    else:
        print(path)


@app.command()
def ask(
    ctx: typer.Context,
    prompt: Annotated[str, typer.Argument(help="The prompt to send")],
    model: Annotated[str | None, typer.Option("--model", "-m", help="Model to use")] = None,
    host: Annotated[str | None, typer.Option(help="Specific host to use")] = None,
) -> None:
    """Send a prompt to an Ollama model and get a response."""
    state: CliState = ctx.obj
    config = state.config()
    client = state.client(generate_timeout_s=ASK_TIMEOUT_S)
    engine = EvaluationEngine(client, config.host_pool, config.checks, config.ollama.default_model)
    try:
        result = _run(client, engine.ask(prompt, model, host))
    except (ResolutionError, OllamaError) as e:
        output.error(str(e), state.json_output)
        raise typer.Exit(code=1)
    output.ask_response(result, state.json_output)


@app.command()
def evaluate(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Project directory")] = Path("."),
    model: Annotated[str | None, typer.Option("--model", "-m", help="Model to use")] = None,
    host: Annotated[str | None, typer.Option(help="Specific host to use")] = None,
    only: Annotated[
        str | None, typer.Option("--only", help="Only run specific check(s), comma-separated")
    ] = None,
) -> None:
    """Run checks and have the LLM evaluate the failures."""
    state: CliState = ctx.obj
    config = state.config()
    client = state.client(generate_timeout_s=EVALUATE_TIMEOUT_S)
    engine = EvaluationEngine(client, config.host_pool, config.checks, config.ollama.default_model)
    try:
        result = _run(client, engine.evaluate(path, only, model, host))
    except OSError as e:
        output.error(str(e), state.json_output)
        raise typer.Exit(code=1)

    output.evaluate_response(result, state.json_output)
    if result.summary.has_errors:
        raise typer.Exit(code=1)


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
