"""Human and JSON rendering for CLI commands."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape

from guardian.checks.models import CheckResult, CheckSummary, Severity
from guardian.config import GuardianConfig
from guardian.evaluator.models import AskResult, EvaluationResult
from guardian.llm.hosts import OllamaHost, PingResult
from guardian.llm.ollama import OllamaModel

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

_SEVERITY_TAGS = {
    Severity.info: "",
    Severity.warning: " [yellow]\\[WARN][/yellow]",
    Severity.error: " [red]\\[ERROR][/red]",
}


def print_json(data: Any) -> None:
    # Plain print: rich would re-wrap long lines.
    print(json.dumps(data, indent=2))


def error(message: str, json_output: bool = False) -> None:
    if json_output:
        print_json({"error": message})
    else:
        err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def result_to_dict(result: CheckResult) -> dict[str, Any]:
    data = result.model_dump(mode="json")
    data["check"] = data.pop("check_name")
    return data


def check_results(results: list[CheckResult], json_output: bool) -> CheckSummary:
    summary = CheckSummary.from_results(results)
    if json_output:
        print_json({**summary.model_dump(), "results": [result_to_dict(r) for r in results]})
        return summary

    console.print("[bold]Guardian Checklist Results[/bold]\n")
    current = None
    for result in results:
        if result.check_name != current:
            if current is not None:
                console.print()
            console.print(f"[bold cyan]{escape(f'[{result.check_name}]')}[/bold cyan]")
            current = result.check_name

        icon = "[green]\\[OK][/green]" if result.passed else "[red]\\[FAIL][/red]"
        console.print(f"  {icon}{_SEVERITY_TAGS[result.severity]} {escape(result.message)}")
        if result.fix:
            console.print(f"       Fix: {escape(result.fix)}")

    console.print("\n---")
    console.print(
        f"Total: {summary.total} | Passed: {summary.passed} | "
        f"Failed: {summary.failed} ({summary.errors} errors, {summary.warnings} warnings)"
    )
    return summary


def ping_results(results: list[PingResult], json_output: bool) -> None:
    if json_output:
        print_json(
            [
                {
                    "name": r.host.name,
                    "base_url": r.host.base_url,
                    "reachable": r.reachable,
                    "fallback": r.host.fallback,
                    "latency_ms": r.latency_ms,
                    "error": r.error,
                }
                for r in results
            ]
        )
        return

    console.print(f"Pinging {len(results)} host(s)...\n")
    for r in results:
        fallback = " \\[fallback]" if r.host.fallback else ""
        name = escape(r.host.name)
        if r.reachable:
            console.print(f"  [green]\\[UP][/green] {name} ({r.latency_ms}ms){fallback}")
        else:
            err = escape(r.error or "unknown error")
            console.print(f"  [red]\\[DOWN][/red] {name}{fallback} - {err}")
    up = sum(1 for r in results if r.reachable)
    console.print(f"\n{up}/{len(results)} hosts reachable")


def host_models_entry(
    host: OllamaHost,
    reachable: bool,
    models: list[OllamaModel],
    error_message: str | None = None,
) -> dict[str, Any]:
    """JSON entry for one host's model listing."""
    entry: dict[str, Any] = {
        "host": host.name,
        "base_url": host.base_url,
        "reachable": reachable,
        "models": [m.name for m in models],
    }
    if error_message:
        entry["error"] = error_message
    return entry


def models_list(host: OllamaHost, models: list[OllamaModel]) -> None:
    console.print(f"\n[bold]{escape(host.name)}[/bold] ({escape(host.base_url)}):")
    if not models:
        console.print("  (no models)")
    for model in models:
        size = f" ({model.size / 1e9:.1f} GB)" if model.size is not None else ""
        console.print(f"  - {escape(model.name)}{size}")


def selected_host(host: OllamaHost, json_output: bool) -> None:
    if json_output:
        print_json({"host": host.name, "base_url": host.base_url, "fallback": host.fallback})
    else:
        print(host.name)


def show_config(config: GuardianConfig, json_output: bool) -> None:
    if json_output:
        print_json(
            {
                "default_timeout_ms": config.timeout_ms,
                "default_host": config.ollama.default_host,
                "default_model": config.ollama.default_model,
                "hosts": [h.model_dump() for h in config.ollama.hosts],
                "checks": config.checks.model_dump(),
            }
        )
        return

    console.print("[bold]Guardian CLI Configuration[/bold]\n")
    console.print(f"Timeout: {config.timeout_ms}ms")
    if config.ollama.default_host:
        console.print(f"Default host: {escape(config.ollama.default_host)}")
    if config.ollama.default_model:
        console.print(f"Default model: {escape(config.ollama.default_model)}")

    console.print("\nConfigured hosts:")
    if not config.ollama.hosts:
        console.print("  (none)")
    for host in config.ollama.hosts:
        status = "enabled" if host.enabled else "disabled"
        fallback = ", fallback" if host.fallback else ""
        console.print(
            f"  - {escape(host.name)} ({escape(host.base_url)}) \\[{status}{fallback}]"
        )
        if host.description:
            console.print(f"    {escape(host.description)}")

    console.print("\nCheck thresholds:")
    for key, value in config.checks.model_dump().items():
        console.print(f"  {key}: {value}")


def ask_response(result: AskResult, json_output: bool) -> None:
    if json_output:
        print_json(result.model_dump())
        return

    console.print(f"\\[{escape(result.host)}] Using model: {escape(result.model)}\n")
    print(result.response)
    if result.total_duration_ns:
        secs = result.total_duration_ns / 1e9
        console.print("\n---")
        console.print(f"Duration: {secs:.2f}s")
        if result.eval_count is not None:
            console.print(f"Tokens: {result.eval_count} ({result.eval_count / secs:.1f} tokens/sec)")


def evaluate_response(result: EvaluationResult, json_output: bool) -> None:
    if json_output:
        print_json(
            {
                "project": result.project,
                "host": result.host,
                "model": result.model,
                "total_checks": result.summary.total,
                "passed": result.summary.passed,
                "failed": result.summary.failed,
                "errors": result.summary.errors,
                "violations": [result_to_dict(r) for r in result.violations],
                "llm_evaluation": result.evaluation,
                "llm_error": result.llm_error,
                "eval_duration_ns": result.total_duration_ns,
            }
        )
        return

    summary = result.summary
    console.print(f"Checks complete: {summary.passed} passed, {summary.failed} failed\n")
    if summary.failed == 0:
        console.print("All checks passed. No LLM evaluation needed.")
        return

    for violation in result.violations:
        location = f" ({violation.file}:{violation.line})" if violation.line else ""
        console.print(
            f"  [red]\\[FAIL][/red]{_SEVERITY_TAGS[violation.severity]} "
            f"{escape(violation.message)}{escape(location)}"
        )

    if result.llm_error:
        err_console.print(f"\n[yellow]LLM evaluation unavailable:[/yellow] {escape(result.llm_error)}")
        return

    console.print(
        f"\n[bold]=== LLM Evaluation ({escape(result.model or '')} on {escape(result.host or '')}) ===[/bold]\n"
    )
    print(result.evaluation or "")
    if result.total_duration_ns:
        console.print(f"\n\\[Evaluation took {result.total_duration_ns / 1e9:.1f}s]")
