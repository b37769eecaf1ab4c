"""Tests for EvaluationEngine and the evaluation prompt."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from guardian.checks.models import CheckResult, Severity
from guardian.checks.pipeline import run_checks
from guardian.evaluator.engine import EvaluationEngine
from guardian.llm.hosts import HostPool, OllamaHost, PingResult
from guardian.llm.ollama import GenerateResponse, OllamaError, OllamaModel
from guardian.llm.prompts.evaluate import build_evaluation_user_prompt, results_to_yaml
from guardian.llm.resolver import NoSuitableHostError

POOL = HostPool(hosts=[OllamaHost(name="box", base_url="http://box:11434")])


class MockClient:
    """Controllable stand-in for OllamaClient."""

    def __init__(self, reachable: bool = True, fail: bool = False) -> None:
        self._reachable = reachable
        self._fail = fail
        self.prompts: list[tuple[str, str, str | None]] = []

    async def probe(self, host: OllamaHost) -> PingResult:
        return PingResult(host=host, reachable=self._reachable, error=None if self._reachable else "down")

    async def list_models(self, host: OllamaHost) -> list[OllamaModel]:
        return [OllamaModel(name="llama3.2:3b")]

    async def generate(
        self, host: OllamaHost, model: str, prompt: str, system: str | None = None
    ) -> GenerateResponse:
        if self._fail:
            raise OllamaError("Host box returned HTTP 500: boom")
        self.prompts.append((model, prompt, system))
        return GenerateResponse(response="Fix the edition.", total_duration=3_000_000_000, eval_count=40)


@pytest.fixture
def broken_project(project: Path) -> Path:
    (project / "Cargo.toml").write_text(
        '[package]\nname = "demo"\nversion = "0.1.0"\nedition = "2021"\n', encoding="utf-8"
    )
    return project


class TestEvaluate:
    @pytest.mark.asyncio
    async def test_clean_project_skips_llm(self, project: Path) -> None:
        client = MockClient()
        result = await EvaluationEngine(client, POOL).evaluate(project)
        assert result.summary.failed == 0
        assert result.evaluation is None
        assert client.prompts == []

    @pytest.mark.asyncio
    async def test_violations_sent_to_model(self, broken_project: Path) -> None:
        client = MockClient()
        result = await EvaluationEngine(client, POOL).evaluate(broken_project)

        assert result.host == "box"
        assert result.model == "llama3.2:3b"
        assert result.evaluation == "Fix the edition."
        assert result.total_duration_ns == 3_000_000_000
        assert [v.check_name for v in result.violations] == ["rust-edition"]
        model, prompt, system = client.prompts[0]
        assert "rust-edition" in prompt
        assert system is not None

    @pytest.mark.asyncio
    async def test_default_model_from_config(self, broken_project: Path) -> None:
        client = MockClient()
        engine = EvaluationEngine(client, POOL, default_model="qwen2.5-coder:14b")
        result = await engine.evaluate(broken_project)
        assert result.model == "qwen2.5-coder:14b"

    @pytest.mark.asyncio
    async def test_no_host_keeps_results(self, broken_project: Path) -> None:
        result = await EvaluationEngine(MockClient(reachable=False), POOL).evaluate(broken_project)
        assert result.summary.errors == 1
        assert result.evaluation is None
        assert result.llm_error == "No suitable hosts available"

    @pytest.mark.asyncio
    async def test_generation_failure_keeps_results(self, broken_project: Path) -> None:
        result = await EvaluationEngine(MockClient(fail=True), POOL).evaluate(broken_project)
        assert result.host == "box"
        assert "HTTP 500" in result.llm_error

    @pytest.mark.asyncio
    async def test_missing_project_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            await EvaluationEngine(MockClient(), POOL).evaluate(tmp_path / "nope")

    @pytest.mark.asyncio
    async def test_checks_run_off_event_loop_thread(self, project: Path, monkeypatch) -> None:
        threads: list[int] = []

        def recording_run_checks(*args, **kwargs):
            threads.append(threading.get_ident())
            return run_checks(*args, **kwargs)

        monkeypatch.setattr("guardian.evaluator.engine.run_checks", recording_run_checks)
        result = await EvaluationEngine(MockClient(), POOL).evaluate(project)

        assert result.summary.failed == 0
        assert threads and threads[0] != threading.get_ident()


class TestAsk:
    @pytest.mark.asyncio
    async def test_ask(self) -> None:
        client = MockClient()
        result = await EvaluationEngine(client, POOL).ask("why?", model="m1")
        assert (result.host, result.model, result.response) == ("box", "m1", "Fix the edition.")
        assert client.prompts == [("m1", "why?", None)]

    @pytest.mark.asyncio
    async def test_ask_propagates_resolution_error(self) -> None:
        with pytest.raises(NoSuitableHostError):
            await EvaluationEngine(MockClient(), POOL).ask("why?", host_name="other")


class TestPrompt:
    def test_results_grouped_by_check(self) -> None:
        results = [
            CheckResult.fail("loc-limits", Severity.error, "a.rs: too long", file="a.rs", fix="split"),
            CheckResult.ok("loc-limits", "b.rs: fine"),
            CheckResult.fail("clippy-disables", Severity.warning, "c.rs: allow", line=4),
        ]
        text = results_to_yaml(results)
        assert text.index("loc-limits:") < text.index("clippy-disables:")
        assert "status: FAIL" in text
        assert "line: 4" in text

    def test_user_prompt_mentions_project(self) -> None:
        prompt = build_evaluation_user_prompt(
            [CheckResult.fail("x", Severity.error, "bad")], Path("/work/demo")
        )
        assert "Directory: /work/demo" in prompt
        assert "```yaml" in prompt
        assert "Priority order" in prompt
