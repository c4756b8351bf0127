"""Tests for comparison mode: fan-out completeness, isolation and ranking."""

import asyncio
import json

import httpx
import pytest

from promptwatt.compare import CompareOrchestrator, rank_results
from promptwatt.config import Settings
from promptwatt.providers import (
    COMPARISON_PROVIDERS,
    ERROR_MARKER,
    ProviderClient,
    ProviderId,
    ProviderResult,
    error_result,
)


# ── Fixtures ──────────────────────────────────────────────────

def result(pid: str, latency: int, text: str = "ok") -> ProviderResult:
    return ProviderResult(provider_id=pid, display_name=pid, output_text=text, latency_ms=latency)


class FakeClient:
    """Stands in for ProviderClient; behavior chosen per provider id."""

    def __init__(self, behaviors: dict):
        self.settings = Settings(api_key="k", timeout_ms=1000)
        self.behaviors = behaviors
        self.started: list[str] = []

    async def invoke(self, provider_id, prompt, timeout_ms=None):
        key = provider_id.value if isinstance(provider_id, ProviderId) else provider_id
        self.started.append(key)
        behavior = self.behaviors.get(key, "ok")
        if behavior == "raise":
            raise RuntimeError("scheduler exploded")
        if behavior == "fail":
            return error_result(key, "Failed to get response from this model. boom", 12)
        if isinstance(behavior, (int, float)):
            await asyncio.sleep(behavior)
        return ProviderResult(
            provider_id=key, display_name=key, output_text=f"answer from {key}",
            input_tokens=5, output_tokens=7, latency_ms=100,
        )


def run_compare(client, provider_ids, prompt="What is 2+2?"):
    return asyncio.run(CompareOrchestrator(client).compare(prompt, provider_ids))


def mock_provider_client(handler, timeout_ms=30_000) -> ProviderClient:
    settings = Settings(api_key="test-key", timeout_ms=timeout_ms)
    return ProviderClient(settings, http=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


# ═══════════════════════════════════════════════════════════════
# 1. COMPLETENESS
# ═══════════════════════════════════════════════════════════════

class TestCompleteness:

    @pytest.mark.parametrize("behaviors", [
        {},
        {"meta-llama/llama-2-70b-chat": "fail"},
        {"meta-llama/llama-2-70b-chat": "raise", "deepseek/deepseek-r1:free": "fail"},
        {pid.value: "raise" for pid in COMPARISON_PROVIDERS},
    ])
    def test_one_result_per_provider(self, behaviors):
        """Output length and id multiset always match the input."""
        client = FakeClient(behaviors)
        ids = [pid.value for pid in COMPARISON_PROVIDERS]

        results = run_compare(client, ids)

        assert len(results) == len(ids)
        assert sorted(r.provider_id for r in results) == sorted(ids)

    def test_duplicate_ids_kept(self):
        ids = ["a", "a", "b"]
        results = run_compare(FakeClient({}), ids)
        assert sorted(r.provider_id for r in results) == ["a", "a", "b"]

    def test_invocation_failure_synthesizes_fallback(self):
        """A raising invocation becomes an error row with zero latency."""
        client = FakeClient({"b": "raise"})
        results = run_compare(client, ["a", "b"])
        fallback = next(r for r in results if r.provider_id == "b")

        assert fallback.output_text == f"{ERROR_MARKER}Request failed. scheduler exploded"
        assert fallback.latency_ms == 0
        assert fallback.input_tokens == 0 and fallback.output_tokens == 0

    def test_all_calls_start_together(self):
        """Concurrent: total time is close to the slowest call, not the sum."""
        client = FakeClient({"a": 0.2, "b": 0.2, "c": 0.2})

        async def timed():
            loop = asyncio.get_running_loop()
            start = loop.time()
            await CompareOrchestrator(client).compare("p", ["a", "b", "c"])
            return loop.time() - start

        assert asyncio.run(timed()) < 0.5
        assert sorted(client.started) == ["a", "b", "c"]


# ═══════════════════════════════════════════════════════════════
# 2. ISOLATION
# ═══════════════════════════════════════════════════════════════

class TestIsolation:

    def test_failure_does_not_touch_siblings(self):
        def handler(request):
            model = json.loads(request.content)["model"]
            if model == ProviderId.LLAMA_3.value:
                return httpx.Response(500, json={"error": "upstream down"})
            return httpx.Response(200, json={
                "choices": [{"message": {"content": f"hello from {model}"}}],
                "usage": {"prompt_tokens": 4, "completion_tokens": 2},
            })

        async def run(ids):
            client = mock_provider_client(handler)
            try:
                return await CompareOrchestrator(client).compare("hi", ids)
            finally:
                await client._http.aclose()

        together = {r.provider_id: r for r in asyncio.run(run(list(COMPARISON_PROVIDERS)))}
        alone = asyncio.run(run([ProviderId.LLAMA_2]))[0]

        failed = together[ProviderId.LLAMA_3.value]
        assert failed.is_error and "API returned 500: upstream down" in failed.output_text

        sibling = together[ProviderId.LLAMA_2.value]
        assert sibling.output_text == alone.output_text
        assert (sibling.input_tokens, sibling.output_tokens) == (alone.input_tokens, alone.output_tokens)
        assert not together[ProviderId.DEEPSEEK_R1.value].is_error

    def test_timeout_does_not_cancel_siblings(self):
        async def handler(request):
            model = json.loads(request.content)["model"]
            if model == ProviderId.DEEPSEEK_R1.value:
                await asyncio.sleep(5)
            else:
                await asyncio.sleep(0.05)
            return httpx.Response(200, json={
                "choices": [{"message": {"content": "fine"}}],
                "usage": {"prompt_tokens": 1, "completion_tokens": 1},
            })

        async def run():
            client = mock_provider_client(handler, timeout_ms=300)
            try:
                return await CompareOrchestrator(client).compare("hi", COMPARISON_PROVIDERS)
            finally:
                await client._http.aclose()

        by_id = {r.provider_id: r for r in asyncio.run(run())}
        assert by_id[ProviderId.DEEPSEEK_R1.value].is_error
        assert "timed out" in by_id[ProviderId.DEEPSEEK_R1.value].output_text
        assert by_id[ProviderId.LLAMA_2.value].output_text == "fine"
        assert by_id[ProviderId.LLAMA_3.value].output_text == "fine"


# ═══════════════════════════════════════════════════════════════
# 3. RANKING
# ═══════════════════════════════════════════════════════════════

class TestRanking:

    def test_zero_latency_sinks_stably(self):
        """[0, 120, 0, 45] ranks as [45, 120, 0 (idx 0), 0 (idx 2)]."""
        rows = [result("r0", 0), result("r1", 120), result("r2", 0), result("r3", 45)]

        ranked = rank_results(rows)

        assert [r.latency_ms for r in ranked] == [45, 120, 0, 0]
        assert [r.provider_id for r in ranked] == ["r3", "r1", "r0", "r2"]

    def test_errors_sink_even_with_latency(self):
        rows = [
            error_result("slow-fail", "timeout", latency_ms=30),
            result("fast", 80),
            result("faster", 20),
        ]
        ranked = rank_results(rows)
        assert [r.provider_id for r in ranked] == ["faster", "fast", "slow-fail"]

    def test_success_text_with_marker_ranks_by_latency(self):
        rows = [result("slow", 300), result("echo", 40, text="Error: echoed back")]
        assert [r.provider_id for r in rank_results(rows)] == ["echo", "slow"]

    def test_does_not_mutate_input(self):
        rows = [result("a", 50), result("b", 10)]
        rank_results(rows)
        assert [r.provider_id for r in rows] == ["a", "b"]

    def test_compare_ranked_orders_output(self):
        client = FakeClient({"b": "fail", "c": "raise"})
        ranked = asyncio.run(CompareOrchestrator(client).compare_ranked("p", ["c", "b", "a"]))
        assert ranked[0].provider_id == "a"
        assert [r.provider_id for r in ranked[1:]] == ["c", "b"]
