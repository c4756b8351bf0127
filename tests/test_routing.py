"""Tests for smart routing: extraction, classification, route table, execution."""

import asyncio
import random

import pytest

from promptwatt.providers import ProviderId, ProviderResult, error_result
from promptwatt.routing import (
    ClassificationError,
    ComplexityClassification,
    ComplexityClassifier,
    ComplexityLabel,
    ExecutionError,
    ExtractionError,
    RouteExecutor,
    RoutingPreference,
    extract_json,
    select_route,
)
from promptwatt.routing.extraction import parse_braces, parse_direct, parse_fenced
from promptwatt.routing.router import ROUTE_TABLE, check_route_table


# ── Fixtures ──────────────────────────────────────────────────

def fake_completion(reply: str):
    calls = []

    async def complete(model, messages):
        calls.append((model, messages))
        return reply

    complete.calls = calls
    return complete


class RecordingClient:
    """Minimal ProviderClient stand-in for the executor."""

    def __init__(self, result: ProviderResult):
        self.result = result
        self.calls = []

    async def invoke(self, provider_id, prompt, timeout_ms=None):
        self.calls.append((provider_id, prompt))
        return self.result


# ═══════════════════════════════════════════════════════════════
# 1. EXTRACTION
# ═══════════════════════════════════════════════════════════════

class TestExtraction:

    def test_fenced_block_inside_prose(self):
        text = 'Here is my answer:\n```json\n{"complexity":"Complex","reasoning":"multi-step"}\n```'
        assert extract_json(text) == {"complexity": "Complex", "reasoning": "multi-step"}

    def test_prose_without_braces_raises(self):
        with pytest.raises(ExtractionError) as exc:
            extract_json("I think this prompt is fairly simple, honestly.")
        assert "No valid JSON" in str(exc.value)

    def test_empty_text_raises(self):
        with pytest.raises(ExtractionError):
            extract_json("   ")

    def test_broken_braces_raise_with_fragment(self):
        with pytest.raises(ExtractionError) as exc:
            extract_json("Answer: {complexity: Simple}")
        assert "Failed to parse JSON" in str(exc.value)
        assert "{complexity: Simple}" in exc.value.fragment

    def test_stage_direct(self):
        assert parse_direct(' {"a": 1} ') == {"a": 1}
        assert parse_direct("prefix {\"a\": 1}") is None
        assert parse_direct("[1, 2]") is None

    def test_stage_fenced_untagged(self):
        assert parse_fenced('```\n{"a": 1}\n```') == {"a": 1}
        assert parse_fenced('no fence {"a": 1}') is None

    def test_stage_fenced_nested_object(self):
        assert parse_fenced('```json\n{"a": {"b": 2}}\n```') == {"a": {"b": 2}}

    def test_stage_braces(self):
        assert parse_braces('Sure! {"complexity": "Simple"} Hope that helps.') == {"complexity": "Simple"}
        assert parse_braces('x {"a": {"b": 1}} y') == {"a": {"b": 1}}
        assert parse_braces("no braces") is None

    def test_direct_wins_over_later_stages(self):
        assert extract_json('{"complexity": "Moderate"}') == {"complexity": "Moderate"}


# ═══════════════════════════════════════════════════════════════
# 2. CLASSIFIER
# ═══════════════════════════════════════════════════════════════

class TestClassifier:

    def test_classifies_clean_json(self):
        complete = fake_completion('{"complexity": "Simple", "reasoning": "Basic question."}')
        classifier = ComplexityClassifier(model="test-model", completion=complete)

        result = asyncio.run(classifier.classify("What is 2+2?"))

        assert result == ComplexityClassification(ComplexityLabel.SIMPLE, "Basic question.")
        model, messages = complete.calls[0]
        assert model == "test-model"
        assert messages[0]["role"] == "system"
        assert messages[1] == {"role": "user", "content": "What is 2+2?"}

    def test_classifies_fenced_reply(self):
        complete = fake_completion(
            'Sure:\n```json\n{"complexity": "Very Complex", "reasoning": "proof"}\n```')
        result = asyncio.run(ComplexityClassifier(completion=complete).classify("prove it"))
        assert result.label is ComplexityLabel.VERY_COMPLEX

    def test_unknown_label_is_rejected(self):
        complete = fake_completion('{"complexity": "Trivial", "reasoning": "x"}')
        with pytest.raises(ClassificationError) as exc:
            asyncio.run(ComplexityClassifier(completion=complete).classify("hi"))
        assert "Invalid complexity level" in str(exc.value)
        assert "Trivial" in str(exc.value)

    def test_missing_label_is_rejected(self):
        complete = fake_completion('{"reasoning": "forgot the label"}')
        with pytest.raises(ClassificationError):
            asyncio.run(ComplexityClassifier(completion=complete).classify("hi"))

    def test_unparsable_reply_is_terminal(self):
        complete = fake_completion("It's simple.")
        with pytest.raises(ClassificationError) as exc:
            asyncio.run(ComplexityClassifier(completion=complete).classify("hi"))
        assert "It's simple." in str(exc.value)

    def test_call_failure_wrapped(self):
        async def broken(model, messages):
            raise ConnectionError("network down")

        with pytest.raises(ClassificationError) as exc:
            asyncio.run(ComplexityClassifier(completion=broken).classify("hi"))
        assert "network down" in str(exc.value)

    def test_labels_are_ordered(self):
        labels = list(ComplexityLabel)
        assert labels == sorted(labels)
        assert ComplexityLabel.VERY_SIMPLE < ComplexityLabel.MODERATE < ComplexityLabel.VERY_COMPLEX
        assert [label.value for label in labels] == [
            "Very Simple", "Simple", "Moderate", "Complex", "Very Complex",
        ]


# ═══════════════════════════════════════════════════════════════
# 3. ROUTE SELECTION
# ═══════════════════════════════════════════════════════════════

class TestRouteSelection:

    def test_very_simple_low_energy_is_deterministic(self):
        preference = RoutingPreference.from_flags(low_energy=True)
        picks = {select_route("Very Simple", preference).provider_id for _ in range(50)}
        assert picks == {ProviderId.GOOGLE_SEARCH}

    def test_default_entries(self):
        assert select_route(ComplexityLabel.SIMPLE).provider_id == ProviderId.LLAMA_2
        assert select_route(ComplexityLabel.MODERATE).provider_id == ProviderId.LLAMA_3
        assert select_route(ComplexityLabel.COMPLEX).provider_id == ProviderId.DEEPSEEK_R1
        assert select_route(ComplexityLabel.VERY_COMPLEX).provider_id == ProviderId.DEEPSEEK_R1

    def test_preference_columns(self):
        assert select_route("Moderate", RoutingPreference.LOW_COST).provider_id == ProviderId.LLAMA_2
        assert select_route("Complex", RoutingPreference.LOW_LATENCY).provider_id == ProviderId.LLAMA_3
        assert select_route("Very Complex", RoutingPreference.LOW_LATENCY).provider_id == ProviderId.DEEPSEEK_R1
        assert select_route("Very Complex", RoutingPreference.LOW_ENERGY).provider_id == ProviderId.LLAMA_3

    def test_flag_priority(self):
        assert RoutingPreference.from_flags(True, True, True) is RoutingPreference.LOW_LATENCY
        assert RoutingPreference.from_flags(False, True, True) is RoutingPreference.LOW_COST
        assert RoutingPreference.from_flags(False, False, True) is RoutingPreference.LOW_ENERGY
        assert RoutingPreference.from_flags() is RoutingPreference.NONE

    def test_table_is_total(self):
        for label in ComplexityLabel:
            for preference in RoutingPreference:
                assert isinstance(ROUTE_TABLE[label][preference], ProviderId)

    def test_incomplete_table_is_rejected(self):
        missing_row = {label: row for label, row in ROUTE_TABLE.items() if label != ComplexityLabel.COMPLEX}
        with pytest.raises(RuntimeError):
            check_route_table(missing_row)

        short_row = dict(ROUTE_TABLE)
        short_row[ComplexityLabel.SIMPLE] = {RoutingPreference.NONE: ProviderId.LLAMA_2}
        with pytest.raises(RuntimeError) as exc:
            check_route_table(short_row)
        assert "Simple" in str(exc.value)

        check_route_table(ROUTE_TABLE)

    def test_preference_reason(self):
        decision = select_route("Simple", RoutingPreference.LOW_ENERGY)
        assert decision.preference_reason == "Low energy usage was prioritized."
        assert select_route("Simple").preference_reason == "No specific preferences were prioritized."

    def test_unknown_label_is_invariant_violation(self):
        with pytest.raises(ValueError):
            select_route("Trivial")


# ═══════════════════════════════════════════════════════════════
# 4. EXECUTION
# ═══════════════════════════════════════════════════════════════

class TestExecutor:

    def test_search_is_simulated_without_network(self):
        client = RecordingClient(error_result("x", "should not be called"))
        classification = ComplexityClassification(ComplexityLabel.VERY_SIMPLE, "lookup")

        routed = asyncio.run(RouteExecutor(client, rng=random.Random(7)).execute(
            "capital of France", ProviderId.GOOGLE_SEARCH, classification))

        assert client.calls == []
        assert 200 <= routed.result.latency_ms < 700
        data = routed.to_dict()
        assert data["complexity"] == "Very Simple"
        assert data["reasoning"] == "lookup"
        assert data["inputTokens"] == 3

    def test_models_go_through_client(self):
        ok = ProviderResult(
            provider_id=ProviderId.LLAMA_3.value, display_name="Llama 3",
            output_text="Here is the plan.", input_tokens=8, output_tokens=4, latency_ms=900,
        )
        client = RecordingClient(ok)

        routed = asyncio.run(RouteExecutor(client).execute("plan", "meta-llama/llama-3.1-405b:free"))

        assert client.calls == [(ProviderId.LLAMA_3, "plan")]
        assert routed.to_dict() == {
            "response": "Here is the plan.",
            "inputTokens": 8,
            "outputTokens": 4,
            "responseTime": 900,
        }

    def test_reply_starting_with_marker_is_returned(self):
        echoed = ProviderResult(
            provider_id=ProviderId.LLAMA_2.value, display_name="Llama 2",
            output_text="Error: the word you asked me to echo",
            input_tokens=9, output_tokens=8, latency_ms=40,
        )
        routed = asyncio.run(RouteExecutor(RecordingClient(echoed)).execute("echo", ProviderId.LLAMA_2))
        assert routed.to_dict()["response"] == "Error: the word you asked me to echo"

    def test_provider_failure_raises(self):
        client = RecordingClient(error_result(ProviderId.LLAMA_2.value, "API returned 500: boom"))
        with pytest.raises(ExecutionError) as exc:
            asyncio.run(RouteExecutor(client).execute("hi", ProviderId.LLAMA_2))
        assert "API returned 500: boom" in str(exc.value)
