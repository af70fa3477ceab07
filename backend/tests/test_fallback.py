import asyncio

import pytest

from bible_study.llm.base import UpstreamError
from bible_study.llm.fallback import DEFAULT_UPSTREAM_MESSAGE, CompletionService
from bible_study.llm.postprocess import FALLBACK_MESSAGE
from bible_study.llm.prompt import RESPONSE_INSTRUCTION

from conftest import TEST_MODELS, ScriptedClient, error_payload, ok_payload


def run(client, context="ctx", question="What is grace?"):
    service = CompletionService(client, models=TEST_MODELS, temperature=0.3, max_output_tokens=2048)
    return asyncio.run(service.complete(context, question))


class TestFallbackLadder:
    def test_primary_success_is_single_attempt(self):
        client = ScriptedClient([(200, ok_payload("Grace is a gift."))])

        result = run(client)

        assert client.models == ["model-primary"]
        assert result.text == "Grace is a gift."
        assert result.finish_reason == "STOP"
        assert result.model_used == "model-primary"
        assert result.usage_metadata == {"promptTokenCount": 10, "candidatesTokenCount": 5}

    def test_length_limit_retries_secondary_once(self):
        client = ScriptedClient([
            (200, ok_payload("partial", "MAX_TOKENS")),
            (200, ok_payload("complete")),
        ])

        result = run(client)

        assert client.models == ["model-primary", "model-secondary"]
        assert result.text == "complete"
        assert result.model_used == "model-secondary"

    def test_secondary_length_limit_is_accepted(self):
        client = ScriptedClient([
            (200, ok_payload("partial", "MAX_TOKENS")),
            (200, ok_payload("still partial", "MAX_TOKENS")),
        ])

        result = run(client)

        assert len(client.requests) == 2
        assert result.finish_reason == "MAX_TOKENS"
        assert result.hit_length_limit

    def test_secondary_failure_falls_to_tertiary(self):
        client = ScriptedClient([
            (200, ok_payload("partial", "MAX_TOKENS")),
            (503, error_payload("overloaded")),
            (200, ok_payload("from tertiary")),
        ])

        result = run(client)

        assert client.models == ["model-primary", "model-secondary", "model-tertiary"]
        assert result.text == "from tertiary"
        assert result.model_used == "model-tertiary"

    def test_secondary_without_candidates_falls_to_tertiary(self):
        client = ScriptedClient([
            (200, ok_payload("partial", "MAX_TOKENS")),
            (200, {"candidates": []}),
            (200, ok_payload("from tertiary")),
        ])

        result = run(client)

        assert len(client.requests) == 3
        assert result.model_used == "model-tertiary"

    def test_all_attempts_failing_raises_after_three(self):
        client = ScriptedClient([
            (200, ok_payload("partial", "MAX_TOKENS")),
            (503, error_payload("overloaded")),
            (500, error_payload("tertiary down")),
        ])

        with pytest.raises(UpstreamError) as exc_info:
            run(client)

        assert len(client.requests) == 3
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "tertiary down"
        assert exc_info.value.model == "model-tertiary"

    def test_tertiary_length_limit_is_not_retried(self):
        client = ScriptedClient([
            (200, ok_payload("partial", "MAX_TOKENS")),
            (None, {}),
            (200, ok_payload("short", "MAX_TOKENS")),
        ])

        result = run(client)

        assert len(client.requests) == 3
        assert result.finish_reason == "MAX_TOKENS"

    def test_primary_failure_is_surfaced(self):
        client = ScriptedClient([(429, error_payload("Quota exceeded"))])

        with pytest.raises(UpstreamError) as exc_info:
            run(client)

        assert client.models == ["model-primary"]
        assert exc_info.value.status_code == 429
        assert exc_info.value.message == "Quota exceeded"

    def test_transport_failure_uses_default_message(self):
        client = ScriptedClient([(None, {})])

        with pytest.raises(UpstreamError) as exc_info:
            run(client)

        assert exc_info.value.status_code is None
        assert exc_info.value.message == DEFAULT_UPSTREAM_MESSAGE

    def test_malformed_success_payload_returns_fallback_message(self):
        client = ScriptedClient([(200, {"unexpected": True})])

        result = run(client)

        assert len(client.requests) == 1
        assert result.text == FALLBACK_MESSAGE
        assert result.finish_reason is None
        assert result.usage_metadata is None

    def test_every_attempt_sends_the_same_instruction_and_question(self):
        client = ScriptedClient([
            (200, ok_payload("partial", "MAX_TOKENS")),
            (500, {}),
            (200, ok_payload()),
        ])

        run(client, context="Relevant Sermons (Top 1):", question="Who is the vine?")

        assert {r.system_instruction for r in client.requests} == {RESPONSE_INSTRUCTION}
        assert {r.question for r in client.requests} == {"Who is the vine?"}
        assert {r.context for r in client.requests} == {"Relevant Sermons (Top 1):"}
        assert {(r.temperature, r.max_output_tokens) for r in client.requests} == {(0.3, 2048)}
