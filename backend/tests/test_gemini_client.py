import asyncio
import json

import httpx
import pytest

from bible_study.llm.base import CompletionRequest, ConfigurationError
from bible_study.llm.gemini import GeminiClient
from bible_study.llm.prompt import RESPONSE_INSTRUCTION

from conftest import ok_payload

REQUEST = CompletionRequest(
    system_instruction=RESPONSE_INSTRUCTION,
    question="What is grace?",
    context="Relevant Sermons (Top 1):\n1. \"Grace\"",
    model="gemini-2.5-flash",
    temperature=0.3,
    max_output_tokens=2048,
)


def make_client(handler) -> GeminiClient:
    return GeminiClient(
        api_key="secret",
        base_url="https://example.test/v1beta",
        timeout_sec=5,
        transport=httpx.MockTransport(handler),
    )


def test_posts_generate_content_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["key"] = request.url.params.get("key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=ok_payload("Grace is a gift."))

    attempt = asyncio.run(make_client(handler).generate(REQUEST))

    assert attempt.ok
    assert attempt.model == "gemini-2.5-flash"
    assert attempt.finish_reason == "STOP"
    assert seen["method"] == "POST"
    assert seen["path"] == "/v1beta/models/gemini-2.5-flash:generateContent"
    assert seen["key"] == "secret"

    body = seen["body"]
    assert body["system_instruction"] == {"parts": [{"text": RESPONSE_INSTRUCTION}]}
    parts = body["contents"][0]["parts"]
    assert len(body["contents"]) == 1
    assert parts[0]["text"] == f"System rule: {RESPONSE_INSTRUCTION}"
    assert "Bible study assistant" in parts[1]["text"]
    assert REQUEST.context in parts[1]["text"]
    assert "User question: What is grace?" in parts[1]["text"]
    assert body["generationConfig"] == {"temperature": 0.3, "maxOutputTokens": 2048}


def test_http_error_is_returned_as_failed_attempt():
    def handler(request):
        return httpx.Response(400, json={"error": {"message": "API key not valid"}})

    attempt = asyncio.run(make_client(handler).generate(REQUEST))

    assert not attempt.ok
    assert attempt.status_code == 400
    assert attempt.error_message == "API key not valid"


def test_non_json_body_gives_empty_payload():
    def handler(request):
        return httpx.Response(200, text="<html>oops</html>")

    attempt = asyncio.run(make_client(handler).generate(REQUEST))

    assert attempt.ok
    assert attempt.payload == {}
    assert attempt.candidates == []


def test_connection_error_has_no_status():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    attempt = asyncio.run(make_client(handler).generate(REQUEST))

    assert attempt.status_code is None
    assert not attempt.ok


def test_missing_api_key_is_a_configuration_error(monkeypatch):
    from bible_study.core.settings import settings

    monkeypatch.setattr(settings, "gemini_api_key", "")
    with pytest.raises(ConfigurationError):
        GeminiClient()
