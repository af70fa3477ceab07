"""
テスト共通のフィクスチャ・ヘルパー
"""
from typing import Any, Dict, List, Optional, Tuple

import pytest

from bible_study.core.settings import settings
from bible_study.docs.notes_store import clear_cache
from bible_study.services.chat_session import clear_sessions
from bible_study.llm.base import CompletionAttempt, CompletionRequest
from bible_study.llm.fallback import FallbackStage

TEST_MODELS = {
    FallbackStage.PRIMARY: "model-primary",
    FallbackStage.SECONDARY: "model-secondary",
    FallbackStage.TERTIARY: "model-tertiary",
}


def ok_payload(text: str = "Answer.", finish_reason: str = "STOP") -> Dict[str, Any]:
    return {
        "candidates": [
            {"content": {"parts": [{"text": text}]}, "finishReason": finish_reason}
        ],
        "usageMetadata": {"promptTokenCount": 10, "candidatesTokenCount": 5},
    }


def error_payload(message: str) -> Dict[str, Any]:
    return {"error": {"code": 500, "message": message}}


class ScriptedClient:
    """決められた順に (status, payload) を返す CompletionClient"""

    def __init__(self, script: List[Tuple[Optional[int], Dict[str, Any]]]):
        self._script = list(script)
        self.requests: List[CompletionRequest] = []

    @property
    def models(self) -> List[str]:
        return [r.model for r in self.requests]

    async def generate(self, request: CompletionRequest) -> CompletionAttempt:
        self.requests.append(request)
        status, payload = self._script.pop(0)
        return CompletionAttempt(model=request.model, status_code=status, payload=payload)


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", "test-key")
    return "test-key"


@pytest.fixture
def no_notes_store(monkeypatch):
    monkeypatch.setattr(settings, "supabase_url", "")
    monkeypatch.setattr(settings, "supabase_anon_key", "")


@pytest.fixture(autouse=True)
def _reset_caches():
    clear_cache()
    clear_sessions()
    yield
    clear_cache()
    clear_sessions()
