"""
Gemini API LLMクライアント（generateContent REST APIとの通信）

【初心者向け】
- httpx.AsyncClient で models/{model}:generateContent を叩く
- 1回の呼び出し結果を CompletionAttempt として返す
  （HTTPエラーや通信失敗も例外にせず status_code で表す。
    どのモデルで再試行するかは fallback.py が決める）
"""
import logging
from typing import Any, Dict

import httpx

from bible_study.core.settings import settings
from bible_study.llm.base import CompletionAttempt, CompletionRequest, ConfigurationError
from bible_study.llm.prompt import build_payload

# ロガー設定
logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Gemini APIクライアント

    - CompletionClientインターフェースに準拠
    - transport はテスト用（httpx.MockTransport を差し込める）
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_sec: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Geminiクライアントを初期化

        Args:
            api_key: Gemini APIキー（デフォルト: settingsから取得）
            base_url: REST APIのベースURL（デフォルト: settingsから取得）
            timeout_sec: タイムアウト秒数（デフォルト: settingsから取得）
            transport: httpxのトランスポート（テスト用）
        """
        self.api_key = api_key or settings.gemini_api_key
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.timeout_sec = timeout_sec or settings.gemini_timeout_sec
        self._transport = transport

        if not self.api_key:
            raise ConfigurationError("Server AI key is not configured")

    def _url(self, model: str) -> str:
        return f"{self.base_url}/models/{model}:generateContent"

    async def generate(self, request: CompletionRequest) -> CompletionAttempt:
        """
        generateContent を1回呼び出す

        Args:
            request: 呼び出し内容

        Returns:
            CompletionAttempt（通信失敗時は status_code=None）
        """
        payload = build_payload(request)

        try:
            async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self._transport) as client:
                response = await client.post(
                    self._url(request.model),
                    params={"key": self.api_key},
                    json=payload,
                )
        except httpx.TimeoutException as e:
            logger.error(f"Gemini APIタイムアウト: model={request.model}, {self.timeout_sec}秒: {e}")
            return CompletionAttempt(model=request.model, status_code=None)
        except httpx.RequestError as e:
            logger.error(f"Gemini接続エラー: model={request.model}: {e}")
            return CompletionAttempt(model=request.model, status_code=None)

        attempt = CompletionAttempt(
            model=request.model,
            status_code=response.status_code,
            payload=_parse_json(response),
        )
        if attempt.ok:
            logger.info(
                f"Gemini API応答: model={request.model}, status={response.status_code}, "
                f"candidates={len(attempt.candidates)}, finish_reason={attempt.finish_reason}"
            )
        else:
            logger.error(
                f"Gemini HTTPエラー: model={request.model}, status={response.status_code}, "
                f"message={attempt.error_message}"
            )
        return attempt


def _parse_json(response: httpx.Response) -> Dict[str, Any]:
    """レスポンスJSONをdictとして取り出す（壊れていれば空dict）"""
    try:
        data = response.json()
    except ValueError:
        logger.warning(f"Gemini APIのレスポンスがJSONではありません: status={response.status_code}")
        return {}
    return data if isinstance(data, dict) else {}
