"""
回答の後処理（レスポンスからのテキスト抽出・打ち切り通知）

- どんな形のペイロードでも例外を出さず、表示できる文字列を返す
- candidates[0].content.parts[*].text を連結
- 何も取れなければ固定のフォールバック文言
"""
import logging
from typing import Any, Dict, Optional

from bible_study.llm.base import FINISH_REASON_MAX_TOKENS, CompletionResult

# ロガー設定
logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Sorry, I could not generate a response."
TRUNCATION_NOTICE = (
    "\n\n[Response truncated due to token limit. Please ask a narrower follow-up if needed.]"
)


def _first_candidate(payload: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    return first if isinstance(first, dict) else None


def extract_text(payload: Any) -> str:
    """
    最初の候補の全パーツのテキストを連結して返す

    Args:
        payload: generateContent のレスポンスJSON

    Returns:
        回答テキスト（空ならフォールバック文言）
    """
    candidate = _first_candidate(payload)
    content = candidate.get("content") if candidate else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        parts = []

    text = "".join(
        part["text"] for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    ).strip()

    if not text:
        logger.warning("Gemini APIのレスポンスからテキストを抽出できませんでした。フォールバック文言を返します")
        return FALLBACK_MESSAGE
    return text


def extract_finish_reason(payload: Any) -> Optional[str]:
    candidate = _first_candidate(payload)
    if candidate is None:
        return None
    reason = candidate.get("finishReason")
    return reason if isinstance(reason, str) and reason else None


def extract_usage(payload: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return None
    usage = payload.get("usageMetadata")
    return usage if isinstance(usage, dict) else None


def render_reply(result: CompletionResult) -> str:
    """
    画面表示用の回答を作る（長さ上限で切れた場合は通知を付ける）
    """
    text = result.text or FALLBACK_MESSAGE
    if result.finish_reason == FINISH_REASON_MAX_TOKENS:
        text += TRUNCATION_NOTICE
    return text
