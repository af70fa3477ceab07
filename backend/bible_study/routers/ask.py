"""
QA (Ask) APIルーター

サーバ側で資料スナップショットを作り、ユーザーのチャットセッション経由で回答まで一括で行う
- 同じユーザーの質問が回答中なら 409（二重送信防止）
- DELETE /ask/session でセッションを閉じる（回答中の結果は捨てられる）
"""
import logging
import re
from typing import Optional

from fastapi import APIRouter, Query

from bible_study.core.errors import (
    raise_config_error,
    raise_internal_error,
    raise_invalid_input,
    raise_session_busy,
    raise_upstream_error,
)
from bible_study.core.settings import settings
from bible_study.docs.notes_store import NotesStore, get_sermons, load_snapshot
from bible_study.llm import get_completion_service
from bible_study.llm.base import ConfigurationError, UpstreamError
from bible_study.llm.fallback import CompletionService
from bible_study.schemas.ask import AskRequest, AskResponse, SessionClosedResponse
from bible_study.services.chat_session import close_session, open_session

# ロガー設定
logger = logging.getLogger(__name__)

router = APIRouter()


def normalize_question(question: str) -> str:
    """
    質問文を正規化する（余計な空白を削除）
    """
    return re.sub(r"\s+", " ", question).strip()


def _service_factory() -> CompletionService:
    # 送信ごとに呼ぶ（設定の変更やテストの差し替えを反映する）
    return get_completion_service()


@router.post("", response_model=AskResponse)
async def ask_question(request: AskRequest) -> AskResponse:
    """
    質問を受け取り、説教・ノートを参照した回答を返す

    Args:
        request: 質問リクエスト

    Returns:
        回答レスポンス（長さ上限で切れた場合は通知付き）
    """
    question = normalize_question(request.message)
    if not question:
        raise_invalid_input("message is required")

    if not settings.gemini_api_key:
        raise_config_error("Server AI key is not configured")

    snapshot = await load_snapshot(NotesStore(), get_sermons(), request.user_id)
    session = open_session(request.user_id, snapshot, _service_factory)
    if session.in_flight:
        raise_session_busy("A previous message is still being answered")

    turn = await session.exchange(question)
    if turn is None:
        raise_session_busy("Chat session was closed")

    if isinstance(turn.error, ConfigurationError):
        raise_config_error(str(turn.error))
    if isinstance(turn.error, UpstreamError):
        raise_upstream_error(turn.error.message, turn.error.status_code)
    if turn.error is not None or turn.result is None:
        raise_internal_error("AI request failed on server")

    return AskResponse(
        answer=turn.reply,
        finish_reason=turn.result.finish_reason,
        model_used=turn.result.model_used,
        context_char_count=turn.context_char_count,
    )


@router.delete("/session", response_model=SessionClosedResponse)
async def end_session(
    user_id: Optional[str] = Query(None, alias="userId", description="セッションを閉じるユーザーID"),
) -> SessionClosedResponse:
    """ユーザーのチャットセッションを閉じる"""
    if not user_id:
        raise_invalid_input("userId is required")
    return SessionClosedResponse(closed=close_session(user_id))
