"""
AIチャットAPIルーター（/api/gemini-chat）

【初心者向け】
- フロントエンドが組み立てたコンテキスト（fullContext）と質問（userMessage）を受け取り、
  Gemini に問い合わせて回答を返す
- チェックの順番: メソッド(405) → APIキー(500) → userMessage(400)
- Gemini 側の失敗はそのステータスとメッセージをそのまま返す
"""
import logging

from fastapi import APIRouter, Request

from bible_study.core.errors import (
    AppError,
    raise_config_error,
    raise_internal_error,
    raise_invalid_input,
    raise_upstream_error,
)
from bible_study.core.settings import settings
from bible_study.llm import get_completion_service
from bible_study.llm.base import ConfigurationError, UpstreamError
from bible_study.schemas.chat import ChatResponse, ErrorResponse

# ロガー設定
logger = logging.getLogger(__name__)

router = APIRouter()

_ACCEPTED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


async def _read_body(request: Request) -> dict:
    """JSONボディを読む（壊れている・dict以外なら空dict）"""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@router.api_route(
    "",
    methods=_ACCEPTED_METHODS,
    response_model=ChatResponse,
    responses={code: {"model": ErrorResponse} for code in (400, 405, 500, 502)},
)
async def gemini_chat(request: Request) -> ChatResponse:
    """
    コンテキスト付きの質問に回答する

    Body:
        fullContext: 参考資料テキスト（任意）
        userMessage: 質問文（必須、文字列）
    """
    if request.method != "POST":
        raise AppError("METHOD_NOT_ALLOWED", "Method not allowed")

    if not settings.gemini_api_key:
        raise_config_error("Server AI key is not configured")

    body = await _read_body(request)
    user_message = body.get("userMessage")
    if not user_message or not isinstance(user_message, str):
        raise_invalid_input("userMessage is required")

    full_context = body.get("fullContext")
    if not isinstance(full_context, str):
        full_context = ""

    try:
        service = get_completion_service()
        result = await service.complete(full_context, user_message)
    except ConfigurationError as e:
        logger.error(f"AI設定エラー: {e}")
        raise_config_error(str(e))
    except UpstreamError as e:
        raise_upstream_error(e.message, e.status_code)
    except Exception as e:
        logger.error(f"Server error calling Gemini: {type(e).__name__}: {e}")
        raise_internal_error("AI request failed on server")

    return ChatResponse(
        ai_response=result.text,
        finish_reason=result.finish_reason,
        usage_metadata=result.usage_metadata,
        context_char_count=len(full_context),
        model_used=result.model_used,
    )
