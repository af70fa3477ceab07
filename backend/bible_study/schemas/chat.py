"""
AIチャットAPI用スキーマ

【初心者向け】
- ChatResponse: /api/gemini-chat の成功レスポンス（フロントエンドに合わせてcamelCase）
- ErrorResponse: 失敗時の { "error": "..." }
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class ChatResponse(BaseModel):
    """補完結果"""
    model_config = ConfigDict(populate_by_name=True)

    ai_response: str = Field(..., alias="aiResponse")
    finish_reason: Optional[str] = Field(None, alias="finishReason")
    usage_metadata: Optional[Dict[str, Any]] = Field(None, alias="usageMetadata")
    context_char_count: int = Field(0, alias="contextCharCount", description="受け取ったコンテキストの文字数")
    model_used: str = Field(..., alias="modelUsed")


class ErrorResponse(BaseModel):
    """エラーレスポンス"""
    error: str
    code: Optional[str] = None
