"""
Ask API用スキーマ（サーバ側でコンテキストまで組み立てる版）
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class AskRequest(BaseModel):
    """質問リクエスト"""
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="質問文")
    user_id: Optional[str] = Field(None, alias="userId", description="ログインユーザーID（個人ノートを含める場合）")


class AskResponse(BaseModel):
    """質問レスポンス"""
    model_config = ConfigDict(populate_by_name=True)

    answer: str
    finish_reason: Optional[str] = Field(None, alias="finishReason")
    model_used: str = Field(..., alias="modelUsed")
    context_char_count: int = Field(0, alias="contextCharCount")


class SessionClosedResponse(BaseModel):
    """セッション終了レスポンス"""
    closed: bool
