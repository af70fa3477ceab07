"""
共通エラーハンドリング（APIで返すエラー形式の統一）

【初心者向け】
- フロントエンドが { "error": "...", "code": "..." } で
  エラーを受け取れるよう、共通形式で例外を投げる
- raise_invalid_input 等のヘルパーで、コードごとのHTTPステータスを自動設定
"""
from fastapi import HTTPException, status
from typing import Literal

# エラーコード一覧（型安全のため Literal で定義）
ErrorCode = Literal[
    "INVALID_INPUT",
    "METHOD_NOT_ALLOWED",
    "CONFIG_ERROR",
    "UPSTREAM_ERROR",
    "INTERNAL_ERROR",
    "SESSION_BUSY",
]

# エラーコードとHTTPステータスのマッピング
ERROR_STATUS_MAP: dict[ErrorCode, int] = {
    "INVALID_INPUT": status.HTTP_400_BAD_REQUEST,
    "METHOD_NOT_ALLOWED": status.HTTP_405_METHOD_NOT_ALLOWED,
    "CONFIG_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "UPSTREAM_ERROR": status.HTTP_502_BAD_GATEWAY,
    "INTERNAL_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "SESSION_BUSY": status.HTTP_409_CONFLICT,
}


class AppError(HTTPException):
    """アプリケーション共通エラー

    detail は main.py の例外ハンドラでそのままJSONボディとして返す。
    形式: { "error": "...", "code": "..." }
    """

    def __init__(self, code: ErrorCode, message: str, status_code: int | None = None):
        super().__init__(
            status_code=status_code or ERROR_STATUS_MAP[code],
            detail={"error": message, "code": code}
        )


def raise_invalid_input(message: str) -> None:
    """INVALID_INPUTエラーを発生させる"""
    raise AppError("INVALID_INPUT", message)


def raise_config_error(message: str) -> None:
    """CONFIG_ERRORエラーを発生させる（サーバ側の設定不備、リトライしない）"""
    raise AppError("CONFIG_ERROR", message)


def raise_upstream_error(message: str, status_code: int | None = None) -> None:
    """UPSTREAM_ERRORエラーを発生させる

    上流（Gemini）のHTTPステータスが分かる場合はそれをそのまま返す
    """
    raise AppError("UPSTREAM_ERROR", message, status_code=status_code)


def raise_internal_error(message: str) -> None:
    """INTERNAL_ERRORエラーを発生させる"""
    raise AppError("INTERNAL_ERROR", message)


def raise_session_busy(message: str) -> None:
    """SESSION_BUSYエラーを発生させる（前の質問に回答中、またはセッション終了済み）"""
    raise AppError("SESSION_BUSY", message)
