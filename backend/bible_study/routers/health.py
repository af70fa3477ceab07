"""
Health check APIルーター（死活確認用）

【初心者向け】
- GET /health: サーバーが生きているか確認するエンドポイント
- AIキーの設定有無と説教ライブラリの件数も返す（キーの値は返さない）
"""
from fastapi import APIRouter

from bible_study.core.settings import settings
from bible_study.docs.notes_store import get_sermons

router = APIRouter()


@router.get("")
async def health_check():
    """ヘルスチェック用エンドポイント"""
    return {
        "status": "ok",
        "ai_configured": bool(settings.gemini_api_key),
        "sermons": len(get_sermons()),
    }
