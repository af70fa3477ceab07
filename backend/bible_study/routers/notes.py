"""
Notes APIルーター

共有ノートを投稿者の匿名表示名付きで返す（ユーザーIDは外に出さない）
"""
import logging
from typing import List

from fastapi import APIRouter

from bible_study.docs.notes_store import NotesStore
from bible_study.docs.verses import community_display_name
from bible_study.schemas.notes import CommunityNoteInfo

# ロガー設定
logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/community", response_model=List[CommunityNoteInfo])
async def list_community_notes() -> List[CommunityNoteInfo]:
    """共有ノート一覧（いいね数の多い順、ストア未設定なら空）"""
    notes = await NotesStore().fetch_community_notes()
    logger.info(f"共有ノート一覧: {len(notes)}件")
    return [
        CommunityNoteInfo(
            id=note.id,
            location=note.location,
            content=note.content,
            likes_count=note.likes_count,
            author=community_display_name(note.user_id),
        )
        for note in notes
    ]
