"""
ノートAPI用スキーマ
"""
from typing import Optional
from pydantic import BaseModel


class CommunityNoteInfo(BaseModel):
    """共有ノート1件（投稿者は匿名表示名）"""
    id: str
    location: str
    content: str
    likes_count: Optional[int] = None
    author: str
