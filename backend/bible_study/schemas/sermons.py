"""
説教API用スキーマ
"""
from typing import List, Optional
from pydantic import BaseModel


class SermonInfo(BaseModel):
    """説教一覧の1件"""
    id: str
    title: str
    speaker: str
    church: str
    book_reference: str
    tags: List[str]


class InsightInfo(BaseModel):
    """箇所に対応する洞察"""
    sermon_id: str
    sermon_title: str
    speaker: str
    church: str
    verse: str
    insight: str


class CoverageInfo(BaseModel):
    """書・章ごとの説教の有無（読書画面の印に使う）"""
    book: str
    has_sermons: bool
    first_chapter: Optional[int] = None
    chapter: Optional[int] = None
    has_sermon_in_chapter: Optional[bool] = None
    insight_verses: List[int] = []
