"""
Sermons APIルーター

説教ライブラリの一覧と、聖書箇所に対応する洞察を返す
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Query

from bible_study.core.errors import raise_invalid_input
from bible_study.docs.notes_store import get_sermons
from bible_study.docs.verses import parse_verse_reference
from bible_study.schemas.sermons import CoverageInfo, InsightInfo, SermonInfo
from bible_study.search.sermon_index import SermonIndex

# ロガー設定
logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[SermonInfo])
async def list_sermons() -> List[SermonInfo]:
    """説教一覧（ファイル内の順序）"""
    return [
        SermonInfo(
            id=s.id,
            title=s.title,
            speaker=s.speaker,
            church=s.church,
            book_reference=s.book_reference,
            tags=s.tags,
        )
        for s in get_sermons()
    ]


@router.get("/insights", response_model=List[InsightInfo])
async def get_insights(ref: str = Query(..., description="聖書箇所（例: John 15:1-8）")) -> List[InsightInfo]:
    """
    指定箇所と重なる節の洞察を返す

    - ref が "Book C:V" / "Book C:V-W" 形式でなければINVALID_INPUT
    """
    if not parse_verse_reference(ref.strip()):
        raise_invalid_input("ref must look like 'John 3:16' or 'John 14:12-14'")

    index = SermonIndex(get_sermons())
    hits = index.insights_for(ref.strip())
    logger.info(f"洞察検索: ref={ref}, hits={len(hits)}")
    return [InsightInfo(**hit.__dict__) for hit in hits]


@router.get("/coverage", response_model=CoverageInfo)
async def get_coverage(
    book: str = Query(..., description="書名（例: John）"),
    chapter: Optional[int] = Query(None, ge=1, description="章番号（指定すると洞察のある節も返す）"),
) -> CoverageInfo:
    """
    書・章に説教の洞察があるかを返す

    - chapter なし: 書全体の有無と、最初に説教がある章
    - chapter あり: その章の有無と、洞察の付いた節番号
    """
    book = book.strip()
    if not book:
        raise_invalid_input("book is required")

    index = SermonIndex(get_sermons())
    info = CoverageInfo(
        book=book,
        has_sermons=index.has_sermon_in_book(book),
        first_chapter=index.first_sermon_chapter(book),
    )
    if chapter is not None:
        info.chapter = chapter
        info.has_sermon_in_chapter = index.has_sermon_in_chapter(book, chapter)
        info.insight_verses = sorted(index.insight_verses(book, chapter))
    return info
