"""
説教インデックス（どの書・章・節に説教の洞察があるか）

【初心者向け】
- 説教の verse_insights の聖書箇所を解析して、書→章、章→節 の対応表を作る
- 読書画面で「この章に説教がある」印を付けたり、箇所から洞察を引くのに使う
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from bible_study.docs.models import Sermon
from bible_study.docs.verses import ParsedVerse, parse_verse_reference

# ロガー設定
logger = logging.getLogger(__name__)


@dataclass
class InsightHit:
    """箇所検索でヒットした洞察"""
    sermon_id: str
    sermon_title: str
    speaker: str
    church: str
    verse: str
    insight: str


class SermonIndex:
    """説教の洞察が付いている箇所の索引"""

    def __init__(self, sermons: Iterable[Sermon]):
        self._sermons = list(sermons)
        self._chapters_by_book: Dict[str, Set[int]] = defaultdict(set)
        self._verses_by_chapter: Dict[Tuple[str, int], Set[int]] = defaultdict(set)

        for sermon in self._sermons:
            for insight in sermon.verse_insights:
                for parsed in parse_verse_reference(insight.verse):
                    self._chapters_by_book[parsed.book].add(parsed.chapter)
                    self._verses_by_chapter[(parsed.book, parsed.chapter)].add(parsed.verse)

        logger.info(
            f"説教インデックス構築完了: sermons={len(self._sermons)}, books={len(self._chapters_by_book)}"
        )

    def has_sermon_in_book(self, book: str) -> bool:
        return bool(self._chapters_by_book.get(book))

    def has_sermon_in_chapter(self, book: str, chapter: int) -> bool:
        return chapter in self._chapters_by_book.get(book, set())

    def first_sermon_chapter(self, book: str) -> Optional[int]:
        chapters = self._chapters_by_book.get(book)
        return min(chapters) if chapters else None

    def insight_verses(self, book: str, chapter: int) -> Set[int]:
        return set(self._verses_by_chapter.get((book, chapter), set()))

    def insights_for(self, verse_ref: str) -> List[InsightHit]:
        """
        指定箇所と重なる洞察を説教の順に返す

        Args:
            verse_ref: 聖書箇所（例: "John 15:5" / "John 15:1-8"）

        Returns:
            InsightHitのリスト（形式不正なら空）
        """
        wanted: Set[ParsedVerse] = set(parse_verse_reference(verse_ref))
        if not wanted:
            return []

        hits = []
        for sermon in self._sermons:
            for insight in sermon.verse_insights:
                if wanted & set(parse_verse_reference(insight.verse)):
                    hits.append(
                        InsightHit(
                            sermon_id=sermon.id,
                            sermon_title=sermon.title,
                            speaker=sermon.speaker,
                            church=sermon.church,
                            verse=insight.verse,
                            insight=insight.insight,
                        )
                    )
        return hits
