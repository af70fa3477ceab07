"""
ドキュメント関連の型定義（データの形を明示）

【初心者向け】
- dataclass: フィールドだけ持つ軽量なクラス。JSONやDBとのやりとりでよく使う
- Sermon = 説教1件（タイトル・要約・タグ・聖書箇所・節ごとの洞察）
- Note = 節に紐づくノート。PersonalNote（自分）と CommunityNote（共有）の2種類
- DocumentSnapshot = セッション中に使う資料一式。差し替えは丸ごと行い、部分更新しない
"""
from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Optional, Tuple, Union


def _optional_int(value: Any) -> Optional[int]:
    """整数ならそのまま、それ以外（bool・文字列・None）は None"""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


@dataclass
class VerseInsight:
    """説教に含まれる節ごとの洞察"""
    verse: str    # 聖書箇所（例: John 15:1-8）
    insight: str  # 洞察テキスト


@dataclass
class Sermon:
    """説教（検索・コンテキスト用の最小単位）"""
    id: str
    title: str = ""
    speaker: str = ""
    church: str = ""
    summary: str = ""
    tags: List[str] = field(default_factory=list)
    book_reference: str = ""  # 例: John 15
    verse_insights: List[VerseInsight] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: dict) -> "Sermon":
        """JSON/DBレコードから生成（欠損フィールドは空扱い）"""
        tags = record.get("tags")
        insights = []
        raw_insights = record.get("verse_insights")
        for raw in raw_insights if isinstance(raw_insights, list) else []:
            if isinstance(raw, dict):
                insights.append(
                    VerseInsight(verse=str(raw.get("verse") or ""), insight=str(raw.get("insight") or ""))
                )
        return cls(
            id=str(record.get("id") or ""),
            title=str(record.get("title") or ""),
            speaker=str(record.get("speaker") or record.get("pastor") or ""),
            church=str(record.get("church") or ""),
            summary=str(record.get("summary") or ""),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
            book_reference=str(record.get("book_reference") or ""),
            verse_insights=insights,
        )


@dataclass
class Note:
    """節に紐づくノート（基底）"""
    book: str = ""
    chapter: Optional[int] = None
    verse: Optional[int] = None
    content: str = ""
    likes_count: Optional[int] = None
    id: str = ""
    user_id: str = ""

    scope_label: ClassVar[str] = "Note"

    @property
    def location(self) -> str:
        """ランキング用の位置文字列（例: John 3:16）"""
        chapter = "" if self.chapter is None else self.chapter
        verse = "" if self.verse is None else self.verse
        return f"{self.book} {chapter}:{verse}"

    @classmethod
    def from_record(cls, record: dict) -> "Note":
        return cls(
            book=str(record.get("book") or ""),
            chapter=_optional_int(record.get("chapter")),
            verse=_optional_int(record.get("verse")),
            content=str(record.get("content") or ""),
            likes_count=_optional_int(record.get("likes_count")),
            id=str(record.get("id") or ""),
            user_id=str(record.get("user_id") or ""),
        )


@dataclass
class PersonalNote(Note):
    """ログインユーザー自身のノート"""
    scope_label: ClassVar[str] = "My Note"


@dataclass
class CommunityNote(Note):
    """コミュニティで共有されたノート"""
    scope_label: ClassVar[str] = "Community Note"


Document = Union[Sermon, Note]


@dataclass
class ScoredDocument:
    """スコア付きドキュメント（scoreは0以上の整数、正規化しない）"""
    document: Document
    score: int


@dataclass(frozen=True)
class DocumentSnapshot:
    """セッション単位の資料スナップショット（読み取り専用）"""
    sermons: Tuple[Sermon, ...] = ()
    personal_notes: Tuple[PersonalNote, ...] = ()
    community_notes: Tuple[CommunityNote, ...] = ()

    @property
    def notes(self) -> Tuple[Note, ...]:
        """ランキング対象のノート（自分のノート → 共有ノートの順）"""
        return self.personal_notes + self.community_notes
