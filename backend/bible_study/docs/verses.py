"""
聖書箇所の解析（"John 3:16" / "John 14:12-14" → 節のリスト）
"""
import re
from dataclasses import dataclass
from typing import List

_VERSE_REF = re.compile(r"^(.+?)\s+(\d{1,3}):(\d{1,3})(?:-(\d{1,3}))?$")

# 1章の最大節数（詩編119編）。これを超える節番号は存在しない
MAX_VERSE_NUMBER = 176

COMMUNITY_NAMES = [
    "Brother A",
    "Brother B",
    "Brother C",
    "Brother D",
    "Sister E",
    "Sister F",
    "Sister G",
    "Sister H",
]


@dataclass(frozen=True)
class ParsedVerse:
    book: str
    chapter: int
    verse: int


def parse_verse_reference(verse_ref: str) -> List[ParsedVerse]:
    """
    聖書箇所を節単位に展開する

    - "Book C:V" → 1件
    - "Book C:V-W" → V〜W の各節（W < V なら空）
    - 節番号が MAX_VERSE_NUMBER を超える場合は空（巨大な範囲を展開しない）
    - それ以外の形式は空リスト

    Args:
        verse_ref: 聖書箇所文字列（例: "1 John 3:15"）

    Returns:
        ParsedVerseのリスト
    """
    match = _VERSE_REF.match(verse_ref or "")
    if not match:
        return []

    book = match.group(1).strip()
    chapter = int(match.group(2))
    start = int(match.group(3))
    end = int(match.group(4)) if match.group(4) else start
    if start > MAX_VERSE_NUMBER or end > MAX_VERSE_NUMBER:
        return []

    return [ParsedVerse(book=book, chapter=chapter, verse=v) for v in range(start, end + 1)]


def community_display_name(user_id: str) -> str:
    """共有ノートの匿名表示名（ユーザーIDの文字コード合計から決定的に選ぶ）"""
    total = sum(ord(ch) for ch in user_id or "")
    return COMMUNITY_NAMES[total % len(COMMUNITY_NAMES)]
