"""
関連度ランキング（説教・ノートのキーワードスコアリング）

【初心者向け】
- 各フィールドに検索語が部分文字列として含まれていれば +1（同じ語は何回出ても +1）
- フィールドごとの重みを掛けて合計したものがドキュメントのスコア
  説教: タイトル×4 + タグ×3 + 聖書箇所×2 + 要約×1
  ノート: 位置(Book ch:v)×3 + 本文×1 + 自分のノートなら +1
- 同点は元の並び順を保つ（sorted は安定ソート）
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from bible_study.core.settings import settings
from bible_study.docs.models import Note, PersonalNote, ScoredDocument, Sermon

# ロガー設定
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankingWeights:
    """フィールド重み（title > tags > reference > body を保つこと）"""
    title: int = 4
    tags: int = 3
    reference: int = 2
    body: int = 1
    note_location: int = 3
    personal_bonus: int = 1

    @classmethod
    def from_settings(cls) -> "RankingWeights":
        return cls(
            title=settings.weight_title,
            tags=settings.weight_tags,
            reference=settings.weight_reference,
            body=settings.weight_body,
            note_location=settings.weight_note_location,
            personal_bonus=settings.personal_note_bonus,
        )


def score_text(text: Optional[str], terms: Sequence[str]) -> int:
    """
    テキスト1フィールドのスコアを計算

    Args:
        text: 対象テキスト（None・空文字は0点）
        terms: 検索語（tokenize済み、小文字）

    Returns:
        含まれていた検索語の数
    """
    if not text:
        return 0
    lower = text.lower()
    score = 0
    for term in terms:
        if term in lower:
            score += 1
    return score


def score_sermon(sermon: Sermon, terms: Sequence[str], weights: RankingWeights) -> int:
    tags = " ".join(sermon.tags) if sermon.tags else ""
    return (
        score_text(sermon.title, terms) * weights.title
        + score_text(tags, terms) * weights.tags
        + score_text(sermon.book_reference, terms) * weights.reference
        + score_text(sermon.summary, terms) * weights.body
    )


def score_note(note: Note, terms: Sequence[str], weights: RankingWeights) -> int:
    bonus = weights.personal_bonus if isinstance(note, PersonalNote) else 0
    return (
        score_text(note.location, terms) * weights.note_location
        + score_text(note.content, terms) * weights.body
        + bonus
    )


def _sort_by_score(scored: List[ScoredDocument]) -> List[ScoredDocument]:
    # score降順、同点は元の順序（安定ソート）
    return sorted(scored, key=lambda item: item.score, reverse=True)


def rank_sermons(
    sermons: Iterable[Sermon],
    terms: Sequence[str],
    weights: RankingWeights | None = None,
) -> List[ScoredDocument]:
    """
    説教をスコア降順に並べる

    Returns:
        ScoredDocumentのリスト（全件、0点も含む）
    """
    weights = weights or RankingWeights.from_settings()
    ranked = _sort_by_score([ScoredDocument(s, score_sermon(s, terms, weights)) for s in sermons])
    logger.info(
        f"説教ランキング: total={len(ranked)}, terms={list(terms)}, "
        f"top3_scores={[item.score for item in ranked[:3]]}"
    )
    return ranked


def rank_notes(
    notes: Iterable[Note],
    terms: Sequence[str],
    weights: RankingWeights | None = None,
) -> List[ScoredDocument]:
    """
    ノートをスコア降順に並べる（自分のノートを先に渡すこと）

    Returns:
        ScoredDocumentのリスト（全件、0点も含む）
    """
    weights = weights or RankingWeights.from_settings()
    ranked = _sort_by_score([ScoredDocument(n, score_note(n, terms, weights)) for n in notes])
    logger.info(
        f"ノートランキング: total={len(ranked)}, "
        f"top3_scores={[item.score for item in ranked[:3]]}"
    )
    return ranked
