"""
コンテキスト組み立て（AIに渡す参考資料テキストの作成）

【初心者向け】
- ランキング上位の説教・ノートを読みやすいテキストに整形する
- 2段階の短縮:
  1) 各エントリの要約/本文を文の区切り優先で短縮（trim_to_sentence）
  2) 全体が予算（既定12000文字）を超えたら機械的に切ってマーカーを付ける
- 1段階だけの短縮にするとAIに届く内容が変わるので、この順序を崩さないこと
"""
import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from bible_study.core.settings import settings
from bible_study.docs.models import DocumentSnapshot, Note, ScoredDocument, Sermon
from bible_study.search.ranker import RankingWeights, rank_notes, rank_sermons
from bible_study.search.snippet import trim_to_sentence
from bible_study.search.tokenizer import tokenize

# ロガー設定
logger = logging.getLogger(__name__)

CATEGORY_SEPARATOR = "\n\n---\n\n"
TRIMMED_MARKER = "\n\n[Context trimmed due to size budget]"
MAX_TAGS_PER_SERMON = 5


@dataclass
class ContextBlock:
    """カテゴリ1つ分（見出し + エントリ）"""
    header: str
    entries: List[str] = field(default_factory=list)

    def render(self) -> str:
        if not self.entries:
            return ""
        return f"{self.header}\n" + "\n\n".join(self.entries)


@dataclass
class AssembledContext:
    """AIに渡すコンテキスト全体"""
    text: str
    truncated: bool = False

    @property
    def char_count(self) -> int:
        return len(self.text)


def format_sermon(index: int, sermon: Sermon) -> str:
    summary = trim_to_sentence(
        sermon.summary, settings.sermon_summary_max_chars, settings.sentence_min_boundary
    )
    tag_line = ", ".join(sermon.tags[:MAX_TAGS_PER_SERMON])
    return (
        f'{index}. "{sermon.title}" by {sermon.speaker} ({sermon.church})\n'
        f"   Ref: {sermon.book_reference or 'N/A'}\n"
        f"   Summary: {summary}\n"
        f"   Tags: {tag_line or 'N/A'}"
    )


def format_note(index: int, note: Note) -> str:
    content = trim_to_sentence(
        note.content, settings.note_content_max_chars, settings.sentence_min_boundary
    )
    likes = f" | likes={note.likes_count}" if note.likes_count is not None else ""
    return (
        f"{index}. [{note.scope_label}] {note.location}{likes}\n"
        f"   {content}"
    )


def build_sermon_block(ranked: Sequence[ScoredDocument], top_k: int) -> ContextBlock:
    selected = [item.document for item in ranked[:top_k]]
    return ContextBlock(
        header=f"Relevant Sermons (Top {len(selected)}):",
        entries=[format_sermon(i, s) for i, s in enumerate(selected, 1)],
    )


def build_note_block(ranked: Sequence[ScoredDocument], top_k: int) -> ContextBlock:
    selected = [item.document for item in ranked[:top_k]]
    return ContextBlock(
        header=f"Relevant Notes (Top {len(selected)}):",
        entries=[format_note(i, n) for i, n in enumerate(selected, 1)],
    )


def assemble_context(blocks: Sequence[ContextBlock], char_budget: int | None = None) -> AssembledContext:
    """
    カテゴリブロックを連結し、予算を超えたら切り詰める

    Args:
        blocks: ContextBlockのリスト（空ブロックは除外される）
        char_budget: 文字数上限（デフォルト: settingsから取得）

    Returns:
        AssembledContext（予算超過時は先頭char_budget文字 + マーカー）
    """
    budget = char_budget if char_budget is not None else settings.context_char_budget
    rendered = [text for text in (block.render() for block in blocks) if text]
    full_text = CATEGORY_SEPARATOR.join(rendered)

    if len(full_text) > budget:
        logger.info(f"コンテキストが予算を超えたため切り詰めます: {len(full_text)} > {budget}")
        return AssembledContext(text=f"{full_text[:budget]}{TRIMMED_MARKER}", truncated=True)
    return AssembledContext(text=full_text)


def build_context(
    question: str,
    snapshot: DocumentSnapshot,
    weights: RankingWeights | None = None,
) -> AssembledContext:
    """
    質問 → トークン化 → ランキング → 組み立て を一括で行う

    Args:
        question: ユーザーの質問文
        snapshot: セッションの資料スナップショット
        weights: ランキング重み（デフォルト: settingsから）

    Returns:
        AssembledContext
    """
    terms = tokenize(question)
    ranked_sermons = rank_sermons(snapshot.sermons, terms, weights)
    ranked_notes = rank_notes(snapshot.notes, terms, weights)

    context = assemble_context([
        build_sermon_block(ranked_sermons, settings.max_sermons_in_context),
        build_note_block(ranked_notes, settings.max_notes_in_context),
    ])
    logger.info(
        f"コンテキスト作成: terms={terms}, chars={context.char_count}, truncated={context.truncated}"
    )
    return context
