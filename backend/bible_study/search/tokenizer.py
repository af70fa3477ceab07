"""
質問文のトークン化（検索語の抽出）

- 小文字化 → 英数字・空白・コロン以外を空白に置換 → 空白で分割
- 3文字未満のトークンは捨てる（is, of などを除外）
- コロンは残すので「3:16」のような節番号がそのまま検索語になる
"""
import re
from typing import List

_NON_TERM_CHARS = re.compile(r"[^a-z0-9\s:]")
_WHITESPACE = re.compile(r"\s+")

MIN_TERM_LENGTH = 3


def tokenize(query: str) -> List[str]:
    """
    質問文を検索語のリストに変換する

    Args:
        query: ユーザーの質問文

    Returns:
        検索語のリスト（出現順、重複はそのまま）
    """
    if not query:
        return []
    cleaned = _NON_TERM_CHARS.sub(" ", query.lower())
    return [token for token in _WHITESPACE.split(cleaned) if len(token) >= MIN_TERM_LENGTH]
