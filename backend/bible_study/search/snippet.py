"""
抜粋（要約・ノート本文の短縮）
"""
import re

ELLIPSIS = "..."
_SENTENCE_STOPS = (". ", "! ", "? ")


def normalize_whitespace(text: str) -> str:
    """改行・連続空白を1つの空白にまとめて前後を削る"""
    return re.sub(r"\s+", " ", text or "").strip()


def trim_to_sentence(text: str, max_chars: int, min_boundary: int = 40) -> str:
    """
    文の区切りを優先して max_chars 以内に短縮する

    - max_chars 以内ならそのまま（空白だけ正規化）
    - 先頭 max_chars 文字の中で最後の「. 」「! 」「? 」を探し、
      その位置が min_boundary より後ろなら句読点の直後で切る
    - 区切りが見つからない（または先頭に近すぎる）場合は強制カット + "..."

    Args:
        text: 元のテキスト
        max_chars: 最大文字数
        min_boundary: 文境界として採用する最小位置

    Returns:
        短縮後のテキスト
    """
    normalized = normalize_whitespace(text)
    if len(normalized) <= max_chars:
        return normalized

    sliced = normalized[:max_chars]
    last_stop = max(sliced.rfind(stop) for stop in _SENTENCE_STOPS)
    if last_stop > min_boundary:
        return sliced[:last_stop + 1].strip()
    return f"{sliced.strip()}{ELLIPSIS}"
