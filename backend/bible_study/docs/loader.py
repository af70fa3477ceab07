"""
説教ライブラリ読み込みモジュール
"""
import json
import logging
from pathlib import Path
from typing import List

from bible_study.docs.models import Sermon

# ロガー設定
logger = logging.getLogger(__name__)


def _find_repo_root() -> Path:
    """
    リポジトリルートを取得する（backend/bible_study/docs/loader.py から4階層上）

    Returns:
        リポジトリルートのPathオブジェクト（絶対パス）
    """
    # loader.py -> docs/ -> bible_study/ -> backend/ -> repo_root
    current_file = Path(__file__).resolve()
    repo_root = current_file.parent.parent.parent.parent

    # 検証: backend/ディレクトリが存在するか確認
    backend_dir = repo_root / "backend"
    if not backend_dir.exists() or not backend_dir.is_dir():
        # フォールバック: parentsを辿ってbackend/を探す
        for parent in current_file.parents:
            backend_check = parent / "backend"
            if backend_check.exists() and backend_check.is_dir():
                repo_root = parent
                break

    return repo_root.resolve()


def resolve_path(path: str) -> Path:
    """相対パスならリポジトリルート基準で解決する"""
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return (_find_repo_root() / candidate).resolve()


def load_sermons(sermons_path: str) -> List[Sermon]:
    """
    説教JSONを読み込む

    - ファイルが無い・壊れている場合は空リスト（サーバ起動は止めない）
    - 配列以外のJSON、dict以外の要素は無視

    Args:
        sermons_path: JSONファイルのパス（相対ならリポジトリルート基準）

    Returns:
        Sermonのリスト（ファイル内の順序を保持）
    """
    path = resolve_path(sermons_path)
    logger.info(f"SERMONS_PATH実パス: {path} (exists={path.exists()})")

    if not path.exists():
        logger.warning(f"説教ファイルが存在しません: {path}")
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"説教ファイルの読み込みに失敗: {type(e).__name__}: {e}")
        return []

    if not isinstance(raw, list):
        logger.warning(f"説教ファイルの形式が不正です（配列ではありません）: {type(raw).__name__}")
        return []

    sermons = [Sermon.from_record(record) for record in raw if isinstance(record, dict)]
    logger.info(f"説教ライブラリ読み込み完了: {len(sermons)}件")
    return sermons
