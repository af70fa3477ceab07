"""
ノートストア（Supabase / PostgREST との通信）

【初心者向け】
- ホスト型DB（Supabase）のREST API（PostgREST）を httpx で叩く
- query(table, filters, order, limit) -> レコードのリスト という最小の約束だけ使う
- 共有ノート: shared_notes を likes_count 降順
- 個人ノート: notes を user_id で絞り込み、created_at 降順、最大50件
- URL/キー未設定ならノートなしとして扱う（読書・説教検索だけで動く）
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from bible_study.core.settings import settings
from bible_study.docs.loader import load_sermons
from bible_study.docs.models import CommunityNote, DocumentSnapshot, PersonalNote, Sermon

# ロガー設定
logger = logging.getLogger(__name__)


class NotesStoreError(Exception):
    """ノート取得の失敗"""
    pass


class NotesStore:
    """
    Supabase RESTクライアント（読み取り専用）

    - httpx.AsyncClient で /rest/v1/{table} を叩く
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_sec: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.supabase_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_anon_key
        self.timeout_sec = timeout_sec or settings.supabase_timeout_sec
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    async def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[Tuple[str, bool]] = None,
        limit: Optional[int] = None,
    ) -> List[dict]:
        """
        テーブルを検索してレコードを返す

        Args:
            table: テーブル名
            filters: 等価条件（{"user_id": "..."} → user_id=eq....）
            order: (カラム名, 昇順か)
            limit: 最大件数

        Returns:
            レコード（dict）のリスト

        Raises:
            NotesStoreError: HTTPエラー・接続エラー・形式不正
        """
        params: Dict[str, str] = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order is not None:
            column, ascending = order
            params["order"] = f"{column}.{'asc' if ascending else 'desc'}"
        if limit is not None:
            params["limit"] = str(limit)

        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }
        url = f"{self.base_url}/rest/v1/{table}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self._transport) as client:
                response = await client.get(url, params=params, headers=headers)
                response.raise_for_status()
                records = response.json()
        except httpx.HTTPStatusError as e:
            raise NotesStoreError(f"{table}: HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise NotesStoreError(f"{table}: 接続に失敗しました: {e}") from e
        except ValueError as e:
            raise NotesStoreError(f"{table}: JSONの解析に失敗しました") from e

        if not isinstance(records, list):
            raise NotesStoreError(f"{table}: 配列以外のレスポンス: {type(records).__name__}")
        return [r for r in records if isinstance(r, dict)]

    async def fetch_community_notes(self) -> List[CommunityNote]:
        """共有ノートを取得（いいね数の多い順）"""
        if not self.is_configured:
            return []
        try:
            records = await self.query("shared_notes", order=("likes_count", False))
        except NotesStoreError as e:
            logger.warning(f"共有ノートの取得に失敗しました: {e}")
            return []
        return [CommunityNote.from_record(r) for r in records]

    async def fetch_personal_notes(self, user_id: str) -> List[PersonalNote]:
        """ログインユーザーのノートを取得（新しい順）"""
        if not self.is_configured or not user_id:
            return []
        try:
            records = await self.query(
                "notes",
                filters={"user_id": user_id},
                order=("created_at", False),
                limit=settings.personal_notes_limit,
            )
        except NotesStoreError as e:
            logger.warning(f"個人ノートの取得に失敗しました: {e}")
            return []
        return [PersonalNote.from_record(r) for r in records]


async def load_snapshot(
    store: NotesStore,
    sermons: List[Sermon],
    user_id: str | None = None,
) -> DocumentSnapshot:
    """
    セッション用の資料スナップショットを作る

    Args:
        store: ノートストア
        sermons: 説教ライブラリ（起動時に読み込み済み）
        user_id: ログインユーザーID（未ログインならNone）

    Returns:
        DocumentSnapshot
    """
    community = await store.fetch_community_notes()
    personal = await store.fetch_personal_notes(user_id) if user_id else []

    logger.info(
        f"スナップショット作成: sermons={len(sermons)}, "
        f"personal_notes={len(personal)}, community_notes={len(community)}"
    )
    return DocumentSnapshot(
        sermons=tuple(sermons),
        personal_notes=tuple(personal),
        community_notes=tuple(community),
    )


_cached_sermons: Optional[List[Sermon]] = None


def get_sermons() -> List[Sermon]:
    """
    キャッシュされた説教ライブラリを取得する（初回のみ読み込み）
    """
    global _cached_sermons

    if _cached_sermons is None:
        _cached_sermons = load_sermons(settings.sermons_path)

    return _cached_sermons


def clear_cache() -> None:
    """
    キャッシュをクリアする（テストやリロード時に使用）
    """
    global _cached_sermons
    _cached_sermons = None
    logger.info("説教ライブラリキャッシュをクリアしました")
