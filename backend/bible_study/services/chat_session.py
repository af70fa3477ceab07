"""
チャットセッション（1ユーザー分の会話と資料スナップショット）

【初心者向け】
- send(message) で 1回分のパイプラインを順番に実行する
  トークン化 → ランキング → コンテキスト組み立て → 補完API → 後処理
- 実行中フラグ（in_flight）が立っている間の送信は無視する（二重送信防止）
- 失敗しても in_flight は必ず下ろす（次の送信に影響しない）
- close() 後に届いた結果は捨てる（閉じた画面を更新しない）
- open_session / close_session でユーザーIDごとのセッションを管理する（/ask が使う）
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Literal, Optional

from bible_study.docs.models import DocumentSnapshot
from bible_study.llm.base import CompletionResult, LLMError
from bible_study.llm.fallback import CompletionService
from bible_study.llm.postprocess import render_reply
from bible_study.rag.context import build_context

# ロガー設定
logger = logging.getLogger(__name__)

ERROR_REPLY = "Sorry, I encountered an error. Please try again."


@dataclass
class ChatMessage:
    role: Literal["user", "assistant"]
    content: str


@dataclass
class ChatTurn:
    """1回分のやりとりの結果"""
    reply: str                          # 表示用の回答（失敗時は ERROR_REPLY）
    context_char_count: int = 0
    result: Optional[CompletionResult] = None
    error: Optional[Exception] = None   # 失敗時の例外（HTTP側でステータスに変換する）


class ChatSession:
    """
    会話セッション

    - snapshot: セッション開始時に取得した資料（丸ごと差し替えのみ）
    - service_factory: CompletionService を返す関数（送信ごとに呼ぶ）
    """

    def __init__(
        self,
        snapshot: DocumentSnapshot,
        service_factory: Callable[[], CompletionService],
    ):
        self._snapshot = snapshot
        self._service_factory = service_factory
        self.messages: List[ChatMessage] = []
        self.in_flight = False
        self.closed = False

    @property
    def snapshot(self) -> DocumentSnapshot:
        return self._snapshot

    def replace_snapshot(self, snapshot: DocumentSnapshot) -> None:
        """資料を丸ごと差し替える（実行中のランキングは古いスナップショットのまま完了する）"""
        self._snapshot = snapshot

    def close(self) -> None:
        self.closed = True

    async def send(self, message: str) -> Optional[str]:
        """
        メッセージを送信して回答を得る

        Args:
            message: ユーザーの入力

        Returns:
            表示用の回答。空入力・実行中・close後は None
        """
        turn = await self.exchange(message)
        return turn.reply if turn else None

    async def exchange(self, message: str) -> Optional[ChatTurn]:
        """
        send() と同じ処理で、回答以外の情報（モデル名・コンテキスト長・例外）も返す
        """
        question = (message or "").strip()
        if not question or self.in_flight or self.closed:
            return None

        self.messages.append(ChatMessage(role="user", content=question))
        self.in_flight = True
        snapshot = self._snapshot
        turn = ChatTurn(reply=ERROR_REPLY)

        try:
            context = build_context(question, snapshot)
            turn.context_char_count = context.char_count
            service = self._service_factory()
            turn.result = await service.complete(context.text, question)
            turn.reply = render_reply(turn.result)
        except LLMError as e:
            logger.warning(f"AI回答の取得に失敗しました: {type(e).__name__}: {e}")
            turn.error = e
        except Exception as e:
            logger.error(f"予期しないエラー: {type(e).__name__}: {e}")
            turn.error = e
        finally:
            self.in_flight = False

        if self.closed:
            logger.info("セッション終了後に届いた回答を破棄しました")
            return None

        self.messages.append(ChatMessage(role="assistant", content=turn.reply))
        return turn


# ユーザーIDごとのセッション（プロセス内のみ、再起動で消える）
_sessions: Dict[str, ChatSession] = {}


def open_session(
    user_id: Optional[str],
    snapshot: DocumentSnapshot,
    service_factory: Callable[[], CompletionService],
) -> ChatSession:
    """
    ユーザーのセッションを取得し、資料を最新のスナップショットに差し替える

    - user_id なし（未ログイン）は毎回使い捨てのセッション（他人と共有しない）
    """
    if not user_id:
        return ChatSession(snapshot, service_factory)

    session = _sessions.get(user_id)
    if session is None:
        session = ChatSession(snapshot, service_factory)
        _sessions[user_id] = session
        logger.info(f"セッション開始: user_id={user_id}")
    else:
        session.replace_snapshot(snapshot)
    return session


def close_session(user_id: str) -> bool:
    """
    セッションを閉じて破棄する（実行中の回答は届いても捨てられる）

    Returns:
        閉じるセッションがあったか
    """
    session = _sessions.pop(user_id, None)
    if session is None:
        return False
    session.close()
    logger.info(f"セッション終了: user_id={user_id}")
    return True


def clear_sessions() -> None:
    """全セッションを閉じる（テストやリロード時に使用）"""
    for session in _sessions.values():
        session.close()
    _sessions.clear()
