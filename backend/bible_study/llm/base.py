"""
LLMアダプタ層の基底定義（抽象インターフェース・型・例外）

【初心者向け】
- CompletionClient: Protocol。Gemini 等の実装が generate(request) を提供する約束
- CompletionRequest / CompletionAttempt / CompletionResult: 1回の呼び出しの入出力
- ConfigurationError / UpstreamError: 呼び出し失敗時に raise。routers 等で捕捉
- MAX_TOKENS（長さ上限で打ち切り）はエラーではない。結果の finish_reason で表す
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

FINISH_REASON_STOP = "STOP"
FINISH_REASON_MAX_TOKENS = "MAX_TOKENS"


@dataclass(frozen=True)
class CompletionRequest:
    """1回の呼び出し内容（試行ごとに作り直し、変更しない）"""
    system_instruction: str
    question: str
    context: str
    model: str
    temperature: float
    max_output_tokens: int


@dataclass
class CompletionAttempt:
    """
    1回の呼び出し結果（成功・失敗どちらも表す）

    status_code が None なのは通信自体が失敗した場合
    """
    model: str
    status_code: Optional[int]
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    @property
    def candidates(self) -> List[Any]:
        candidates = self.payload.get("candidates")
        return candidates if isinstance(candidates, list) else []

    @property
    def finish_reason(self) -> Optional[str]:
        if not self.candidates or not isinstance(self.candidates[0], dict):
            return None
        return self.candidates[0].get("finishReason") or None

    @property
    def error_message(self) -> Optional[str]:
        error = self.payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"] or None
        return None


@dataclass
class CompletionResult:
    """呼び出し元に返す最終結果"""
    text: str
    finish_reason: Optional[str]
    usage_metadata: Optional[Dict[str, Any]]
    model_used: str

    @property
    def hit_length_limit(self) -> bool:
        return self.finish_reason == FINISH_REASON_MAX_TOKENS


class CompletionClient(Protocol):
    """
    補完APIクライアントのインターフェース

    各実装はこのProtocolに準拠する
    """

    async def generate(self, request: CompletionRequest) -> CompletionAttempt:
        """
        1回だけ呼び出して結果を返す（HTTPエラーも CompletionAttempt で返す）
        """
        ...


class LLMError(Exception):
    """LLM関連の基底例外"""
    pass


class ConfigurationError(LLMError):
    """APIキー未設定などサーバ側の設定不備（リトライしない）"""
    pass


class UpstreamError(LLMError):
    """上流APIの失敗（フォールバックを使い切った後に送出）"""

    def __init__(self, message: str, status_code: Optional[int] = None, model: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.model = model
