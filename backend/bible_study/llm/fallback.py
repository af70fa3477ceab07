"""
モデルのフォールバック（順番に別モデルで再試行する小さな状態機械）

【初心者向け】
- PRIMARY: 最初のモデル。成功したが MAX_TOKENS で切れた → SECONDARY へ
- SECONDARY: 失敗（HTTPエラー・通信失敗）または候補0件 → TERTIARY へ
  （成功なら MAX_TOKENS でもそのまま採用）
- TERTIARY: 結果をそのまま採用
- 最大3回、並列にはしない（前の試行の結果を見てから次を決める）
- 最後の試行が失敗なら UpstreamError
"""
import enum
import logging
from typing import Dict, Optional

from bible_study.core.settings import settings
from bible_study.llm.base import (
    FINISH_REASON_MAX_TOKENS,
    CompletionAttempt,
    CompletionClient,
    CompletionRequest,
    CompletionResult,
    UpstreamError,
)
from bible_study.llm.postprocess import extract_finish_reason, extract_text, extract_usage
from bible_study.llm.prompt import RESPONSE_INSTRUCTION

# ロガー設定
logger = logging.getLogger(__name__)

DEFAULT_UPSTREAM_MESSAGE = "Failed to get response from Gemini"


class FallbackStage(enum.Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"


def next_stage(stage: FallbackStage, attempt: CompletionAttempt) -> Optional[FallbackStage]:
    """
    試行結果から次の段階を決める（None なら終了）
    """
    if stage is FallbackStage.PRIMARY:
        if attempt.ok and attempt.finish_reason == FINISH_REASON_MAX_TOKENS:
            return FallbackStage.SECONDARY
        return None
    if stage is FallbackStage.SECONDARY:
        if not attempt.ok or not attempt.candidates:
            return FallbackStage.TERTIARY
        return None
    return None


class CompletionService:
    """
    フォールバック付きの補完サービス

    - client: CompletionClient（通常は GeminiClient）
    - models: 段階ごとのモデル名（デフォルト: settingsから取得）
    """

    def __init__(
        self,
        client: CompletionClient,
        models: Dict[FallbackStage, str] | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ):
        self.client = client
        self.models = models or {
            FallbackStage.PRIMARY: settings.gemini_primary_model,
            FallbackStage.SECONDARY: settings.gemini_secondary_model,
            FallbackStage.TERTIARY: settings.gemini_tertiary_model,
        }
        self.temperature = settings.gemini_temperature if temperature is None else temperature
        self.max_output_tokens = max_output_tokens or settings.gemini_max_output_tokens

    def _request(self, stage: FallbackStage, context: str, question: str) -> CompletionRequest:
        return CompletionRequest(
            system_instruction=RESPONSE_INSTRUCTION,
            question=question,
            context=context,
            model=self.models[stage],
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )

    async def complete(self, context: str, question: str) -> CompletionResult:
        """
        コンテキストと質問で補完を実行する

        Args:
            context: 組み立て済みコンテキスト
            question: ユーザーの質問

        Returns:
            CompletionResult

        Raises:
            UpstreamError: 最後の試行が失敗した場合
        """
        stage: Optional[FallbackStage] = FallbackStage.PRIMARY
        attempt: Optional[CompletionAttempt] = None
        attempts = 0

        while stage is not None:
            attempts += 1
            attempt = await self.client.generate(self._request(stage, context, question))
            following = next_stage(stage, attempt)
            if following is not None:
                logger.warning(
                    f"フォールバック: {stage.value}({attempt.model}) -> {following.value}, "
                    f"status={attempt.status_code}, finish_reason={attempt.finish_reason}"
                )
            stage = following

        if not attempt.ok:
            message = attempt.error_message or DEFAULT_UPSTREAM_MESSAGE
            logger.error(
                f"補完に失敗しました: attempts={attempts}, model={attempt.model}, "
                f"status={attempt.status_code}, message={message}"
            )
            raise UpstreamError(message, status_code=attempt.status_code, model=attempt.model)

        result = CompletionResult(
            text=extract_text(attempt.payload),
            finish_reason=extract_finish_reason(attempt.payload),
            usage_metadata=extract_usage(attempt.payload),
            model_used=attempt.model,
        )
        logger.info(
            f"補完完了: attempts={attempts}, model={result.model_used}, "
            f"finish_reason={result.finish_reason}, chars={len(result.text)}"
        )
        return result
