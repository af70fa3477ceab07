"""
LLMアダプタ層

【初心者向け】
- CompletionClientインターフェースを実装したクライアントを提供
- フォールバック付きの CompletionService を組み立てて返す
"""
from bible_study.llm.fallback import CompletionService
from bible_study.llm.gemini import GeminiClient


def get_completion_service() -> CompletionService:
    """
    補完サービスを取得（GeminiClient + モデルのフォールバック）

    リクエストごとに呼ぶ。APIキーは呼び出し時点の settings から読む。

    Returns:
        CompletionService

    Raises:
        ConfigurationError: GEMINI_API_KEY が未設定の場合
    """
    return CompletionService(GeminiClient())
