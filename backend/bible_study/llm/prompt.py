"""
プロンプト生成ロジック
"""
from typing import Any, Dict

from bible_study.llm.base import CompletionRequest

# 回答形式の指示（上流モデルとの約束。ローカルでは検証しない）
RESPONSE_INSTRUCTION = " ".join([
    "No greetings or preamble.",
    "Output exactly 6 bullet points.",
    "Each bullet must be 18 words or fewer.",
    "Each bullet must be a complete sentence.",
    "After bullets, output exactly 1 summary sentence.",
])


def build_user_prompt(context: str, question: str) -> str:
    """
    参考資料と質問からアシスタント用のプロンプト本文を作る

    Args:
        context: 組み立て済みコンテキスト（空でもよい）
        question: ユーザーの質問

    Returns:
        プロンプト文字列
    """
    return f"""You are a helpful Bible study assistant with access to sermons and community notes.

{context or ''}

User question: {question}

Provide a thoughtful, biblically-grounded response. When relevant, reference specific sermons by title and speaker, or mention insights from community notes. Follow the output format strictly."""


def build_payload(request: CompletionRequest) -> Dict[str, Any]:
    """
    generateContent のリクエストボディを構築

    - system_instruction に形式指示
    - contents は1件、parts に「System rule」と本文の2つ
    - generationConfig に temperature と maxOutputTokens
    """
    return {
        "system_instruction": {
            "parts": [{"text": request.system_instruction}],
        },
        "contents": [
            {
                "parts": [
                    {"text": f"System rule: {request.system_instruction}"},
                    {"text": build_user_prompt(request.context, request.question)},
                ],
            }
        ],
        "generationConfig": {
            "temperature": request.temperature,
            "maxOutputTokens": request.max_output_tokens,
        },
    }
