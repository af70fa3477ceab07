"""
アプリケーション設定（環境変数・定数の一元管理）

【初心者向け】
- Pydantic Settings: 環境変数や.envを読んで型付きで扱うための仕組み
- ここで定義した値は bible_study.core.settings.settings から参照できる
- 主な分類: CORS, 資料（説教/ノート）, ランキング重み, コンテキスト予算, Gemini(LLM)
"""
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """
    アプリケーション設定クラス
    環境変数（または.env）の値が自動でここにマッピングされる
    """

    # CORS設定
    cors_origins: List[str] = ["http://localhost:5173"]

    # 説教ライブラリ（リポジトリルートからの相対パス）
    sermons_path: str = Field(
        default="backend/data/sermons_processed.json",
        alias="SERMONS_PATH",
        description="説教JSON（verse_insights付き）のパス"
    )

    # ノートストア（Supabase / PostgREST）
    supabase_url: str = Field(
        default="",
        alias="SUPABASE_URL",
        description="SupabaseプロジェクトURL（空ならノート取得をスキップ）"
    )
    supabase_anon_key: str = Field(
        default="",
        alias="SUPABASE_ANON_KEY",
        description="Supabase anonキー"
    )
    supabase_timeout_sec: int = Field(
        default=15,
        alias="SUPABASE_TIMEOUT_SEC",
        description="ノート取得のタイムアウト秒数"
    )
    personal_notes_limit: int = Field(
        default=50,
        alias="PERSONAL_NOTES_LIMIT",
        description="個人ノートの最大取得件数"
    )

    # ランキング重み（title > tag > reference > body の順序は必須）
    weight_title: int = Field(default=4, alias="WEIGHT_TITLE", description="説教タイトルの重み")
    weight_tags: int = Field(default=3, alias="WEIGHT_TAGS", description="説教タグの重み")
    weight_reference: int = Field(default=2, alias="WEIGHT_REFERENCE", description="聖書箇所の重み")
    weight_body: int = Field(default=1, alias="WEIGHT_BODY", description="本文（要約/ノート本文）の重み")
    weight_note_location: int = Field(
        default=3,
        alias="WEIGHT_NOTE_LOCATION",
        description="ノート位置（Book ch:v）の重み"
    )
    personal_note_bonus: int = Field(
        default=1,
        ge=0,
        alias="PERSONAL_NOTE_BONUS",
        description="自分のノートへの加点（0で無効）"
    )

    # コンテキスト組み立て
    max_sermons_in_context: int = Field(
        default=8,
        alias="MAX_SERMONS_IN_CONTEXT",
        description="コンテキストに含める説教の最大件数"
    )
    max_notes_in_context: int = Field(
        default=10,
        alias="MAX_NOTES_IN_CONTEXT",
        description="コンテキストに含めるノートの最大件数"
    )
    context_char_budget: int = Field(
        default=12000,
        alias="CONTEXT_CHAR_BUDGET",
        description="コンテキスト全体の文字数上限"
    )
    sermon_summary_max_chars: int = Field(
        default=220,
        alias="SERMON_SUMMARY_MAX_CHARS",
        description="説教要約の最大文字数"
    )
    note_content_max_chars: int = Field(
        default=180,
        alias="NOTE_CONTENT_MAX_CHARS",
        description="ノート本文の最大文字数"
    )
    sentence_min_boundary: int = Field(
        default=40,
        alias="SENTENCE_MIN_BOUNDARY",
        description="文境界で切る場合の最小位置（これ以下なら強制カット）"
    )

    # Gemini API設定
    gemini_api_key: str = Field(
        default="",
        alias="GEMINI_API_KEY",
        description="Gemini APIキー"
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_BASE_URL",
        description="Gemini REST APIのベースURL"
    )
    gemini_primary_model: str = Field(
        default="gemini-2.5-flash",
        alias="GEMINI_PRIMARY_MODEL",
        description="最初に使うモデル"
    )
    gemini_secondary_model: str = Field(
        default="gemini-2.0-flash",
        alias="GEMINI_SECONDARY_MODEL",
        description="MAX_TOKENSで打ち切られた場合に使うモデル"
    )
    gemini_tertiary_model: str = Field(
        default="gemini-1.5-flash",
        alias="GEMINI_TERTIARY_MODEL",
        description="セカンダリが失敗した場合に使うモデル"
    )
    gemini_temperature: float = Field(
        default=0.3,
        alias="GEMINI_TEMPERATURE",
        description="生成時の temperature"
    )
    gemini_max_output_tokens: int = Field(
        default=2048,
        alias="GEMINI_MAX_OUTPUT_TOKENS",
        description="最大出力トークン数"
    )
    gemini_timeout_sec: int = Field(
        default=60,
        alias="GEMINI_TIMEOUT_SEC",
        description="Gemini API呼び出し1回あたりのタイムアウト秒数"
    )

    # Pydantic v2の設定（Configクラスの代わりにmodel_configを使用）
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,  # Fieldのaliasとフィールド名の両方で読み込み可能
        extra="ignore"
    )

    @model_validator(mode="after")
    def _check_weight_order(self) -> "Settings":
        # タイトル > タグ > 箇所 > 本文 の順序が崩れる設定は受け付けない
        if not (self.weight_title > self.weight_tags > self.weight_reference > self.weight_body):
            raise ValueError(
                "ランキング重みは WEIGHT_TITLE > WEIGHT_TAGS > WEIGHT_REFERENCE > WEIGHT_BODY "
                "である必要があります"
            )
        if self.weight_note_location <= self.weight_body:
            raise ValueError("WEIGHT_NOTE_LOCATION は WEIGHT_BODY より大きくしてください")
        return self


# グローバル設定インスタンス
settings = Settings()
