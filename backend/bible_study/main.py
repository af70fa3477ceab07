"""
FastAPIアプリケーションのエントリーポイント（アプリの起動入口）

【初心者向け】
このファイルはBible Study AssistantのバックエンドAPIサーバーを起動する「玄関」です。
- FastAPI: PythonのWebフレームワーク。REST APIを簡単に作れる
- 起動時に /health, /api/gemini-chat, /ask, /sermons, /notes のルート（APIの窓口）を登録し、
  起動イベントで説教ライブラリを読み込みます

実行方法:
    pip install -e .
    uvicorn bible_study.main:app --reload --port 8000
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bible_study.core.errors import AppError
from bible_study.core.settings import settings
from bible_study.docs.notes_store import get_sermons
from bible_study.routers import ask, chat, health, notes, sermons

# ロガー設定
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Bible Study Assistant API",
    description="Sermon/notes retrieval and AI chat API",
    version="0.1.0",
)

# CORS設定: フロントエンド（Vite）からAPIを呼ぶ際の跨域通信を許可
# 環境変数 CORS_ORIGINS で許可するオリジン（例: http://localhost:5173）を指定
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ルーター登録: 各APIの「窓口」をURLパスに割り当て
# /health=死活確認, /api/gemini-chat=AIチャット, /ask=サーバ側RAG, /sermons=説教, /notes=共有ノート
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(chat.router, prefix="/api/gemini-chat", tags=["chat"])
app.include_router(ask.router, prefix="/ask", tags=["ask"])
app.include_router(sermons.router, prefix="/sermons", tags=["sermons"])
app.include_router(notes.router, prefix="/notes", tags=["notes"])


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """AppError の detail（{ "error", "code" }）をそのままボディにする"""
    return JSONResponse(status_code=exc.status_code, content=exc.detail)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """404/405 などフレームワーク由来のエラーも { "error", "code" } 形式に揃える"""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        code = "METHOD_NOT_ALLOWED"
    elif exc.status_code < 500:
        code = "INVALID_INPUT"
    else:
        code = "INTERNAL_ERROR"
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail), "code": code})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    リクエストの形式エラー（必須項目なし・型違い）を 400 INVALID_INPUT にする

    FastAPI標準の 422 {"detail": [...]} ではなく、他のエラーと同じ形式で返す
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [part for part in first.get("loc", ()) if isinstance(part, str) and part != "body"]
    field = loc[-1] if loc else "request body"
    if first.get("type") == "missing":
        message = f"{field} is required"
    else:
        message = f"{field} is invalid"
    logger.info(f"リクエスト形式エラー: {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message, "code": "INVALID_INPUT"},
    )


@app.on_event("startup")
async def startup_event():
    """
    起動時の処理: 説教ライブラリを読み込んでキャッシュする
    """
    try:
        library = get_sermons()
        logger.info(f"説教ライブラリ: {len(library)}件")
    except Exception as e:
        # 失敗してもサーバ起動は落とさない（ログだけ出す）
        logger.error(f"起動時の説教ライブラリ読み込みに失敗しました: {type(e).__name__}: {e}")

    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY が未設定です。AIチャットは500を返します")


@app.get("/")
async def root():
    """ルートエンドポイント"""
    return {"message": "Bible Study Assistant API"}
