# backend/app/main.py

"""
バックエンドアプリケーションのエントリーポイント。

主な責務:
- 応募者・お問い合わせ向けの通知メール送信エンドポイントを公開する
  (/send-candidature, /send-interview, /send-decision, /send-contact)
- 動作確認用のエンドポイントを公開する (/health, /test-post, /debug-brevo)
"""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.debug import router as debug_router
from app.mail.config import get_mail_settings, warn_missing_settings
from app.notifications.responses import register_exception_handlers
from app.notifications.router import router as notifications_router
from app.utils.config import ConfigError, get_env, get_env_int
from app.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _cors_origins() -> list:
    raw = get_env("CORS_ALLOW_ORIGINS", default="*", required=False)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app() -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    - 通知メール送信エンドポイント
    - デバッグ用エンドポイント (/test-post, /debug-brevo)
    - ヘルスチェックエンドポイント (/health)
    """
    app = FastAPI(title="Candidature Mail Relay")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ルーター登録
    app.include_router(notifications_router)
    app.include_router(debug_router)

    register_exception_handlers(app)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        モニタリングや動作確認用。
        """
        return {"status": "ok"}

    warn_missing_settings()

    return app


def run() -> None:
    """
    uvicorn でサーバーを起動する（console script `mail-relay`）。
    """
    configure_logging(get_env("LOG_LEVEL", default="INFO", required=False))

    port = get_env_int("PORT", default=3000)
    try:
        settings = get_mail_settings()
        logger.info(
            "Email service running on port %s | Transport: %s | Sender: %s (%s)",
            port,
            settings.transport,
            settings.sender_email,
            settings.sender_name,
        )
    except ConfigError as exc:
        logger.warning("Mail settings are incomplete: %s", exc)

    uvicorn.run(app, host="0.0.0.0", port=port)


# uvicorn 実行時のエントリーポイント
app = create_app()


if __name__ == "__main__":
    run()
