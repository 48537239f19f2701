# backend/app/api/debug.py

"""
動作確認用のデバッグエンドポイント。

- POST /test-post   : 受け取った JSON ボディをそのまま返す
- GET  /debug-brevo : Brevo API (GET /account) への疎通確認
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse, Response

from app.mail.client import BrevoClient, MailConnectionError
from app.mail.config import TRANSPORT_BREVO, MailSettings, get_mail_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["debug"])


# Dependency providers
# - テスト時に FastAPI dependency_overrides で差し替え可能にする
def get_brevo_client() -> BrevoClient:
    return BrevoClient(get_mail_settings())


def get_settings() -> MailSettings:
    return get_mail_settings()


@router.post("/test-post", summary="POST ボディをそのまま返す")
def echo_post(body: Any = Body(None)) -> Dict[str, Any]:
    """
    フロントエンドからの POST が届いているかを確認するためのエコー。
    """
    logger.info("Test POST received: %s", body)
    return {"received": body}


@router.get("/debug-brevo", summary="Brevo API への疎通確認")
def debug_brevo(
    settings: MailSettings = Depends(get_settings),
    client: BrevoClient = Depends(get_brevo_client),
) -> Response:
    """
    Brevo の GET /account を呼び出し、ステータスコードと本文をそのまま返す。

    - MAIL_TRANSPORT が brevo 以外 → 400
    - 接続エラー → 500
    """
    if settings.transport != TRANSPORT_BREVO:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": f"Configured transport is '{settings.transport}', not Brevo",
            },
        )

    try:
        upstream = client.fetch_account()
    except MailConnectionError as exc:
        logger.error("Brevo connectivity check failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": str(exc), "name": type(exc).__name__},
        )

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
    )
