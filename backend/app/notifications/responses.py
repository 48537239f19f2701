# backend/app/notifications/responses.py

"""
検証エラー・送信結果を HTTP レスポンスに変換する。

- NotificationValidationError → 400 {"success": false, "error": ...}
- リクエストボディの形式エラー → 400（FastAPI 既定の 422 は返さない）
- 送信失敗・必須設定の欠落 → 500 {"success": false, "error": ...}
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.utils.config import ConfigError

from .schemas import ContactDispatchResult, DispatchResult, ErrorResponse
from .validators import NotificationValidationError

logger = logging.getLogger(__name__)

CONTACT_FAILURE_MESSAGE = "Failed to send message. Please try again later."
INVALID_REQUEST_MESSAGE = "Invalid request body"
NOT_CONFIGURED_MESSAGE = "Email service is not configured"


def error_response(status_code: int, payload: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=payload.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def dispatch_failure_response(result: DispatchResult) -> JSONResponse:
    """送信失敗をそのまま 500 で返す（トランスポートのエラーメッセージを含める）。"""
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(error=result.error or "Email delivery failed"),
    )


def contact_failure_response(result: ContactDispatchResult) -> JSONResponse:
    """
    お問い合わせ送信失敗を 500 で返す。

    エラー詳細はログにのみ残し、クライアントには汎用メッセージとどこまで送れたかだけ返す。
    """
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(error=CONTACT_FAILURE_MESSAGE, delivery=result.outcome),
    )


async def _handle_validation_error(
    request: Request, exc: NotificationValidationError
) -> JSONResponse:
    logger.warning(
        "Rejected %s %s: %s (%s)", request.method, request.url.path, exc.message, exc.code.value
    )
    return error_response(status.HTTP_400_BAD_REQUEST, ErrorResponse(error=exc.message))


async def _handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return error_response(
        status.HTTP_400_BAD_REQUEST, ErrorResponse(error=INVALID_REQUEST_MESSAGE)
    )


async def _handle_config_error(request: Request, exc: ConfigError) -> JSONResponse:
    logger.error("Cannot handle %s %s: %s", request.method, request.url.path, exc)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorResponse(error=NOT_CONFIGURED_MESSAGE)
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotificationValidationError, _handle_validation_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)
    app.add_exception_handler(ConfigError, _handle_config_error)
