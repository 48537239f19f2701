# backend/app/mail/service.py

"""
メール送信インターフェースと、外部送信を行わない最小実装。

- RenderedMessage を受け取る send() インターフェース (MailSender)
- ログ出力のみ行う LoggingMailSender（ローカル開発・動作確認用）

実送信の実装は client.BrevoClient / smtp.SmtpMailSender。
"""

from __future__ import annotations

import logging
import uuid
from typing import Protocol

from .schemas import DeliveryReceipt, RenderedMessage

logger = logging.getLogger(__name__)


class MailSender(Protocol):
    """
    メール送信の最小インターフェース。

    実装例:
    - BrevoClient: Brevo HTTP API 経由で送信
    - SmtpMailSender: SMTP サーバー経由で送信
    - LoggingMailSender: ログ出力のみ

    送信に失敗した場合は MailTransportError を投げること。
    """

    def send(self, message: RenderedMessage) -> DeliveryReceipt:  # pragma: no cover - Protocol
        ...


class LoggingMailSender:
    """
    RenderedMessage を Python の logger に記録するだけの Sender。

    - MAIL_TRANSPORT=logging のときに使う
    - 実際の外部サービスへの送信は行わない
    """

    def __init__(self, logger_: logging.Logger | None = None) -> None:
        self._logger = logger_ or logger

    def send(self, message: RenderedMessage) -> DeliveryReceipt:
        message_id = f"<{uuid.uuid4()}@logging>"
        self._logger.info(
            "[mail][dry-run] id=%s to=%s reply_to=%s subject=%s",
            message_id,
            ", ".join(message.recipient_addresses),
            message.reply_to_address or "-",
            message.subject,
        )
        self._logger.debug("[mail][dry-run] text body:\n%s", message.text_body or "")
        return DeliveryReceipt(message_id=message_id)
