# backend/app/mail/smtp.py

"""
SMTP 経由でメールを送信するトランスポート。

smtplib の薄いラッパー。接続・TLS・認証・切断までを 1送信ごとに完結させる。
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Callable, Optional

from .client import MailAuthError, MailConnectionError, MailTransportError
from .config import MailSettings, get_mail_settings
from .schemas import DeliveryReceipt, RenderedMessage

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


def build_email_message(message: RenderedMessage) -> EmailMessage:
    """
    RenderedMessage から MIME メッセージを組み立てる。

    - text_body があれば text/plain + text/html の multipart/alternative
    - 無ければ text/html のみ
    """
    email_message = EmailMessage()
    if message.sender_name:
        email_message["From"] = formataddr((message.sender_name, message.sender_address))
    else:
        email_message["From"] = message.sender_address
    email_message["To"] = ", ".join(message.recipient_addresses)
    email_message["Subject"] = message.subject
    if message.reply_to_address:
        email_message["Reply-To"] = message.reply_to_address

    domain = message.sender_address.rsplit("@", 1)[-1]
    email_message["Message-ID"] = make_msgid(domain=domain)

    if message.text_body:
        email_message.set_content(message.text_body)
        email_message.add_alternative(message.html_body, subtype="html")
    else:
        email_message.set_content(message.html_body, subtype="html")

    return email_message


class SmtpMailSender:
    """
    SMTP サーバーにメールを渡す Sender。

    smtp_factory / smtp_ssl_factory はテスト時にモックへ差し替えるためのもの。
    """

    def __init__(
        self,
        settings: Optional[MailSettings] = None,
        *,
        smtp_factory: Optional[Callable[..., smtplib.SMTP]] = None,
        smtp_ssl_factory: Optional[Callable[..., smtplib.SMTP_SSL]] = None,
    ) -> None:
        self._settings = settings or get_mail_settings()
        self._smtp_factory = smtp_factory or smtplib.SMTP
        self._smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def _connect(self) -> smtplib.SMTP:
        settings = self._settings
        if settings.smtp_port == IMPLICIT_TLS_PORT:
            logger.debug("Connecting to %s:%s with implicit TLS", settings.smtp_host, settings.smtp_port)
            return self._smtp_ssl_factory(
                settings.smtp_host,
                settings.smtp_port,
                timeout=settings.timeout_seconds,
                context=ssl.create_default_context(),
            )

        logger.debug("Connecting to %s:%s", settings.smtp_host, settings.smtp_port)
        return self._smtp_factory(
            settings.smtp_host,
            settings.smtp_port,
            timeout=settings.timeout_seconds,
        )

    def send(self, message: RenderedMessage) -> DeliveryReceipt:
        """
        メール 1通を SMTP で送信する。

        :raises MailAuthError: SMTP 認証に失敗した場合。
        :raises MailConnectionError: 接続エラーやタイムアウト時。
        :raises MailTransportError: サーバーが送信を拒否した場合。
        """
        email_message = build_email_message(message)
        smtp = None
        try:
            smtp = self._connect()
            if self._settings.smtp_port != IMPLICIT_TLS_PORT and self._settings.smtp_use_tls:
                smtp.starttls(context=ssl.create_default_context())
            if self._settings.smtp_user and self._settings.smtp_pass:
                smtp.login(self._settings.smtp_user, self._settings.smtp_pass)
            smtp.send_message(email_message)
        except smtplib.SMTPAuthenticationError as exc:
            raise MailAuthError(
                f"SMTP authentication failed: {exc}", status_code=exc.smtp_code
            ) from exc
        except smtplib.SMTPResponseException as exc:
            raise MailTransportError(
                f"SMTP error during message delivery: {exc}", status_code=exc.smtp_code
            ) from exc
        except smtplib.SMTPException as exc:
            raise MailTransportError(f"SMTP error during message delivery: {exc}") from exc
        except OSError as exc:
            raise MailConnectionError(f"Network error during SMTP connection: {exc}") from exc
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError) as exc:
                    logger.warning("Error closing SMTP connection: %s", exc)

        return DeliveryReceipt(message_id=str(email_message["Message-ID"]))
