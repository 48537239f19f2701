# backend/app/mail/factory.py

"""
メール送信トランスポートの簡易ファクトリ。

MAIL_TRANSPORT に応じて Sender を 1つ生成し、アプリ全体で共有する。
- brevo   → BrevoClient
- smtp    → SmtpMailSender
- logging → LoggingMailSender
"""

from __future__ import annotations

from typing import Optional

from .client import BrevoClient
from .config import TRANSPORT_BREVO, TRANSPORT_SMTP, MailSettings, get_mail_settings
from .service import LoggingMailSender, MailSender
from .smtp import SmtpMailSender

_mail_sender: Optional[MailSender] = None


def build_mail_sender(settings: MailSettings) -> MailSender:
    """設定に対応する Sender を生成する。"""
    if settings.transport == TRANSPORT_BREVO:
        return BrevoClient(settings)
    if settings.transport == TRANSPORT_SMTP:
        return SmtpMailSender(settings)
    return LoggingMailSender()


def get_mail_sender() -> MailSender:
    """
    アプリ全体で共有する MailSender を返す。

    初回呼び出し時にのみ生成し、それ以降は同じインスタンスを返す。
    """
    global _mail_sender
    if _mail_sender is None:
        _mail_sender = build_mail_sender(get_mail_settings())
    return _mail_sender


def reset_mail_sender() -> None:
    """共有インスタンスを破棄する（設定を変えたテスト用）。"""
    global _mail_sender
    _mail_sender = None
    get_mail_settings.cache_clear()
