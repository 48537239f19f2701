# backend/app/notifications/factory.py

"""
NotificationDispatcher の簡易ファクトリ。

MailSettings から TemplateRenderer を作り、共有 MailSender と組み合わせる。
ルーターからは FastAPI の Depends 経由で使う（テストでは dependency_overrides で差し替え）。
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from app.mail.config import MailSettings, get_mail_settings
from app.mail.factory import get_mail_sender
from app.mail.service import MailSender

from .service import NotificationDispatcher
from .templates import TemplateRenderer


@lru_cache()
def build_renderer(settings: MailSettings) -> TemplateRenderer:
    return TemplateRenderer(
        settings.sender_email,
        sender_name=settings.sender_name,
        operator_address=settings.operator_address,
        contact_signature=settings.signature,
    )


def build_dispatcher(
    settings: MailSettings, sender: Optional[MailSender] = None
) -> NotificationDispatcher:
    """設定（と任意の Sender）から NotificationDispatcher を組み立てる。"""
    return NotificationDispatcher(
        sender=sender or get_mail_sender(),
        renderer=build_renderer(settings),
    )


def get_notification_dispatcher() -> NotificationDispatcher:
    """
    リクエストごとに呼ばれる依存関数。

    設定・Sender・TemplateRenderer はキャッシュ済みのものを使うため、生成コストは小さい。
    """
    return build_dispatcher(get_mail_settings())
