# backend/app/mail/config.py

"""
メール送信に必要な設定値をまとめるモジュール。
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from app.utils.config import (
    EnvVarInvalidError,
    get_env,
    get_env_bool,
    get_env_int,
    is_env_set,
)

logger = logging.getLogger(__name__)

TRANSPORT_BREVO = "brevo"
TRANSPORT_SMTP = "smtp"
TRANSPORT_LOGGING = "logging"
SUPPORTED_TRANSPORTS = (TRANSPORT_BREVO, TRANSPORT_SMTP, TRANSPORT_LOGGING)


@dataclass(frozen=True)
class MailSettings:
    """メール送信用の設定値コンテナ。"""

    sender_email: str
    sender_name: str
    transport: str
    timeout_seconds: int = 10

    # Brevo HTTP API
    brevo_api_key: Optional[str] = None
    brevo_api_base_url: str = "https://api.brevo.com/v3"

    # SMTP
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    smtp_use_tls: bool = True

    # お問い合わせフォーム
    contact_recipient_email: Optional[str] = None
    contact_signature: Optional[str] = None

    @property
    def operator_address(self) -> str:
        """お問い合わせ通知の宛先（未設定なら送信元アドレス）。"""
        return self.contact_recipient_email or self.sender_email

    @property
    def signature(self) -> str:
        return self.contact_signature or self.sender_name


def _get_transport() -> str:
    transport = get_env("MAIL_TRANSPORT", default=TRANSPORT_BREVO, required=False)
    transport = transport.strip().lower()
    if transport not in SUPPORTED_TRANSPORTS:
        raise EnvVarInvalidError(
            "MAIL_TRANSPORT", transport, ", ".join(SUPPORTED_TRANSPORTS)
        )
    return transport


@lru_cache()
def get_mail_settings() -> MailSettings:
    """
    環境変数からメール設定を読み込む。

    必須:
      - EMAIL_FROM
      - BREVO_API_KEY  (MAIL_TRANSPORT=brevo の場合)
      - SMTP_HOST      (MAIL_TRANSPORT=smtp の場合)

    任意:
      - EMAIL_FROM_NAME         (デフォルト: Email Service)
      - MAIL_TRANSPORT          (デフォルト: brevo)
      - MAIL_TIMEOUT_SECONDS    (デフォルト: 10)
      - BREVO_API_BASE_URL      (デフォルト: https://api.brevo.com/v3)
      - SMTP_PORT / SMTP_USER / SMTP_PASS / SMTP_USE_TLS
      - CONTACT_RECIPIENT_EMAIL (デフォルト: EMAIL_FROM)
      - CONTACT_SIGNATURE       (デフォルト: EMAIL_FROM_NAME)
    """
    transport = _get_transport()

    sender_email = get_env("EMAIL_FROM")
    sender_name = get_env("EMAIL_FROM_NAME", default="Email Service", required=False)

    brevo_api_key = get_env(
        "BREVO_API_KEY", required=transport == TRANSPORT_BREVO
    )
    smtp_host = get_env("SMTP_HOST", required=transport == TRANSPORT_SMTP)

    return MailSettings(
        sender_email=sender_email,
        sender_name=sender_name,
        transport=transport,
        timeout_seconds=get_env_int("MAIL_TIMEOUT_SECONDS", default=10),
        brevo_api_key=brevo_api_key,
        brevo_api_base_url=get_env(
            "BREVO_API_BASE_URL",
            default="https://api.brevo.com/v3",
            required=False,
        ),
        smtp_host=smtp_host,
        smtp_port=get_env_int("SMTP_PORT", default=587),
        smtp_user=get_env("SMTP_USER", required=False),
        smtp_pass=get_env("SMTP_PASS", required=False),
        smtp_use_tls=get_env_bool("SMTP_USE_TLS", default=True),
        contact_recipient_email=get_env("CONTACT_RECIPIENT_EMAIL", required=False),
        contact_signature=get_env("CONTACT_SIGNATURE", required=False),
    )


def find_missing_settings() -> List[str]:
    """
    起動時チェック用に、未設定の必須環境変数名を返す。

    例外は投げない（実際のエラーは送信時に表面化させる）。
    """
    missing: List[str] = []
    if not is_env_set("EMAIL_FROM"):
        missing.append("EMAIL_FROM")

    transport = get_env("MAIL_TRANSPORT", default=TRANSPORT_BREVO, required=False).strip().lower()
    if transport == TRANSPORT_BREVO and not is_env_set("BREVO_API_KEY"):
        missing.append("BREVO_API_KEY")
    if transport == TRANSPORT_SMTP and not is_env_set("SMTP_HOST"):
        missing.append("SMTP_HOST")
    return missing


def warn_missing_settings() -> None:
    missing = find_missing_settings()
    if missing:
        logger.warning("Missing required environment variables: %s", ", ".join(missing))
