# backend/app/mail/client.py

"""
Brevo (旧 Sendinblue) トランザクションメール API との通信を担当するクライアントモジュール。

トランスポート共通の例外もここで定義する。
"""

import logging
from typing import Any, Dict, Optional

import httpx

from .config import MailSettings, get_mail_settings
from .schemas import DeliveryReceipt, RenderedMessage

logger = logging.getLogger(__name__)


class MailTransportError(RuntimeError):
    """メール送信トランスポート全般の例外。"""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MailAuthError(MailTransportError):
    """認証・権限関連のエラー（API キー不正、SMTP ログイン失敗など）。"""


class MailAPIError(MailTransportError):
    """その他プロバイダ側で送信を拒否された場合のエラー。"""


class MailConnectionError(MailTransportError):
    """接続エラー・タイムアウト時の例外。"""


def _extract_message_id(data: Dict[str, Any]) -> str:
    """
    Brevo のレスポンスからメッセージ ID を取り出す。

    通常は {"messageId": "<...>"}。念のため {"message": {"messageId": ...}} にも対応し、
    どちらも無ければ "unknown" を返す。
    """
    message_id = data.get("messageId")
    if isinstance(message_id, str) and message_id:
        return message_id

    nested = data.get("message")
    if isinstance(nested, dict):
        message_id = nested.get("messageId")
        if isinstance(message_id, str) and message_id:
            return message_id

    return "unknown"


class BrevoClient:
    """
    Brevo HTTP API の薄いラッパークライアント。

    - POST /smtp/email によるトランザクションメール送信
    - GET /account による疎通確認（デバッグ用）
    """

    def __init__(self, settings: Optional[MailSettings] = None) -> None:
        self.config = settings or get_mail_settings()

    @property
    def timeout(self) -> int:
        return self.config.timeout_seconds

    def _build_headers(self) -> Dict[str, str]:
        """
        Brevo API 呼び出しに必要なヘッダーを構築。
        """
        return {
            "accept": "application/json",
            "content-type": "application/json",
            "api-key": self.config.brevo_api_key or "",
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        HTTP レスポンスコードに応じて適切な例外を投げる。
        """
        if response.status_code == 401:
            raise MailAuthError(
                "Unauthorized. Check BREVO_API_KEY.", status_code=response.status_code
            )
        if response.status_code == 403:
            raise MailAuthError(
                "Forbidden. Check Brevo account permissions.",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise MailAPIError(
                f"Brevo API error {response.status_code} "
                f"{response.reason_phrase}: {response.text}",
                status_code=response.status_code,
            )

    def build_payload(self, message: RenderedMessage) -> Dict[str, Any]:
        """
        RenderedMessage を Brevo の送信ペイロードに変換する。

        値が無い項目（textContent, replyTo）はキーごと省く。
        """
        payload: Dict[str, Any] = {
            "sender": {
                "email": message.sender_address,
                "name": message.sender_name or self.config.sender_name,
            },
            "to": [{"email": address} for address in message.recipient_addresses],
            "subject": message.subject,
            "htmlContent": message.html_body,
        }
        if message.text_body:
            payload["textContent"] = message.text_body
        if message.reply_to_address:
            payload["replyTo"] = {"email": message.reply_to_address}
        return payload

    def send(self, message: RenderedMessage) -> DeliveryReceipt:
        """
        メール 1通を送信する。

        :raises MailAuthError: API キーが不正な場合。
        :raises MailAPIError: Brevo が 4xx/5xx を返した場合。
        :raises MailConnectionError: 接続エラーやタイムアウト時。
        """
        url = f"{self.config.brevo_api_base_url}/smtp/email"

        try:
            response = httpx.post(
                url,
                headers=self._build_headers(),
                json=self.build_payload(message),
                timeout=self.timeout,
            )
        except httpx.RequestError as exc:
            raise MailConnectionError(f"Failed to call Brevo API: {exc}") from exc

        self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError:
            # JSON でないレスポンスはそのままテキストで返す。
            data = {"raw": response.text}
        if not isinstance(data, dict):
            data = {"raw": data}

        return DeliveryReceipt(message_id=_extract_message_id(data), provider_response=data)

    def fetch_account(self) -> httpx.Response:
        """
        GET /account を呼び出し、生のレスポンスを返す。

        ステータスコードの解釈は呼び出し側（デバッグ用エンドポイント）に任せる。
        """
        url = f"{self.config.brevo_api_base_url}/account"

        try:
            return httpx.get(
                url,
                headers={
                    "api-key": self.config.brevo_api_key or "",
                    "accept": "application/json",
                },
                timeout=self.timeout,
            )
        except httpx.RequestError as exc:
            raise MailConnectionError(f"Failed to reach Brevo API: {exc}") from exc
