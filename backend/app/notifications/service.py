# backend/app/notifications/service.py

"""
通知ディスパッチャ（検証済みリクエスト → テンプレート描画 → 送信 → 結果）。

- MailSender はコンストラクタで注入する（テストではダミーに差し替え）
- 送信失敗 (MailTransportError) はここで捕捉し、DispatchResult に変換する
- リトライ・タイムアウト制御は行わない（トランスポート側に任せる）
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Union

from app.mail.client import MailTransportError
from app.mail.schemas import RenderedMessage
from app.mail.service import MailSender

from .schemas import (
    ApplicationDecision,
    CandidatureReceived,
    ContactDeliveryOutcome,
    ContactDispatchResult,
    ContactSubmission,
    DispatchResult,
    InterviewInvitation,
    NotificationIntent,
    NotificationRequest,
)
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    インテントごとのメールを組み立てて MailSender に渡すサービス。

    リクエスト間で共有する可変状態は持たない。
    """

    def __init__(self, sender: MailSender, renderer: TemplateRenderer) -> None:
        self._sender = sender
        self._renderer = renderer

    # ---- 内部ヘルパー -------------------------------------------------

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _deliver(self, intent: NotificationIntent, message: RenderedMessage) -> DispatchResult:
        """
        1通送信し、結果を DispatchResult に変換する。
        """
        recipients = ", ".join(message.recipient_addresses)
        try:
            receipt = self._sender.send(message)
        except MailTransportError as exc:
            logger.error(
                "Failed to send %s email to %s: %s", intent.value, recipients, exc
            )
            return DispatchResult.failed(str(exc), transport_status=exc.status_code)

        logger.info(
            "Sent %s email to %s (messageId=%s)", intent.value, recipients, receipt.message_id
        )
        return DispatchResult.ok(receipt.message_id, receipt.provider_response)

    # ---- 公開 API ------------------------------------------------------

    def send_candidature_confirmation(self, request: CandidatureReceived) -> DispatchResult:
        message = self._renderer.render_candidature(request)
        return self._deliver(NotificationIntent.CANDIDATURE_RECEIVED, message)

    def send_interview_invitation(self, request: InterviewInvitation) -> DispatchResult:
        message = self._renderer.render_interview(request)
        return self._deliver(NotificationIntent.INTERVIEW_INVITATION, message)

    def send_decision(self, request: ApplicationDecision) -> DispatchResult:
        message = self._renderer.render_decision(request)
        return self._deliver(NotificationIntent.APPLICATION_DECISION, message)

    def send_contact(
        self, submission: ContactSubmission, received_at: Optional[datetime] = None
    ) -> ContactDispatchResult:
        """
        お問い合わせを運営者に通知し、送信者に受付確認を送る。

        2通は順番に送る。運営者通知に失敗した場合、受付確認は送らない。
        どこまで送れたかは ContactDispatchResult.outcome で表す。
        """
        received_at = received_at or self._now()
        operator_message, acknowledgment = self._renderer.render_contact(submission, received_at)

        operator_result = self._deliver(NotificationIntent.CONTACT_OPERATOR, operator_message)
        if not operator_result.success:
            return ContactDispatchResult(
                outcome=ContactDeliveryOutcome.NONE_SENT,
                operator=operator_result,
                received_at=received_at,
            )

        ack_result = self._deliver(NotificationIntent.CONTACT_ACKNOWLEDGMENT, acknowledgment)
        if not ack_result.success:
            logger.warning(
                "Contact form from %s reached the operator but the confirmation failed.",
                submission.email,
            )
            outcome = ContactDeliveryOutcome.OPERATOR_ONLY
        else:
            outcome = ContactDeliveryOutcome.BOTH_SENT

        return ContactDispatchResult(
            outcome=outcome,
            operator=operator_result,
            acknowledgment=ack_result,
            received_at=received_at,
        )

    def dispatch(
        self, request: NotificationRequest
    ) -> Union[DispatchResult, ContactDispatchResult]:
        """検証済みリクエストの型に応じて、対応する送信メソッドに振り分ける。"""
        if isinstance(request, CandidatureReceived):
            return self.send_candidature_confirmation(request)
        if isinstance(request, InterviewInvitation):
            return self.send_interview_invitation(request)
        if isinstance(request, ApplicationDecision):
            return self.send_decision(request)
        if isinstance(request, ContactSubmission):
            return self.send_contact(request)
        raise TypeError(f"Unsupported notification request: {type(request).__name__}")
