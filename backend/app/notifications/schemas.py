# backend/app/notifications/schemas.py

"""
通知ディスパッチャのスキーマ定義。

- 通知インテント（候補者への受付確認・面接案内・選考結果・お問い合わせ）ごとの検証済みリクエスト
- 送信結果 (DispatchResult / ContactDispatchResult)
- HTTP レスポンスボディ

レスポンスのキーは既存クライアント（Web フォーム）に合わせて camelCase で出力する。
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NotificationIntent(str, Enum):
    """通知の種類。ログ出力で使う。"""

    CANDIDATURE_RECEIVED = "candidature_received"
    INTERVIEW_INVITATION = "interview_invitation"
    APPLICATION_DECISION = "application_decision"
    CONTACT_OPERATOR = "contact_operator"
    CONTACT_ACKNOWLEDGMENT = "contact_acknowledgment"


class DecisionStatus(str, Enum):
    """選考結果。"""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


# ---- 検証済みリクエスト ----------------------------------------------------


class CandidatureReceived(BaseModel):
    recipient_address: str
    candidature_id: str


class InterviewInvitation(BaseModel):
    recipient_address: str
    interview_link: str


class ApplicationDecision(BaseModel):
    recipient_address: str
    candidature_id: str
    decision: DecisionStatus


class ContactSubmission(BaseModel):
    """
    お問い合わせフォーム 1件分。name / email / message は空でないことが保証される。
    """

    name: str
    email: str
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str


NotificationRequest = Union[
    CandidatureReceived,
    InterviewInvitation,
    ApplicationDecision,
    ContactSubmission,
]


class ContactFormRequest(BaseModel):
    """
    POST /send-contact の生のリクエストボディ。

    必須チェックは validators 側で行い、400 として返すため、ここでは全項目を任意にしておく。
    """

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


# ---- 送信結果 --------------------------------------------------------------


class DispatchResult(BaseModel):
    """
    メール 1通の送信結果。

    成功時は message_id、失敗時は error（と、分かればトランスポートのステータス）を持つ。
    """

    success: bool
    message_id: Optional[str] = None
    provider_response: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    transport_status: Optional[int] = None

    @classmethod
    def ok(
        cls, message_id: str, provider_response: Optional[Dict[str, Any]] = None
    ) -> "DispatchResult":
        return cls(success=True, message_id=message_id, provider_response=provider_response)

    @classmethod
    def failed(cls, error: str, transport_status: Optional[int] = None) -> "DispatchResult":
        return cls(success=False, error=error, transport_status=transport_status)


class ContactDeliveryOutcome(str, Enum):
    """
    お問い合わせ 2通送信の結果。

    - BOTH_SENT: 運営者通知・受付確認とも送信済み
    - OPERATOR_ONLY: 運営者には届いたが、受付確認の送信に失敗
    - NONE_SENT: 運営者通知の時点で失敗（受付確認は試行しない）
    """

    BOTH_SENT = "both_sent"
    OPERATOR_ONLY = "operator_only"
    NONE_SENT = "none_sent"


class ContactDispatchResult(BaseModel):
    outcome: ContactDeliveryOutcome
    operator: DispatchResult
    acknowledgment: Optional[DispatchResult] = None
    received_at: datetime

    @property
    def success(self) -> bool:
        return self.outcome == ContactDeliveryOutcome.BOTH_SENT

    @property
    def error(self) -> Optional[str]:
        if self.acknowledgment is not None and not self.acknowledgment.success:
            return self.acknowledgment.error
        return self.operator.error


# ---- HTTP レスポンス -------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CandidatureSentResponse(_CamelModel):
    success: bool = True
    message_id: str
    recipient: str
    candidature_id: str
    message: str = "Candidature confirmation email sent successfully"
    provider_response: Optional[Dict[str, Any]] = None


class InterviewSentResponse(_CamelModel):
    success: bool = True
    message_id: str
    recipient: str
    interview_link: str
    provider_response: Optional[Dict[str, Any]] = None


class DecisionSentResponse(_CamelModel):
    success: bool = True
    message_id: str
    decision: DecisionStatus
    provider_response: Optional[Dict[str, Any]] = None


class ContactReceipt(_CamelModel):
    name: str
    email: str
    timestamp: str = Field(..., description="受付時刻（UTC, ISO8601）。")


class ContactSentResponse(_CamelModel):
    success: bool = True
    message: str = "Contact form submitted successfully. Confirmation email sent."
    data: ContactReceipt


class ErrorResponse(_CamelModel):
    """400 / 500 共通のエラーボディ。"""

    success: bool = False
    error: str
    delivery: Optional[ContactDeliveryOutcome] = Field(
        None,
        description="お問い合わせ送信失敗時のみ。どこまで送信できたか。",
    )
