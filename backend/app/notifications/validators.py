# backend/app/notifications/validators.py

"""
通知リクエストの入力チェック。

ここで弾いたリクエストはメール送信を一切行わずに 400 として返す。
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from .schemas import (
    ApplicationDecision,
    CandidatureReceived,
    ContactFormRequest,
    ContactSubmission,
    DecisionStatus,
    InterviewInvitation,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
INTERVIEW_LINK_PATTERN = re.compile(r"^https?://\S+$", re.IGNORECASE)


class ValidationErrorCode(str, Enum):
    INVALID_EMAIL_FORMAT = "InvalidEmailFormat"
    MISSING_CANDIDATURE_ID = "MissingCandidatureId"
    INVALID_INTERVIEW_LINK = "InvalidInterviewLink"
    INVALID_DECISION_STATUS = "InvalidDecisionStatus"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"


_MESSAGES = {
    ValidationErrorCode.INVALID_EMAIL_FORMAT: "Invalid email format",
    ValidationErrorCode.MISSING_CANDIDATURE_ID: "Candidature ID is required",
    ValidationErrorCode.INVALID_INTERVIEW_LINK: "A valid interview link is required",
    ValidationErrorCode.INVALID_DECISION_STATUS: (
        'Le statut doit être "accepted" ou "rejected" (accepted/rejected)'
    ),
    ValidationErrorCode.MISSING_REQUIRED_FIELD: (
        "Name, email, and message are required fields"
    ),
}


class NotificationValidationError(ValueError):
    """クライアント起因の入力エラー。HTTP 400 に対応する。"""

    def __init__(self, code: ValidationErrorCode, message: Optional[str] = None) -> None:
        self.code = code
        self.message = message or _MESSAGES[code]
        super().__init__(self.message)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def validate_email_address(value: Optional[str]) -> str:
    """local@domain（domain に '.' を含む）形式でなければ InvalidEmailFormat。"""
    if value is None or not EMAIL_PATTERN.fullmatch(value):
        raise NotificationValidationError(ValidationErrorCode.INVALID_EMAIL_FORMAT)
    return value


def validate_candidature_id(value: Optional[str]) -> str:
    if _is_blank(value):
        raise NotificationValidationError(ValidationErrorCode.MISSING_CANDIDATURE_ID)
    return value


def validate_interview_link(value: Optional[str]) -> str:
    if value is None or not INTERVIEW_LINK_PATTERN.fullmatch(value):
        raise NotificationValidationError(ValidationErrorCode.INVALID_INTERVIEW_LINK)
    return value


def normalize_decision_status(value: Optional[str]) -> DecisionStatus:
    """大文字小文字を区別せずに accepted / rejected に正規化する（空白は除去しない）。"""
    try:
        return DecisionStatus((value or "").lower())
    except ValueError:
        raise NotificationValidationError(
            ValidationErrorCode.INVALID_DECISION_STATUS
        ) from None


def validate_candidature_request(email: str, candidature_id: str) -> CandidatureReceived:
    return CandidatureReceived(
        recipient_address=validate_email_address(email),
        candidature_id=validate_candidature_id(candidature_id),
    )


def validate_interview_request(email: str, link: Optional[str]) -> InterviewInvitation:
    return InterviewInvitation(
        recipient_address=validate_email_address(email),
        interview_link=validate_interview_link(link),
    )


def validate_decision_request(
    email: str, candidature_id: str, status: Optional[str]
) -> ApplicationDecision:
    return ApplicationDecision(
        recipient_address=validate_email_address(email),
        candidature_id=validate_candidature_id(candidature_id),
        decision=normalize_decision_status(status),
    )


def validate_contact_request(body: ContactFormRequest) -> ContactSubmission:
    """
    必須項目（name / email / message）の有無を先に確認し、その後 email の形式を確認する。

    値は受け取ったまま使う（email の前後の空白も形式エラーになる）。
    phone / subject は空文字なら未指定扱いにする。
    """
    if not body.name or not body.email or not body.message:
        raise NotificationValidationError(ValidationErrorCode.MISSING_REQUIRED_FIELD)

    return ContactSubmission(
        name=body.name,
        email=validate_email_address(body.email),
        phone=body.phone or None,
        subject=body.subject or None,
        message=body.message,
    )
