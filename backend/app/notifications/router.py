# backend/app/notifications/router.py
"""
通知メール送信用の FastAPI ルーター定義。

- GET  /send-candidature/{email}/{id}
- GET  /send-interview/{email}?link=URL
- GET  /send-decision/{email}/{id}?status=accepted|rejected
- POST /send-contact

入力チェックは依存関数として dispatcher より先に解決する。
メール設定が欠けていても、不正な入力には 400 を返す。
"""

from typing import Any, Optional, Union

from fastapi import APIRouter, Body, Depends, Query
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .factory import get_notification_dispatcher
from .responses import contact_failure_response, dispatch_failure_response
from .schemas import (
    ApplicationDecision,
    CandidatureReceived,
    CandidatureSentResponse,
    ContactFormRequest,
    ContactReceipt,
    ContactSentResponse,
    ContactSubmission,
    DecisionSentResponse,
    ErrorResponse,
    InterviewInvitation,
    InterviewSentResponse,
)
from .service import NotificationDispatcher
from .validators import (
    validate_candidature_request,
    validate_contact_request,
    validate_decision_request,
    validate_interview_request,
)

router = APIRouter(tags=["notifications"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "入力エラー（送信は行わない）"},
    500: {"model": ErrorResponse, "description": "メール送信に失敗"},
}


# Dependency providers
# - 検証に失敗すると NotificationValidationError / RequestValidationError を投げ、
#   dispatcher（メール設定の読み込み）までは進まない
def candidature_request(email: str, candidature_id: str) -> CandidatureReceived:
    return validate_candidature_request(email, candidature_id)


def interview_request(
    email: str,
    link: Optional[str] = Query(None, description="面接に参加するための http(s) URL"),
) -> InterviewInvitation:
    return validate_interview_request(email, link)


def decision_request(
    email: str,
    candidature_id: str,
    status: Optional[str] = Query(None, description="accepted / rejected（大文字小文字は区別しない）"),
) -> ApplicationDecision:
    return validate_decision_request(email, candidature_id, status)


def contact_submission(body: Any = Body(None)) -> ContactSubmission:
    """
    JSON ボディを ContactFormRequest として読み、必須項目と email 形式を確認する。
    """
    try:
        form = ContactFormRequest.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc
    return validate_contact_request(form)


@router.get(
    "/send-candidature/{email}/{candidature_id}",
    response_model=CandidatureSentResponse,
    responses=_ERROR_RESPONSES,
    summary="応募受付の確認メールを送信",
)
def send_candidature(
    request: CandidatureReceived = Depends(candidature_request),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> Union[CandidatureSentResponse, JSONResponse]:
    """
    応募者に応募番号入りの受付確認メールを送る。

    - email 形式不正 / 応募番号が空 → 400
    - 送信失敗 → 500
    """
    result = dispatcher.send_candidature_confirmation(request)
    if not result.success:
        return dispatch_failure_response(result)

    return CandidatureSentResponse(
        message_id=result.message_id,
        recipient=request.recipient_address,
        candidature_id=request.candidature_id,
        provider_response=result.provider_response,
    )


@router.get(
    "/send-interview/{email}",
    response_model=InterviewSentResponse,
    responses=_ERROR_RESPONSES,
    summary="面接案内メールを送信",
)
def send_interview(
    request: InterviewInvitation = Depends(interview_request),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> Union[InterviewSentResponse, JSONResponse]:
    """
    面接の参加リンクを含む案内メールを送る。
    """
    result = dispatcher.send_interview_invitation(request)
    if not result.success:
        return dispatch_failure_response(result)

    return InterviewSentResponse(
        message_id=result.message_id,
        recipient=request.recipient_address,
        interview_link=request.interview_link,
        provider_response=result.provider_response,
    )


@router.get(
    "/send-decision/{email}/{candidature_id}",
    response_model=DecisionSentResponse,
    responses=_ERROR_RESPONSES,
    summary="選考結果メールを送信",
)
def send_decision(
    request: ApplicationDecision = Depends(decision_request),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> Union[DecisionSentResponse, JSONResponse]:
    result = dispatcher.send_decision(request)
    if not result.success:
        return dispatch_failure_response(result)

    return DecisionSentResponse(
        message_id=result.message_id,
        decision=request.decision,
        provider_response=result.provider_response,
    )


@router.post(
    "/send-contact",
    response_model=ContactSentResponse,
    responses=_ERROR_RESPONSES,
    summary="お問い合わせフォームの送信",
    openapi_extra={
        "requestBody": {
            "content": {
                "application/json": {"schema": ContactFormRequest.model_json_schema()}
            },
        },
    },
)
def send_contact(
    submission: ContactSubmission = Depends(contact_submission),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> Union[ContactSentResponse, JSONResponse]:
    """
    お問い合わせ内容を運営者に転送し、送信者に受付確認メールを送る。

    - 運営者通知が失敗した場合、受付確認は送らずに 500
    - 受付確認のみ失敗した場合も 500（delivery=operator_only）
    """
    result = dispatcher.send_contact(submission)
    if not result.success:
        return contact_failure_response(result)

    return ContactSentResponse(
        data=ContactReceipt(
            name=submission.name,
            email=submission.email,
            timestamp=result.received_at.isoformat().replace("+00:00", "Z"),
        )
    )
