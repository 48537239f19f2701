# backend/app/notifications/templates.py

"""
通知メールのテンプレート描画。

Jinja2 テンプレート（email_templates/ 配下）から件名・HTML 本文・テキスト本文を組み立て、
送信可能な RenderedMessage を返す。

*.html.j2 は autoescape 有効。差し込む値（氏名・本文・件名・応募番号など）は
すべて HTML エスケープされる。*.txt.j2 はエスケープしない。
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape
from markupsafe import Markup, escape

from app.mail.schemas import RenderedMessage

from .schemas import (
    ApplicationDecision,
    CandidatureReceived,
    ContactSubmission,
    DecisionStatus,
    InterviewInvitation,
)

CANDIDATURE_SUBJECT = "Confirmation de soumission de candidature"
INTERVIEW_SUBJECT = "Invitation à un entretien"
DECISION_SUBJECTS = {
    DecisionStatus.ACCEPTED: "Félicitations ! Votre candidature a été acceptée",
    DecisionStatus.REJECTED: "Mise à jour concernant votre candidature",
}
DECISION_COLORS = {
    DecisionStatus.ACCEPTED: "#27ae60",
    DecisionStatus.REJECTED: "#c0392b",
}
DECISION_BODIES = {
    DecisionStatus.ACCEPTED: (
        "Nous avons le plaisir de vous informer que votre candidature "
        "(ID : {candidature_id}) a été acceptée. Bienvenue parmi nous !"
    ),
    DecisionStatus.REJECTED: (
        "Nous regrettons de vous informer que votre candidature "
        "(ID : {candidature_id}) n'a pas été retenue. Merci d'avoir postulé."
    ),
}
CONTACT_OPERATOR_SUBJECT = "Nouvelle soumission du formulaire de contact: {subject}"
CONTACT_NO_SUBJECT = "Sans objet"
CONTACT_ACKNOWLEDGMENT_SUBJECT = "Merci de nous avoir contactés !"

PREVIEW_LENGTH = 200


def nl2br(value: Any) -> Markup:
    """エスケープしたうえで改行を <br> に置き換える。"""
    return Markup("<br>").join(escape(str(value)).split("\n"))


def truncate_preview(value: str, length: int = PREVIEW_LENGTH) -> str:
    """length 文字を超える場合は切り詰めて '...' を付ける。"""
    if len(value) <= length:
        return value
    return value[:length] + "..."


def _single_line(value: str) -> str:
    # メールヘッダに改行を含めない
    return " ".join(value.split())


class TemplateRenderer:
    """
    インテントごとの固定テンプレートから RenderedMessage を生成する。

    送信元アドレス・お問い合わせ通知の宛先などはコンストラクタで受け取る。
    """

    def __init__(
        self,
        sender_address: str,
        *,
        sender_name: Optional[str] = None,
        operator_address: Optional[str] = None,
        contact_signature: Optional[str] = None,
        template_dir: str = "email_templates",
    ) -> None:
        self.sender_address = sender_address
        self.sender_name = sender_name
        self.operator_address = operator_address or sender_address
        self.contact_signature = contact_signature or sender_name or ""

        self.env = Environment(
            loader=PackageLoader("app.notifications", template_dir),
            autoescape=select_autoescape(enabled_extensions=("html.j2",), default=False),
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )
        self.env.filters["nl2br"] = nl2br

    def _render_pair(self, name: str, context: Dict[str, Any]) -> Tuple[str, str]:
        html_body = self.env.get_template(f"{name}.html.j2").render(context)
        text_body = self.env.get_template(f"{name}.txt.j2").render(context).strip()
        return html_body, text_body

    def _message(
        self,
        recipient: str,
        subject: str,
        html_body: str,
        text_body: Optional[str],
        reply_to: Optional[str] = None,
    ) -> RenderedMessage:
        return RenderedMessage(
            sender_address=self.sender_address,
            sender_name=self.sender_name,
            recipient_addresses=[recipient],
            subject=_single_line(subject),
            html_body=html_body,
            text_body=text_body,
            reply_to_address=reply_to,
        )

    def render_candidature(self, request: CandidatureReceived) -> RenderedMessage:
        html_body, text_body = self._render_pair(
            "candidature_received", {"candidature_id": request.candidature_id}
        )
        return self._message(request.recipient_address, CANDIDATURE_SUBJECT, html_body, text_body)

    def render_interview(self, request: InterviewInvitation) -> RenderedMessage:
        html_body, text_body = self._render_pair(
            "interview_invitation", {"interview_link": request.interview_link}
        )
        return self._message(request.recipient_address, INTERVIEW_SUBJECT, html_body, text_body)

    def render_decision(self, request: ApplicationDecision) -> RenderedMessage:
        subject = DECISION_SUBJECTS[request.decision]
        html_body, text_body = self._render_pair(
            "application_decision",
            {
                "subject": subject,
                "heading_color": DECISION_COLORS[request.decision],
                "body_text": DECISION_BODIES[request.decision].format(
                    candidature_id=request.candidature_id
                ),
            },
        )
        return self._message(request.recipient_address, subject, html_body, text_body)

    def render_contact(
        self, submission: ContactSubmission, received_at: datetime
    ) -> Tuple[RenderedMessage, RenderedMessage]:
        """
        お問い合わせ 1件から 2通を生成する。

        :return: (運営者向け通知, 送信者向け受付確認)
        運営者向け通知の Reply-To は送信者のアドレスにする。
        """
        operator_context = {
            "name": submission.name,
            "email": submission.email,
            "phone": submission.phone,
            "subject": submission.subject,
            "message": submission.message,
            "received_at": received_at.strftime("%d/%m/%Y %H:%M:%S %Z").strip(),
        }
        operator_html, operator_text = self._render_pair("contact_operator", operator_context)
        operator_message = self._message(
            self.operator_address,
            CONTACT_OPERATOR_SUBJECT.format(subject=submission.subject or CONTACT_NO_SUBJECT),
            operator_html,
            operator_text,
            reply_to=submission.email,
        )

        ack_html, ack_text = self._render_pair(
            "contact_acknowledgment",
            {
                "name": submission.name,
                "message_preview": truncate_preview(submission.message),
                "signature": self.contact_signature,
            },
        )
        acknowledgment = self._message(
            submission.email, CONTACT_ACKNOWLEDGMENT_SUBJECT, ack_html, ack_text
        )

        return operator_message, acknowledgment
