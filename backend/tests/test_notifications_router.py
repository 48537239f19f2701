# backend/tests/test_notifications_router.py

from typing import Iterable, List

import pytest
from fastapi.testclient import TestClient

from app.mail.client import MailAPIError
from app.mail.config import get_mail_settings
from app.mail.schemas import DeliveryReceipt, RenderedMessage
from app.main import create_app
from app.notifications.factory import build_dispatcher, get_notification_dispatcher
from app.notifications.schemas import DecisionStatus
from app.notifications.templates import DECISION_SUBJECTS


class RecordingSender:
    """送信内容を記録する Sender。fail_on に含まれる回目（1 始まり）は失敗させる。"""

    def __init__(self, fail_on: Iterable[int] = ()) -> None:
        self.messages: List[RenderedMessage] = []
        self._fail_on = set(fail_on)

    def send(self, message: RenderedMessage) -> DeliveryReceipt:
        self.messages.append(message)
        if len(self.messages) in self._fail_on:
            raise MailAPIError("Brevo API error 401 Unauthorized: Key not found", status_code=401)
        return DeliveryReceipt(
            message_id=f"<msg-{len(self.messages)}@test>",
            provider_response={"messageId": f"<msg-{len(self.messages)}@test>"},
        )


def create_test_client(sender: RecordingSender) -> TestClient:
    app = create_app()
    settings = get_mail_settings()
    app.dependency_overrides[get_notification_dispatcher] = lambda: build_dispatcher(
        settings, sender=sender
    )
    return TestClient(app)


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def client(sender) -> TestClient:
    return create_test_client(sender)


# ---- /send-candidature ------------------------------------------------------


def test_send_candidature_success(client, sender):
    resp = client.get("/send-candidature/valid@x.com/ABC123")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["candidatureId"] == "ABC123"
    assert body["recipient"] == "valid@x.com"
    assert body["messageId"] == "<msg-1@test>"
    assert body["message"] == "Candidature confirmation email sent successfully"
    assert len(sender.messages) == 1
    assert sender.messages[0].recipient_addresses == ["valid@x.com"]


def test_send_candidature_blank_id_is_rejected(client, sender):
    resp = client.get("/send-candidature/valid@x.com/%20")

    assert resp.status_code == 400
    assert resp.json()["error"] == "Candidature ID is required"
    assert sender.messages == []


def test_send_candidature_transport_failure_returns_500():
    sender = RecordingSender(fail_on=[1])
    client = create_test_client(sender)

    resp = client.get("/send-candidature/valid@x.com/ABC123")

    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert "Key not found" in body["error"]


# ---- invalid email on every endpoint ---------------------------------------

INVALID_EMAILS = ["not-an-email", "a@b", "a%20b@x.com", "@x.com"]


@pytest.mark.parametrize("email", INVALID_EMAILS)
def test_get_endpoints_reject_invalid_email_without_sending(client, sender, email):
    urls = [
        f"/send-candidature/{email}/ABC123",
        f"/send-interview/{email}?link=https://example.com/room",
        f"/send-decision/{email}/ID1?status=accepted",
    ]

    for url in urls:
        resp = client.get(url)
        assert resp.status_code == 400, url
        assert resp.json()["error"] == "Invalid email format"

    assert sender.messages == []


@pytest.mark.parametrize("email", ["not-an-email", "a@b", "a b@x.com", "@x.com", " a@b.com "])
def test_contact_rejects_invalid_email_without_sending(client, sender, email):
    resp = client.post("/send-contact", json={"name": "A", "email": email, "message": "hi"})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid email format"}
    assert sender.messages == []


# ---- /send-interview --------------------------------------------------------


def test_send_interview_invalid_link(client, sender):
    resp = client.get("/send-interview/valid@x.com", params={"link": "not-a-url"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "A valid interview link is required"
    assert sender.messages == []


def test_send_interview_missing_link(client, sender):
    resp = client.get("/send-interview/valid@x.com")

    assert resp.status_code == 400
    assert sender.messages == []


def test_send_interview_success_echoes_link(client, sender):
    link = "https://example.com/room"
    resp = client.get("/send-interview/valid@x.com", params={"link": link})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["interviewLink"] == link
    assert body["recipient"] == "valid@x.com"
    assert body["messageId"] == "<msg-1@test>"
    assert link in sender.messages[0].html_body


# ---- /send-decision ---------------------------------------------------------


def test_send_decision_invalid_status(client, sender):
    resp = client.get("/send-decision/valid@x.com/ID1", params={"status": "maybe"})

    assert resp.status_code == 400
    assert "accepted" in resp.json()["error"]
    assert sender.messages == []


def test_send_decision_missing_status(client, sender):
    resp = client.get("/send-decision/valid@x.com/ID1")

    assert resp.status_code == 400
    assert sender.messages == []


def test_send_decision_normalizes_status_case(client, sender):
    accepted = client.get("/send-decision/valid@x.com/ID1", params={"status": "ACCEPTED"})
    rejected = client.get("/send-decision/valid@x.com/ID1", params={"status": "rejected"})

    assert accepted.status_code == 200
    assert rejected.status_code == 200
    assert accepted.json()["messageId"] == "<msg-1@test>"
    assert accepted.json()["decision"] == "accepted"

    accepted_subject, rejected_subject = (m.subject for m in sender.messages)
    assert accepted_subject == DECISION_SUBJECTS[DecisionStatus.ACCEPTED]
    assert rejected_subject == DECISION_SUBJECTS[DecisionStatus.REJECTED]
    assert accepted_subject != rejected_subject


# ---- /send-contact ----------------------------------------------------------


def test_send_contact_sends_two_emails(client, sender):
    resp = client.post("/send-contact", json={"name": "A", "email": "a@b.com", "message": "hi"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Contact form submitted successfully. Confirmation email sent."
    assert body["data"]["email"] == "a@b.com"
    assert body["data"]["name"] == "A"
    assert body["data"]["timestamp"].endswith("Z")

    assert len(sender.messages) == 2
    operator, acknowledgment = sender.messages
    assert operator.recipient_addresses == ["operator@example.com"]
    assert operator.reply_to_address == "a@b.com"
    assert acknowledgment.recipient_addresses == ["a@b.com"]


def test_send_contact_operator_failure_sends_once():
    sender = RecordingSender(fail_on=[1])
    client = create_test_client(sender)

    resp = client.post("/send-contact", json={"name": "A", "email": "a@b.com", "message": "hi"})

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "error": "Failed to send message. Please try again later.",
        "delivery": "none_sent",
    }
    assert len(sender.messages) == 1


def test_send_contact_acknowledgment_failure_reports_operator_only():
    sender = RecordingSender(fail_on=[2])
    client = create_test_client(sender)

    resp = client.post("/send-contact", json={"name": "A", "email": "a@b.com", "message": "hi"})

    assert resp.status_code == 500
    assert resp.json()["delivery"] == "operator_only"
    assert len(sender.messages) == 2


def test_send_contact_missing_fields(client, sender):
    resp = client.post("/send-contact", json={"name": "A", "email": "a@b.com"})

    assert resp.status_code == 400
    assert resp.json() == {
        "success": False,
        "error": "Name, email, and message are required fields",
    }
    assert sender.messages == []


def test_send_contact_malformed_body(client, sender):
    resp = client.post(
        "/send-contact",
        content=b"not json",
        headers={"content-type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert sender.messages == []


# ---- configuration ----------------------------------------------------------


def test_missing_sender_configuration_returns_500(monkeypatch):
    """
    EMAIL_FROM が未設定のまま送信しようとした場合は 500（例外でクラッシュしない）。
    """
    monkeypatch.delenv("EMAIL_FROM", raising=False)
    client = TestClient(create_app())

    resp = client.get("/send-candidature/valid@x.com/ABC123")

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Email service is not configured"}


@pytest.mark.parametrize(
    "url",
    [
        "/send-candidature/not-an-email/ABC123",
        "/send-interview/not-an-email?link=https://example.com/room",
        "/send-decision/not-an-email/ID1?status=accepted",
    ],
)
def test_invalid_input_is_rejected_before_configuration_is_read(monkeypatch, url):
    """
    EMAIL_FROM が未設定でも、入力エラーは 500 ではなく 400 で返す。
    """
    monkeypatch.delenv("EMAIL_FROM", raising=False)
    client = TestClient(create_app())

    resp = client.get(url)

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid email format"}


def test_invalid_contact_is_rejected_before_configuration_is_read(monkeypatch):
    monkeypatch.delenv("EMAIL_FROM", raising=False)
    client = TestClient(create_app())

    missing = client.post("/send-contact", json={"name": "A", "email": "a@b.com"})
    wrong_type = client.post("/send-contact", json=["not", "an", "object"])

    assert missing.status_code == 400
    assert missing.json()["error"] == "Name, email, and message are required fields"
    assert wrong_type.status_code == 400
    assert wrong_type.json()["error"] == "Invalid request body"


def test_health_check():
    client = TestClient(create_app())

    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
