# backend/tests/test_mail_smtp.py

import smtplib
from typing import List

import pytest

from app.mail.client import MailAuthError, MailConnectionError, MailTransportError
from app.mail.config import MailSettings
from app.mail.schemas import RenderedMessage
from app.mail.smtp import SmtpMailSender, build_email_message


class FakeSMTP:
    """smtplib.SMTP の代わりに呼び出しを記録するダミー。"""

    def __init__(self, host, port, timeout=None, context=None, *, login_error=None, send_error=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.context = context
        self.calls: List[str] = []
        self.sent = []
        self._login_error = login_error
        self._send_error = send_error

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(f"login:{user}")
        if self._login_error:
            raise self._login_error

    def send_message(self, message):
        self.calls.append("send_message")
        if self._send_error:
            raise self._send_error
        self.sent.append(message)

    def quit(self):
        self.calls.append("quit")


def _settings(**overrides) -> MailSettings:
    values = dict(
        sender_email="noreply@example.com",
        sender_name="Recrutement",
        transport="smtp",
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="mailer",
        smtp_pass="secret",
    )
    values.update(overrides)
    return MailSettings(**values)


def _message(**overrides) -> RenderedMessage:
    values = dict(
        sender_address="noreply@example.com",
        sender_name="Recrutement",
        recipient_addresses=["operator@example.com"],
        subject="Nouvelle soumission du formulaire de contact: Sans objet",
        html_body="<p>hi</p>",
        text_body="hi",
        reply_to_address="a@b.com",
    )
    values.update(overrides)
    return RenderedMessage(**values)


def _factory(instances, **fake_kwargs):
    def factory(host, port, **kwargs):
        smtp = FakeSMTP(host, port, **kwargs, **fake_kwargs)
        instances.append(smtp)
        return smtp

    return factory


def test_build_email_message_multipart_with_reply_to():
    email_message = build_email_message(_message())

    assert email_message["From"] == "Recrutement <noreply@example.com>"
    assert email_message["To"] == "operator@example.com"
    assert email_message["Reply-To"] == "a@b.com"
    assert email_message["Message-ID"].endswith("@example.com>")
    assert email_message.is_multipart()
    assert "<p>hi</p>" in email_message.get_body(preferencelist=("html",)).get_content()
    assert email_message.get_body(preferencelist=("plain",)).get_content().strip() == "hi"


def test_build_email_message_html_only():
    email_message = build_email_message(_message(text_body=None, reply_to_address=None))

    assert not email_message.is_multipart()
    assert email_message.get_content_type() == "text/html"
    assert email_message["Reply-To"] is None


def test_send_with_starttls_and_login():
    instances = []
    sender = SmtpMailSender(_settings(), smtp_factory=_factory(instances))

    receipt = sender.send(_message())

    smtp = instances[0]
    assert (smtp.host, smtp.port) == ("smtp.example.com", 587)
    assert smtp.calls == ["starttls", "login:mailer", "send_message", "quit"]
    assert receipt.message_id == smtp.sent[0]["Message-ID"]


def test_send_implicit_tls_on_port_465():
    plain, implicit = [], []
    sender = SmtpMailSender(
        _settings(smtp_port=465),
        smtp_factory=_factory(plain),
        smtp_ssl_factory=_factory(implicit),
    )

    sender.send(_message())

    assert plain == []
    assert implicit[0].calls == ["login:mailer", "send_message", "quit"]
    assert implicit[0].context is not None


def test_send_without_credentials_skips_login():
    instances = []
    sender = SmtpMailSender(
        _settings(smtp_user=None, smtp_pass=None, smtp_use_tls=False),
        smtp_factory=_factory(instances),
    )

    sender.send(_message())

    assert instances[0].calls == ["send_message", "quit"]


def test_send_auth_failure_raises_auth_error_and_closes():
    instances = []
    error = smtplib.SMTPAuthenticationError(535, b"5.7.8 bad credentials")
    sender = SmtpMailSender(_settings(), smtp_factory=_factory(instances, login_error=error))

    with pytest.raises(MailAuthError) as exc_info:
        sender.send(_message())

    assert exc_info.value.status_code == 535
    assert instances[0].calls[-1] == "quit"


def test_send_rejected_recipient_raises_transport_error():
    instances = []
    error = smtplib.SMTPRecipientsRefused({"operator@example.com": (550, b"no such user")})
    sender = SmtpMailSender(_settings(), smtp_factory=_factory(instances, send_error=error))

    with pytest.raises(MailTransportError) as exc_info:
        sender.send(_message())

    assert not isinstance(exc_info.value, MailAuthError)
    assert instances[0].calls[-1] == "quit"


def test_send_connection_refused_raises_connection_error():
    def refusing_factory(host, port, **kwargs):
        raise ConnectionRefusedError("connection refused")

    sender = SmtpMailSender(_settings(), smtp_factory=refusing_factory)

    with pytest.raises(MailConnectionError):
        sender.send(_message())
