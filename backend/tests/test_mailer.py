import pytest

from app.services import mailer
from app.services.mailer import MailSendResult


@pytest.fixture
def mail_settings(monkeypatch):
    monkeypatch.setattr(mailer.settings, "mail_enabled", True)
    monkeypatch.setattr(mailer.settings, "mail_from", "Pack Support <support@packapp.co.uk>")
    monkeypatch.setattr(mailer.settings, "mail_provider_order", "resend,smtp,ses")
    monkeypatch.setattr(mailer.settings, "resend_api_key", "re_test")
    monkeypatch.setattr(mailer.settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(mailer.settings, "ses_region", None)
    monkeypatch.setattr(mailer.settings, "error_notification_email", "ops@example.com")
    return mailer.settings


def test_provider_order_ignores_unknown_entries(monkeypatch):
    monkeypatch.setattr(mailer.settings, "mail_provider_order", "pigeon, SMTP ,smtp,ses")
    assert mailer._provider_order() == ["smtp", "ses"]

    monkeypatch.setattr(mailer.settings, "mail_provider_order", "")
    assert mailer._provider_order() == ["resend", "smtp", "ses"]


def test_send_email_falls_back_to_next_provider(mail_settings, monkeypatch):
    attempts = []

    def _failing(mail):
        attempts.append("resend")
        raise RuntimeError("resend unavailable")

    def _smtp(mail):
        attempts.append("smtp")
        return MailSendResult(provider="smtp")

    monkeypatch.setitem(mailer._SENDERS, "resend", _failing)
    monkeypatch.setitem(mailer._SENDERS, "smtp", _smtp)

    result = mailer.send_email(to_email="a@example.com", subject="Hi", text_body="Hello")

    assert result.provider == "smtp"
    assert attempts == ["resend", "smtp"]


def test_send_email_reports_every_failure(mail_settings, monkeypatch):
    def _failing(mail):
        raise RuntimeError("down")

    monkeypatch.setitem(mailer._SENDERS, "resend", _failing)
    monkeypatch.setitem(mailer._SENDERS, "smtp", _failing)

    with pytest.raises(RuntimeError, match="All configured email providers failed"):
        mailer.send_email(to_email="a@example.com", subject="Hi", text_body="Hello")


def test_send_email_requires_mail_enabled(monkeypatch):
    monkeypatch.setattr(mailer.settings, "mail_enabled", False)
    with pytest.raises(RuntimeError, match="disabled"):
        mailer.send_email(to_email="a@example.com", subject="Hi", text_body="Hello")


def test_rollback_alert_content(mail_settings, monkeypatch):
    sent = []
    monkeypatch.setattr(mailer, "send_email", lambda **kwargs: sent.append(kwargs) or MailSendResult(provider="smtp"))

    mailer.send_signup_rollback_alert(
        error="delete failed",
        details="<script>",
        user_id=7,
        context="User row could not be removed",
    )

    assert len(sent) == 1
    assert sent[0]["to_email"] == "ops@example.com"
    assert sent[0]["subject"] == "Pack Signup Rollback error"
    assert "User ID: 7" in sent[0]["text_body"]
    assert "&lt;script&gt;" in sent[0]["html_body"]


def test_rollback_alert_requires_recipient(monkeypatch):
    monkeypatch.setattr(mailer.settings, "error_notification_email", None)
    with pytest.raises(RuntimeError):
        mailer.send_signup_rollback_alert(error="x", details="y", user_id=None, context="z")
