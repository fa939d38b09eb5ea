from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from html import escape
import logging
import smtplib
from email.message import EmailMessage

import boto3
import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

KNOWN_PROVIDERS = ("resend", "smtp", "ses")


@dataclass
class MailSendResult:
    provider: str
    provider_message_id: str | None = None


@dataclass
class OutgoingMail:
    to_email: str
    subject: str
    text_body: str
    html_body: str | None = None


def _provider_order() -> list[str]:
    raw = (settings.mail_provider_order or "").strip()
    order: list[str] = []
    for candidate in raw.split(","):
        provider = candidate.strip().lower()
        if provider in KNOWN_PROVIDERS and provider not in order:
            order.append(provider)
    return order or list(KNOWN_PROVIDERS)


def _provider_is_configured(provider: str) -> bool:
    if provider == "smtp":
        return bool(settings.smtp_host and settings.smtp_port)
    if provider == "resend":
        return bool(settings.resend_api_key and settings.resend_api_base)
    if provider == "ses":
        return bool(settings.ses_region)
    return False


def mail_is_configured() -> bool:
    if not settings.mail_enabled or not settings.mail_from:
        return False
    return any(_provider_is_configured(provider) for provider in _provider_order())


def _send_via_smtp(mail: OutgoingMail) -> MailSendResult:
    message = EmailMessage()
    message["From"] = settings.mail_from
    message["To"] = mail.to_email
    message["Subject"] = mail.subject
    message.set_content(mail.text_body)
    if mail.html_body:
        message.add_alternative(mail.html_body, subtype="html")

    host = settings.smtp_host or ""
    port = int(settings.smtp_port)
    timeout = int(settings.smtp_timeout_seconds)
    client_cls = smtplib.SMTP_SSL if settings.smtp_use_ssl else smtplib.SMTP
    with client_cls(host=host, port=port, timeout=timeout) as client:
        if settings.smtp_use_tls and not settings.smtp_use_ssl:
            client.ehlo()
            client.starttls()
            client.ehlo()
        if settings.smtp_username:
            client.login(settings.smtp_username, settings.smtp_password or "")
        client.send_message(message)
    return MailSendResult(provider="smtp")


def _send_via_resend(mail: OutgoingMail) -> MailSendResult:
    payload: dict = {
        "from": settings.mail_from,
        "to": [mail.to_email],
        "subject": mail.subject,
        "text": mail.text_body,
    }
    if mail.html_body:
        payload["html"] = mail.html_body
    url = f"{settings.resend_api_base.rstrip('/')}/emails"
    with httpx.Client(timeout=float(settings.smtp_timeout_seconds)) as client:
        response = client.post(
            url,
            headers={"Authorization": f"Bearer {settings.resend_api_key}"},
            json=payload,
        )
    if response.status_code >= 400:
        raise RuntimeError(f"Resend request failed ({response.status_code}): {response.text[:300]}")
    data = response.json() if response.text else {}
    return MailSendResult(provider="resend", provider_message_id=str(data.get("id") or ""))


def _send_via_ses(mail: OutgoingMail) -> MailSendResult:
    client_kwargs: dict = {"region_name": settings.ses_region}
    if settings.ses_access_key_id and settings.ses_secret_access_key:
        client_kwargs["aws_access_key_id"] = settings.ses_access_key_id
        client_kwargs["aws_secret_access_key"] = settings.ses_secret_access_key
        if settings.ses_session_token:
            client_kwargs["aws_session_token"] = settings.ses_session_token
    client = boto3.client("ses", **client_kwargs)
    body = {"Text": {"Data": mail.text_body, "Charset": "UTF-8"}}
    if mail.html_body:
        body["Html"] = {"Data": mail.html_body, "Charset": "UTF-8"}
    send_args = {
        "Source": settings.mail_from,
        "Destination": {"ToAddresses": [mail.to_email]},
        "Message": {"Subject": {"Data": mail.subject, "Charset": "UTF-8"}, "Body": body},
    }
    if settings.ses_configuration_set:
        send_args["ConfigurationSetName"] = settings.ses_configuration_set
    response = client.send_email(**send_args)
    return MailSendResult(provider="ses", provider_message_id=str(response.get("MessageId") or ""))


_SENDERS = {
    "smtp": _send_via_smtp,
    "resend": _send_via_resend,
    "ses": _send_via_ses,
}


def send_email(
    *,
    to_email: str,
    subject: str,
    text_body: str,
    html_body: str | None = None,
) -> MailSendResult:
    if not settings.mail_enabled:
        raise RuntimeError("Email delivery is disabled")
    if not settings.mail_from:
        raise RuntimeError("PACK_MAIL_FROM is not configured")

    mail = OutgoingMail(to_email=to_email, subject=subject, text_body=text_body, html_body=html_body)
    errors: list[str] = []
    for provider in _provider_order():
        if not _provider_is_configured(provider):
            continue
        try:
            return _SENDERS[provider](mail)
        except Exception as exc:
            logger.warning("Email provider %s failed: %s", provider, exc)
            errors.append(f"{provider}: {exc}")

    if not errors:
        raise RuntimeError("No email provider is configured (resend/smtp/ses)")
    raise RuntimeError("All configured email providers failed: " + " | ".join(errors[:3]))


def send_signup_rollback_alert(
    *,
    error: str,
    details: str,
    user_id: int | None,
    context: str,
) -> MailSendResult:
    """Tell the operators that a half-created account could not be removed."""
    if not settings.error_notification_email:
        raise RuntimeError("PACK_ERROR_NOTIFICATION_EMAIL is not configured")

    subject = "Pack Signup Rollback error"
    timestamp = datetime.utcnow().isoformat()
    fields = [
        ("Error", error or "N/A"),
        ("Context", context or "N/A"),
        ("User ID", str(user_id) if user_id is not None else "N/A"),
        ("Details", details or "N/A"),
        ("Timestamp", timestamp),
    ]
    text = subject + "\n\n" + "\n".join(f"{label}: {value}" for label, value in fields)
    text += "\n\nAutomated email from Pack\n"
    html = (
        f"<h2>{subject}</h2>"
        + "".join(f"<p><strong>{label}:</strong> {escape(value)}</p>" for label, value in fields)
        + "<hr><p><em>Automated email from Pack</em></p>"
    )
    return send_email(
        to_email=settings.error_notification_email,
        subject=subject,
        text_body=text,
        html_body=html,
    )
