"""
Answer email sender.

Providers (``EMAIL_PROVIDER``):
  - console: development, the message is only logged;
  - smtp: aiosmtplib with SMTP_HOST / SMTP_PORT / SMTP_USER / SMTP_PASSWORD;
  - sendgrid: SendGrid v3 HTTP API with SENDGRID_API_KEY.

``EmailSender.send`` never raises: every outcome comes back as a SendResult.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
import requests
from jinja2 import Environment, select_autoescape
from markupsafe import Markup, escape

from mentordesk.core.config import Settings
from mentordesk.core.errors import NotificationError

log = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


@dataclass(frozen=True)
class AnswerEmail:
    to_email: str
    student_name: str
    mentor_name: str
    subject: str
    question: str
    answer: str
    mentor_subject: str


@dataclass(frozen=True)
class SendResult:
    success: bool
    message: str


def _nl2br(text: str) -> Markup:
    return Markup("<br>").join(escape(line) for line in (text or "").splitlines())


_env = Environment(autoescape=select_autoescape(default_for_string=True))
_env.filters["nl2br"] = _nl2br

_ANSWER_TEMPLATE = _env.from_string("""\
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1>Your question has been answered!</h1>
    <p>Hi {{ e.student_name }},</p>
    <p>{{ e.mentor_name }} has answered your question on <strong>{{ e.subject }}</strong>.</p>
    <p><strong>Mentor:</strong> {{ e.mentor_name }} ({{ e.mentor_subject }})</p>

    <h3>Your question:</h3>
    <blockquote>
      <p><strong>Subject:</strong> {{ e.subject }}</p>
      <p>{{ e.question | nl2br }}</p>
    </blockquote>

    <h3>Answer:</h3>
    <blockquote><p>{{ e.answer | nl2br }}</p></blockquote>

    <p style="font-size: 12px; color: #666;">This is an automated email. Please do not reply to this address.</p>
  </div>
</body>
</html>
""")


def render_answer_email(email: AnswerEmail) -> str:
    return _ANSWER_TEMPLATE.render(e=email)


def answer_email_subject(email: AnswerEmail) -> str:
    return f'Answer from {email.mentor_name} to your "{email.subject}" question'


class EmailSender:
    def __init__(self, cfg: Settings):
        self.provider = cfg.email_provider
        self.from_email = cfg.email_from
        self.reply_to = cfg.email_reply_to
        self.smtp_host = cfg.smtp_host
        self.smtp_port = cfg.smtp_port
        self.smtp_user = cfg.smtp_user
        self.smtp_password = cfg.smtp_password
        self.smtp_use_tls = cfg.smtp_use_tls
        self.sendgrid_api_key = cfg.sendgrid_api_key

    async def send(self, email: AnswerEmail) -> SendResult:
        required = (email.to_email, email.student_name, email.mentor_name, email.subject, email.answer)
        if not all(required):
            return SendResult(False, "Missing required email data")

        html = render_answer_email(email)
        subject = answer_email_subject(email)

        try:
            if self.provider == "console":
                # the address is student contact data; never logged
                log.info("email_console", extra={
                    "subject": subject,
                    "body_len": len(html),
                })
                return SendResult(True, "Email logged (development mode)")
            if self.provider == "smtp":
                await self._send_smtp(email.to_email, subject, html)
                return SendResult(True, "Email sent via SMTP")
            if self.provider == "sendgrid":
                await self._send_sendgrid(email.to_email, subject, html)
                return SendResult(True, "Email sent via SendGrid")
        except Exception as e:
            log.warning("email_send_failed", extra={"provider": self.provider, "error": str(e)})
            return SendResult(False, f"Email sending failed: {e}")

        log.warning("email_provider_unavailable", extra={"provider": self.provider})
        return SendResult(False, f"Email provider {self.provider} not available")

    async def _send_smtp(self, to_email: str, subject: str, html: str) -> None:
        if not self.smtp_host:
            raise NotificationError("SMTP_HOST is not configured")

        message = MIMEMultipart("alternative")
        message["From"] = self.from_email
        message["To"] = to_email
        message["Subject"] = subject
        if self.reply_to:
            message["Reply-To"] = self.reply_to
        message.attach(MIMEText(html, "html"))

        await aiosmtplib.send(
            message,
            hostname=self.smtp_host,
            port=self.smtp_port,
            username=self.smtp_user,
            password=self.smtp_password,
            start_tls=self.smtp_use_tls,
        )

    def _sendgrid_body(self, to_email: str, subject: str, html: str) -> dict:
        body: dict = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": {"email": self.from_email},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }
        if self.reply_to:
            body["reply_to"] = {"email": self.reply_to}
        return body

    async def _send_sendgrid(self, to_email: str, subject: str, html: str) -> None:
        if not self.sendgrid_api_key:
            raise NotificationError("SENDGRID_API_KEY is not configured")

        def _post() -> Optional[int]:
            r = requests.post(
                SENDGRID_URL,
                json=self._sendgrid_body(to_email, subject, html),
                headers={"Authorization": f"Bearer {self.sendgrid_api_key}"},
                timeout=10,
            )
            r.raise_for_status()
            return r.status_code

        # requests is blocking; keep the event loop free
        loop = asyncio.get_running_loop()
        status_code = await loop.run_in_executor(None, _post)
        log.info("email_sendgrid_sent", extra={"status": status_code})
