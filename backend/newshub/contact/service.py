import html
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Protocol

from starlette.concurrency import run_in_threadpool

from ..config import Settings, SettingsDep
from ..exceptions import AppError
from .schemas import ContactRequest

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    def send(self, message: EmailMessage) -> None: ...


class SmtpMailTransport:
    """Blocking SMTP client configured from ``Settings``."""

    def __init__(self, settings: Settings):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS
        self.timeout = settings.SMTP_TIMEOUT

    def send(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.user and self.password:
                smtp.login(self.user, self.password)
            smtp.send_message(message)


def get_mail_transport(settings: SettingsDep) -> MailTransport:
    return SmtpMailTransport(settings)


def build_contact_message(data: ContactRequest, settings: Settings) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = f"[Contact] {data.subject}"
    message["From"] = formataddr((data.name, settings.SMTP_USER or settings.ADMIN_EMAIL))
    message["To"] = settings.ADMIN_EMAIL
    message["Reply-To"] = formataddr((data.name, data.email))
    message.set_content(f"Name: {data.name}\nEmail: {data.email}\n\nMessage:\n{data.message}")

    body = html.escape(data.message).replace("\n", "<br/>")
    message.add_alternative(
        f"<p><strong>Name:</strong> {html.escape(data.name)}</p>"
        f"<p><strong>Email:</strong> {html.escape(data.email)}</p>"
        f"<p>{body}</p>",
        subtype="html",
    )
    return message


async def send_contact_message(transport: MailTransport, data: ContactRequest, settings: Settings) -> None:
    try:
        message = build_contact_message(data, settings)
        await run_in_threadpool(transport.send, message)
    except (smtplib.SMTPException, OSError, ValueError) as e:
        logger.error(f"Failed to send contact message from {data.email}: {e}")
        raise AppError("Failed to send message")
    logger.info(f"Contact message from {data.email} forwarded to {settings.ADMIN_EMAIL}")
