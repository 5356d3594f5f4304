"""Outbound email: verification messages and contact-form feedback."""
from __future__ import annotations

import logging
from email.message import EmailMessage
from email.utils import formataddr
from functools import lru_cache

import aiosmtplib

from bloggy.core.errors import GENERIC_FAILURE_TEXT, DependencyFailedError
from bloggy.core.settings import Settings, settings

logger = logging.getLogger(__name__)


class Mailer:
    """Fire-and-forget SMTP sender.

    :meth:`send` never raises for transport problems; it reports success as a
    boolean so callers decide whether a failed message is fatal.
    """

    def __init__(
        self,
        *,
        host: str | None,
        port: int,
        username: str | None,
        password: str | None,
        use_tls: bool = True,
        sender_name: str = "BLOGGY",
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.sender_name = sender_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls, config: Settings) -> Mailer:
        """Build a mailer from application settings."""
        return cls(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_username,
            password=config.smtp_password,
            use_tls=config.smtp_use_tls,
            sender_name=config.mail_sender_name,
            timeout=config.smtp_timeout_seconds,
        )

    @property
    def configured(self) -> bool:
        """Return True when host and credentials are available."""
        return bool(self.host and self.username and self.password)

    @property
    def default_sender(self) -> str:
        """Return the ``From`` header used when none is given."""
        return formataddr((self.sender_name, self.username or ""))

    def build_message(
        self,
        to: str,
        subject: str,
        body: str,
        *,
        sender: str | None = None,
        reply_to: str | None = None,
    ) -> EmailMessage:
        """Assemble a plain-text message."""
        message = EmailMessage()
        message["From"] = sender or self.default_sender
        message["To"] = to
        message["Subject"] = subject
        if reply_to:
            message["Reply-To"] = reply_to
        message.set_content(body)
        return message

    async def send(
        self,
        to: str,
        subject: str,
        body: str,
        *,
        sender: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        """Send a message and return whether the SMTP server accepted it."""
        if not self.configured:
            logger.warning("Email not sent to %s: SMTP is not configured", to)
            return False

        message = self.build_message(to, subject, body, sender=sender, reply_to=reply_to)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                start_tls=self.use_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.warning("Failed to send email %r to %s: %s", subject, to, exc)
            return False

        logger.info("Email %r sent to %s", subject, to)
        return True


@lru_cache(maxsize=1)
def get_mailer() -> Mailer:
    """Return the process-wide mailer built from settings."""
    return Mailer.from_settings(settings)


def verification_email(handle: str, verify_url: str, ttl_minutes: int) -> tuple[str, str]:
    """Return the subject and body of the account verification email."""
    hours = ttl_minutes / 60
    if ttl_minutes % 60 == 0:
        lifetime = "one hour" if hours == 1 else f"{int(hours)} hours"
    else:
        lifetime = f"{ttl_minutes} minutes"
    subject = "Verify Your Email for BLOGGY"
    body = (
        f"Hello {handle},\n\n"
        f"Please verify your account by clicking the link:\n{verify_url}\n\n"
        f"This link will expire in {lifetime}.\n"
    )
    return subject, body


async def send_feedback(
    mailer: Mailer,
    *,
    admin_email: str | None,
    name: str,
    email: str,
    message: str,
) -> None:
    """Forward contact-form feedback to the admin and acknowledge the sender.

    The admin copy is required; the acknowledgement is best effort.

    Raises:
        DependencyFailedError: If email is not configured or the admin copy fails.
    """
    if not mailer.configured or not admin_email:
        logger.error("Contact form used but email service is not configured")
        raise DependencyFailedError("Server error: Email service not configured.")

    delivered = await mailer.send(
        admin_email,
        f"New Feedback from {name} via BLOGGY",
        f"Name: {name}\nEmail: {email}\n\nMessage:\n{message}",
        reply_to=formataddr((name, email)),
    )
    if not delivered:
        raise DependencyFailedError(GENERIC_FAILURE_TEXT)

    acknowledged = await mailer.send(
        email,
        "We have received your feedback!",
        (
            f"Hi {name},\n\n"
            "Thank you for contacting us. We have received your message and will "
            "get back to you shortly.\n\nBest Regards,\nThe BLOGGY Team"
        ),
    )
    if not acknowledged:
        logger.warning("Failed to send acknowledgement email to %s", email)
