"""Magic link delivery.

Sends sign-in emails over SMTP. When SMTP is not configured the link is
only logged, which is the normal mode for development and tests.
"""

import asyncio
import smtplib
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import structlog

from procurement.domain.state_machines import Role
from procurement.infrastructure.config import Settings

logger = structlog.get_logger()

_SUBJECT = "Sign in to the Procurement System"

_HTML_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
    <h2 style="color: #1e293b;">Procurement System</h2>
    <p>Click the button below to sign in as <strong>{role}</strong>.</p>
    <p>
        <a href="{link}" style="background: #2563eb; color: white; padding: 12px 24px;
                                border-radius: 6px; text-decoration: none;">Sign in</a>
    </p>
    <p style="color: #64748b; font-size: 13px;">
        This link expires in {minutes} minutes. If you did not request it, ignore this email.
    </p>
</div>
"""

_TEXT_TEMPLATE = (
    "Sign in to the Procurement System as {role}:\n\n{link}\n\n"
    "This link expires in {minutes} minutes."
)


class Notifier(ABC):
    """Delivers magic links to users."""

    @abstractmethod
    async def send(self, email: str, link: str, role: Role) -> None:
        """Deliver a magic link.

        Raises:
            Exception: Any transport failure; callers decide whether it is fatal.
        """


class LoggingNotifier(Notifier):
    """Log-only notifier for environments without SMTP."""

    async def send(self, email: str, link: str, role: Role) -> None:
        logger.info("Magic link generated (email delivery disabled)", email=email, role=role.value)


class SmtpNotifier(Notifier):
    """Sends magic links through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        use_tls: bool = True,
        link_ttl_minutes: int = 15,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.link_ttl_minutes = link_ttl_minutes

    def build_message(self, email: str, link: str, role: Role) -> MIMEMultipart:
        values = {"role": role.value, "link": link, "minutes": self.link_ttl_minutes}
        msg = MIMEMultipart("alternative")
        msg["Subject"] = _SUBJECT
        msg["From"] = self.sender
        msg["To"] = email
        msg.attach(MIMEText(_TEXT_TEMPLATE.format(**values), "plain"))
        msg.attach(MIMEText(_HTML_TEMPLATE.format(**values), "html"))
        return msg

    async def send(self, email: str, link: str, role: Role) -> None:
        msg = self.build_message(email, link, role)
        await asyncio.to_thread(self._send, msg)
        logger.info("Magic link email sent", email=email, role=role.value)

    def _send(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            smtp.login(self.username, self.password)
            smtp.send_message(msg)


def build_notifier(settings: Settings) -> Notifier:
    """Pick the SMTP notifier when fully configured, else log only."""
    if not settings.smtp_configured:
        return LoggingNotifier()
    return SmtpNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.email_from,
        use_tls=settings.smtp_use_tls,
        link_ttl_minutes=settings.magic_link_ttl_seconds // 60,
    )
