"""
Security notifications sent by email.

Providers follow an adapter pattern: DevEmailProvider only logs the message,
SMTPEmailProvider delivers it. build_email_provider picks one from Settings.
"""
import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional
from event_manager.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class EmailMessage:
    to: str
    subject: str
    html_body: str
    text_body: Optional[str] = None
    from_address: Optional[str] = None


class EmailProvider(ABC):

    @abstractmethod
    def send(self, message: EmailMessage) -> bool:
        """
        Send an email

        Returns:
            True if sent successfully, False otherwise
        """


class DevEmailProvider(EmailProvider):
    """Logs emails instead of sending them"""

    def send(self, message: EmailMessage) -> bool:
        logger.info(
            f"Email (not sent) to={message.to} subject={message.subject!r}\n"
            f"{message.text_body or message.html_body}"
        )
        return True


class SMTPEmailProvider(EmailProvider):

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        from_address: str,
        use_ssl: bool = True
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_address = from_address
        self.use_ssl = use_ssl

    def send(self, message: EmailMessage) -> bool:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = message.from_address or self.from_address
        msg["To"] = message.to
        if message.text_body:
            msg.attach(MIMEText(message.text_body, "plain"))
        msg.attach(MIMEText(message.html_body, "html"))

        try:
            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.host, self.port)
            else:
                server = smtplib.SMTP(self.host, self.port)
                server.starttls()
            with server:
                server.login(self.user, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {message.to}: {e}", exc_info=True)
            return False

        logger.info(f"Email sent to {message.to}: {message.subject}")
        return True


def build_email_provider(settings: Settings) -> EmailProvider:
    """SMTP when host and credentials are configured, log-only otherwise"""
    if settings.smtp_configured():
        return SMTPEmailProvider(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            from_address=settings.SMTP_FROM_ADDRESS or settings.SMTP_USER,
            use_ssl=settings.SMTP_USE_SSL,
        )
    logger.warning("SMTP is not configured; security alerts will only be logged")
    return DevEmailProvider()


def build_security_alert(email: str, user_agent: str, ip: str, when: Optional[datetime] = None) -> EmailMessage:
    when = when or datetime.now(timezone.utc)
    timestamp = when.strftime("%Y-%m-%d %H:%M:%S %Z")
    text_body = (
        "New login detected:\n"
        f"IP: {ip}\n"
        f"Device: {user_agent}\n"
        f"Time: {timestamp}\n"
    )
    html_body = (
        "<h2>New login detected</h2>"
        f"<p><strong>IP:</strong> {ip}</p>"
        f"<p><strong>Device:</strong> {user_agent}</p>"
        f"<p><strong>Time:</strong> {timestamp}</p>"
        "<p>If this wasn't you, please secure your account immediately.</p>"
    )
    return EmailMessage(
        to=email,
        subject="New device or IP login detected",
        html_body=html_body,
        text_body=text_body,
    )


def send_security_alert(provider: EmailProvider, email: str, user_agent: str, ip: str) -> bool:
    """
    Notify a user about a login from an unseen (ip, user-agent) pair.

    Runs as a background task after the login response; a delivery failure
    is logged and reported through the return value only.
    """
    message = build_security_alert(email, user_agent, ip)
    try:
        sent = provider.send(message)
    except Exception:
        logger.exception(f"Security alert provider failed for {email}")
        return False
    if not sent:
        logger.warning(f"Could not send security alert to {email}")
    return sent
