# marketplace/services/email_client.py
import smtplib
from email.message import EmailMessage

from marketplace.utils.settings import MAIL_FROM, SMTP_HOST, SMTP_PASSWORD, SMTP_PORT, SMTP_USER
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class EmailClient:
    """Bez SMTP_HOST tylko loguje wiadomosc (dev)."""

    def __init__(self, host: str | None = None, port: int | None = None):
        self.host = SMTP_HOST if host is None else host
        self.port = port or SMTP_PORT

    def send(self, to: str, subject: str, text: str, html: str | None = None) -> None:
        if not self.host:
            logger.info(f"[EMAIL] to={to} subject={subject!r}\n{text}")
            return

        msg = EmailMessage()
        msg["From"] = MAIL_FROM
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text)
        if html:
            msg.add_alternative(html, subtype="html")

        with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
            smtp.starttls()
            if SMTP_USER:
                smtp.login(SMTP_USER, SMTP_PASSWORD)
            smtp.send_message(msg)

        logger.info(f"Email {subject!r} sent to {to}")
