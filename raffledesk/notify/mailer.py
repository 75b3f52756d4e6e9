import os
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class SmtpMailer:
    """Send plain-text mail through an SMTP relay configured from the environment."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: Optional[bool] = None,
        from_addr: Optional[str] = None,
        from_name: Optional[str] = None,
        timeout: int = 30,
    ):
        load_dotenv()
        self.host = host or os.getenv("SMTP_HOST")
        if not self.host:
            raise ValueError("Environment variable 'SMTP_HOST' is not set")
        self.use_ssl = _env_flag("SMTP_USE_SSL") if use_ssl is None else use_ssl
        self.port = port or int(os.getenv("SMTP_PORT", "465" if self.use_ssl else "587"))
        self.username = username or os.getenv("SMTP_USERNAME")
        self.password = password or os.getenv("SMTP_PASSWORD")
        self.from_addr = from_addr or os.getenv("EMAIL_FROM") or self.username
        if not self.from_addr:
            raise ValueError("Environment variable 'EMAIL_FROM' is not set")
        self.from_name = from_name or os.getenv("EMAIL_FROM_NAME")
        self.timeout = timeout

    def build_message(self, to_addr: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = (
            f"{self.from_name} <{self.from_addr}>" if self.from_name else self.from_addr
        )
        msg["To"] = to_addr
        msg.set_content(body)
        return msg

    def send(self, to_addr: str, subject: str, body: str) -> None:
        """Deliver a message to ``to_addr``.

        Raises
        ------
        smtplib.SMTPException, OSError
            If the relay cannot be reached or refuses the message.
        """
        msg = self.build_message(to_addr, subject, body)
        if self.use_ssl:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as smtp:
                self._deliver(smtp, msg)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                self._deliver(smtp, msg)
        logger.debug(f"Email notification sent to {to_addr}")

    def _deliver(self, smtp: smtplib.SMTP, msg: EmailMessage) -> None:
        if self.username and self.password:
            smtp.login(self.username, self.password)
        smtp.send_message(msg)
