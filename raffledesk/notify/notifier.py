"""Winner notification over SMS and email."""

from __future__ import annotations

import logging
import os
import smtplib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Protocol

import requests
from dotenv import load_dotenv

if TYPE_CHECKING:
    from ..models import Prize, RaffleEntry
    from .clearstream import ClearstreamClient
    from .mailer import SmtpMailer

logger = logging.getLogger(__name__)

DEFAULT_ORGANIZATION = "Raffle"
DEFAULT_CLAIM_LOCATION = "the prize table"


@dataclass
class NotificationReport:
    """Per-channel outcome of a notification attempt."""

    sms_ok: bool = False
    email_ok: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.sms_ok or self.email_ok

    @property
    def summary(self) -> str:
        if self.sms_ok and self.email_ok:
            return "Winner notified successfully via SMS and email"
        if self.sms_ok:
            return "Winner notified successfully via SMS only"
        if self.email_ok:
            return "Winner notified successfully via email only"
        return "All notification methods failed"

    def to_json(self) -> dict:
        return {
            "sms": "sent" if self.sms_ok else "failed",
            "email": "sent" if self.email_ok else "failed",
            "errors": list(self.errors),
        }


class WinnerNotifier(Protocol):
    def notify(
        self, entry: "RaffleEntry", prize: Optional["Prize"]
    ) -> NotificationReport: ...


@dataclass(frozen=True)
class WinnerMessage:
    subject: str
    body: str


def format_winner_message(
    entry: "RaffleEntry",
    prize: Optional["Prize"],
    *,
    organization: str = DEFAULT_ORGANIZATION,
    claim_location: str = DEFAULT_CLAIM_LOCATION,
) -> WinnerMessage:
    prize_text = f" for the {prize.name}" if prize is not None else ""
    subject = f"{organization} Raffle"
    body = (
        f"Congratulations {entry.first_name}! You've been selected as a winner{prize_text}! "
        f"Visit {claim_location} to claim your prize."
    )
    return WinnerMessage(subject=subject, body=body)


class Notifier:
    """Send the winner message over every configured channel.

    Channels are independent: a failing SMS does not prevent the email from
    being sent. Channel errors are collected in the report and never raised.
    """

    def __init__(
        self,
        sms_client: Optional["ClearstreamClient"] = None,
        mailer: Optional["SmtpMailer"] = None,
        *,
        organization: Optional[str] = None,
        claim_location: Optional[str] = None,
    ) -> None:
        load_dotenv()
        self.sms_client = sms_client
        self.mailer = mailer
        self.organization = (
            organization or os.getenv("RAFFLE_ORGANIZATION") or DEFAULT_ORGANIZATION
        )
        self.claim_location = (
            claim_location
            or os.getenv("RAFFLE_CLAIM_LOCATION")
            or DEFAULT_CLAIM_LOCATION
        )

    @classmethod
    def from_env(cls) -> "Notifier":
        """Build a notifier with whichever channels the environment configures."""

        from .clearstream import ClearstreamClient
        from .mailer import SmtpMailer

        sms_client: Optional[ClearstreamClient] = None
        mailer: Optional[SmtpMailer] = None
        try:
            sms_client = ClearstreamClient()
        except ValueError as exc:
            logger.warning(f"SMS channel disabled: {exc}")
        try:
            mailer = SmtpMailer()
        except ValueError as exc:
            logger.warning(f"Email channel disabled: {exc}")
        return cls(sms_client, mailer)

    def notify(
        self, entry: "RaffleEntry", prize: Optional["Prize"]
    ) -> NotificationReport:
        message = format_winner_message(
            entry,
            prize,
            organization=self.organization,
            claim_location=self.claim_location,
        )
        report = NotificationReport()

        if self.sms_client is None:
            report.errors.append("SMS failed: channel not configured")
        else:
            try:
                self.sms_client.send_text(entry.phone, message.subject, message.body)
                report.sms_ok = True
            except requests.HTTPError as exc:
                status = exc.response.status_code if exc.response is not None else "?"
                text = exc.response.text if exc.response is not None else str(exc)
                logger.error(f"SMS notification failed: {status} {text}")
                report.errors.append(f"SMS failed ({status}): {text}")
            except (requests.RequestException, ValueError) as exc:
                logger.error(f"SMS notification failed: {exc}")
                report.errors.append(f"SMS failed: {exc}")

        if self.mailer is None:
            report.errors.append("Email failed: channel not configured")
        else:
            try:
                self.mailer.send(entry.email, message.subject, message.body)
                report.email_ok = True
            except (smtplib.SMTPException, OSError) as exc:
                logger.error(f"Email notification failed: {exc}")
                report.errors.append(f"Email failed: {exc}")

        return report


__all__ = [
    "NotificationReport",
    "Notifier",
    "WinnerMessage",
    "WinnerNotifier",
    "format_winner_message",
]
