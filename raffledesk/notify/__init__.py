"""Outbound winner notifications."""

from .notifier import (
    NotificationReport,
    Notifier,
    WinnerMessage,
    WinnerNotifier,
    format_winner_message,
)

__all__ = [
    "NotificationReport",
    "Notifier",
    "WinnerMessage",
    "WinnerNotifier",
    "format_winner_message",
]
