"""Exception hierarchy for the raffle core.

Domain code raises these; :mod:`raffledesk.service` is the only place that
catches them and turns them into structured failure responses.
"""

from __future__ import annotations

from typing import Optional


class RaffleError(Exception):
    """Base class for every recoverable raffle error."""

    status = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RaffleError):
    """Malformed input fields.

    ``fields`` maps a field name to the list of messages for that field so the
    caller can surface them next to the offending input.
    """

    status = 400

    def __init__(
        self,
        message: str = "Validation error",
        fields: Optional[dict[str, list[str]]] = None,
    ) -> None:
        super().__init__(message)
        self.fields: dict[str, list[str]] = dict(fields or {})

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, {field: [message]})


class DuplicateEntryError(RaffleError):
    status = 409

    def __init__(self, first_name: str, last_name: str) -> None:
        super().__init__(
            "An entry with this name already exists."
        )
        self.first_name = first_name
        self.last_name = last_name


class NoEligibleEntriesError(RaffleError):
    status = 400

    def __init__(self) -> None:
        super().__init__("No eligible entries available for drawing")


class NotFoundError(RaffleError):
    status = 404

    def __init__(self, kind: str, identifier: object) -> None:
        super().__init__(f"{kind} {identifier!r} not found")
        self.kind = kind
        self.identifier = identifier


class ConfirmationMismatchError(RaffleError):
    status = 400

    def __init__(self, expected: str) -> None:
        super().__init__(f"Invalid confirmation. Type '{expected}' to confirm.")
        self.expected = expected


class InvalidTransitionError(RaffleError):
    """A winner or prize is not in a state that allows the requested change."""

    status = 409


class AuthenticationError(RaffleError):
    status = 401


class NotificationFailure(RaffleError):
    """Every notification channel failed; nothing was recorded."""

    status = 502

    def __init__(self, errors: list[str]) -> None:
        super().__init__("All notification methods failed")
        self.errors = list(errors)


__all__ = [
    "RaffleError",
    "ValidationError",
    "DuplicateEntryError",
    "NoEligibleEntriesError",
    "NotFoundError",
    "ConfirmationMismatchError",
    "InvalidTransitionError",
    "AuthenticationError",
    "NotificationFailure",
]
