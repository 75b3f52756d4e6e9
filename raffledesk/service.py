"""Service boundary turning workflow results and errors into responses.

Every call runs inside its own ``Session.begin()`` block, so a multi-step
operation such as "delete winners, then delete the entry" either commits as a
whole or is rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, TypeVar

from sqlalchemy.orm import Session, sessionmaker

from . import auth, workflows
from .draw.engine import RandomSource
from .errors import NotificationFailure, RaffleError, ValidationError
from .notify.notifier import Notifier, WinnerNotifier

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ServiceResponse:
    """Structured outcome of a service call.

    ``status`` follows HTTP semantics so a web layer can pass it through.
    """

    ok: bool
    status: int
    message: Optional[str] = None
    data: Any = None
    errors: Any = None

    def to_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.message is not None:
            body["message"] = self.message
        if self.data is not None:
            body["data"] = self.data
        if self.errors:
            body["errors"] = self.errors
        return body


def _failure(exc: RaffleError) -> ServiceResponse:
    errors: Any = None
    if isinstance(exc, ValidationError):
        errors = exc.fields
    elif isinstance(exc, NotificationFailure):
        errors = exc.errors
    return ServiceResponse(ok=False, status=exc.status, message=exc.message, errors=errors)


class RaffleService:
    def __init__(
        self,
        Session: sessionmaker,
        *,
        notifier: Optional[WinnerNotifier] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self._Session = Session
        self._notifier = notifier
        self._rng = rng

    @property
    def notifier(self) -> WinnerNotifier:
        if self._notifier is None:
            self._notifier = Notifier.from_env()
        return self._notifier

    def _run(
        self,
        action: str,
        fn: Callable[[Session], T],
        *,
        message: Optional[str] = None,
    ) -> ServiceResponse:
        try:
            with self._Session.begin() as session:
                data = fn(session)
        except RaffleError as exc:
            logger.info(f"{action} rejected: {exc.message}")
            return _failure(exc)
        except Exception:
            logger.exception(f"Error during {action}")
            return ServiceResponse(ok=False, status=500, message=f"Failed to {action}")
        return ServiceResponse(ok=True, status=200, message=message, data=data)

    # -------- auth --------
    def login(self, email: str, password: str) -> ServiceResponse:
        return self._run(
            "log in",
            lambda s: {"token": auth.authenticate(s, email, password)},
        )

    def authorize(self, token: Optional[str]) -> ServiceResponse:
        return self._run(
            "authorize",
            lambda s: {"admin_id": auth.verify_token(s, token).id},
        )

    def logout(self, token: str) -> ServiceResponse:
        return self._run("log out", lambda s: auth.revoke_token(s, token))

    # -------- entries --------
    def submit_entry(self, fields: Mapping[str, Any]) -> ServiceResponse:
        return self._run(
            "create raffle entry",
            lambda s: workflows.submit_entry(s, fields).to_json(),
        )

    def list_entries(self) -> ServiceResponse:
        return self._run(
            "fetch entries",
            lambda s: [
                entry.to_json(status=status)
                for entry, status in workflows.list_entries_with_status(s)
            ],
        )

    def delete_entry(self, entry_id: int) -> ServiceResponse:
        return self._run(
            "delete entry",
            lambda s: workflows.delete_entry(s, entry_id),
            message="Entry deleted successfully",
        )

    def delete_all_entries(self, confirmation: Optional[str]) -> ServiceResponse:
        return self._run(
            "delete all entries",
            lambda s: {"deleted": workflows.delete_all_entries(s, confirmation)},
            message="All entries deleted successfully",
        )

    # -------- draw / claim --------
    def draw_winner(self) -> ServiceResponse:
        return self._run(
            "draw winner",
            lambda s: workflows.draw_winner(s, rng=self._rng).to_json(),
        )

    def confirm_winner(self, entry_id: Optional[int]) -> ServiceResponse:
        return self._run(
            "confirm winner",
            lambda s: workflows.confirm_winner(s, entry_id).to_json(),
        )

    def claim_prize(self, winner_id: int, prize_id: Optional[int]) -> ServiceResponse:
        return self._run(
            "claim prize",
            lambda s: workflows.claim_prize(s, winner_id, prize_id).to_json(),
        )

    def mark_no_show(self, winner_id: int) -> ServiceResponse:
        return self._run(
            "mark as no-show",
            lambda s: workflows.mark_no_show(s, winner_id).to_json(),
        )

    def notify_winner(self, winner_id: int) -> ServiceResponse:
        def _notify(session: Session) -> dict[str, Any]:
            report = workflows.notify_winner(session, winner_id, self.notifier)
            return {"message": report.summary, "notifications": report.to_json()}

        return self._run("notify winner", _notify)

    def list_winners(self) -> ServiceResponse:
        return self._run(
            "fetch winners",
            lambda s: [w.to_json() for w in workflows.list_winners(s)],
        )

    def delete_winner(self, winner_id: int) -> ServiceResponse:
        return self._run(
            "delete winner",
            lambda s: workflows.delete_winner(s, winner_id),
            message="Winner deleted successfully",
        )

    def delete_all_winners(self, confirmation: Optional[str]) -> ServiceResponse:
        return self._run(
            "delete all winners",
            lambda s: {"deleted": workflows.delete_all_winners(s, confirmation)},
            message="All winners deleted successfully",
        )

    # -------- prizes --------
    def create_prize(self, fields: Mapping[str, Any]) -> ServiceResponse:
        return self._run(
            "create prize",
            lambda s: workflows.create_prize(s, fields).to_json(),
        )

    def update_prize(self, prize_id: int, fields: Mapping[str, Any]) -> ServiceResponse:
        return self._run(
            "update prize",
            lambda s: workflows.update_prize(s, prize_id, fields).to_json(),
        )

    def list_prizes(self) -> ServiceResponse:
        return self._run(
            "fetch prizes",
            lambda s: [p.to_json() for p in workflows.list_prizes(s)],
        )

    def delete_prize(self, prize_id: int) -> ServiceResponse:
        return self._run(
            "delete prize",
            lambda s: workflows.delete_prize(s, prize_id),
            message="Prize deleted successfully",
        )

    def delete_all_prizes(self, confirmation: Optional[str]) -> ServiceResponse:
        return self._run(
            "delete all prizes",
            lambda s: {"deleted": workflows.delete_all_prizes(s, confirmation)},
            message="All prizes deleted successfully",
        )


__all__ = ["RaffleService", "ServiceResponse"]
