import logging
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from .db.utils import utcnow
from .draw.eligibility import check_duplicate
from .draw.engine import DrawEngine, RandomSource
from .errors import (
    ConfirmationMismatchError,
    DuplicateEntryError,
    InvalidTransitionError,
    NotificationFailure,
)
from .models import Prize, RaffleEntry, Winner
from .notify.notifier import NotificationReport, WinnerNotifier
from .store import RecordStore
from .validation import validate_entry, validate_prize

logger = logging.getLogger(__name__)

DELETE_ALL_CONFIRMATION = "DELETE ALL"

ENTRY_STATUS_WINNER = "winner"
ENTRY_STATUS_ELIGIBLE = "eligible"


def _require_confirmation(confirmation: Optional[str]) -> None:
    # Exact, case-sensitive match; checked before anything is touched.
    if confirmation != DELETE_ALL_CONFIRMATION:
        raise ConfirmationMismatchError(DELETE_ALL_CONFIRMATION)


# -------- entries --------
def submit_entry(session: Session, fields: Mapping[str, Any]) -> RaffleEntry:
    """Validate and store a public raffle entry.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    fields : Mapping[str, Any]
        Raw submission with ``first_name``, ``last_name``, ``email`` and
        ``phone``.

    Returns
    -------
    RaffleEntry
        The persisted entry with its phone in ``NNN-NNN-NNNN`` form.

    Raises
    ------
    ValidationError
        If any field is malformed.
    DuplicateEntryError
        If an entry with the same first and last name already exists.
    """
    cleaned = validate_entry(fields)
    store = RecordStore(session)

    if check_duplicate(store, cleaned.first_name, cleaned.last_name) is not None:
        raise DuplicateEntryError(cleaned.first_name, cleaned.last_name)

    entry = store.insert_entry(
        first_name=cleaned.first_name,
        last_name=cleaned.last_name,
        email=cleaned.email,
        phone=cleaned.phone,
    )
    logger.info(f"Accepted raffle entry {entry.id}")
    return entry


def list_entries_with_status(session: Session) -> list[tuple[RaffleEntry, str]]:
    """Return every entry paired with ``"winner"`` or ``"eligible"``."""

    store = RecordStore(session)
    active_ids = set(store.list_active_winner_entry_ids())
    return [
        (
            entry,
            ENTRY_STATUS_WINNER if entry.id in active_ids else ENTRY_STATUS_ELIGIBLE,
        )
        for entry in store.list_entries()
    ]


def delete_entry(session: Session, entry_id: int) -> None:
    RecordStore(session).delete_entry(entry_id)


def delete_all_entries(session: Session, confirmation: Optional[str]) -> int:
    """Delete every entry (and every winner) after an exact confirmation."""

    _require_confirmation(confirmation)
    deleted = RecordStore(session).delete_all_entries()
    logger.warning(f"Deleted all {deleted} raffle entries")
    return deleted


# -------- draw / claim --------
def draw_winner(session: Session, *, rng: Optional[RandomSource] = None) -> RaffleEntry:
    """Pick a candidate from the eligible pool. Nothing is persisted."""

    return DrawEngine(RecordStore(session), rng=rng).draw_winner()


def confirm_winner(session: Session, entry_id: Optional[int]) -> Winner:
    return DrawEngine(RecordStore(session)).confirm_winner(entry_id)


def claim_prize(session: Session, winner_id: int, prize_id: Optional[int]) -> Winner:
    return DrawEngine(RecordStore(session)).claim_prize(winner_id, prize_id)


def mark_no_show(session: Session, winner_id: int) -> Winner:
    return DrawEngine(RecordStore(session)).mark_no_show(winner_id)


def notify_winner(
    session: Session, winner_id: int, notifier: WinnerNotifier
) -> NotificationReport:
    """Notify a winner and record the ``notified_at`` marker on success.

    The winner is only touched when at least one channel succeeded.

    Raises
    ------
    NotFoundError
        If the winner does not exist.
    NotificationFailure
        If every channel failed. The winner record is left unchanged.
    """
    store = RecordStore(session)
    winner = store.get_winner(winner_id)
    entry = winner.entry
    logger.info(f"Attempting to notify winner {winner_id} (entry {entry.id})")

    report = notifier.notify(entry, winner.prize)
    if not report.ok:
        raise NotificationFailure(report.errors)

    store.update_winner(winner_id, notified_at=utcnow())
    logger.info(report.summary)
    return report


def list_winners(session: Session) -> list[Winner]:
    return RecordStore(session).list_winners_with_joins()


def delete_winner(session: Session, winner_id: int) -> None:
    RecordStore(session).delete_winner(winner_id)


def delete_all_winners(session: Session, confirmation: Optional[str]) -> int:
    _require_confirmation(confirmation)
    deleted = RecordStore(session).delete_all_winners()
    logger.warning(f"Deleted all {deleted} winner records")
    return deleted


# -------- prizes --------
def create_prize(session: Session, fields: Mapping[str, Any]) -> Prize:
    cleaned = validate_prize(fields)
    return RecordStore(session).insert_prize(
        name=cleaned.name, description=cleaned.description
    )


def update_prize(session: Session, prize_id: int, fields: Mapping[str, Any]) -> Prize:
    """Update a prize's name, description or availability.

    Only the keys present in ``fields`` are changed; name and description are
    validated with the same rules as :func:`create_prize`.
    """
    store = RecordStore(session)
    prize = store.get_prize(prize_id)
    changes: dict[str, Any] = {}
    if "name" in fields or "description" in fields:
        cleaned = validate_prize(
            {
                "name": fields.get("name", prize.name),
                "description": fields.get("description", prize.description),
            }
        )
        changes["name"] = cleaned.name
        changes["description"] = cleaned.description
    if "is_available" in fields:
        available = bool(fields["is_available"])
        if available and store.prize_is_claimed(prize_id):
            raise InvalidTransitionError(
                f"Prize {prize_id!r} has been claimed and cannot be made available"
            )
        changes["is_available"] = available
    return store.update_prize(prize_id, **changes)


def list_prizes(session: Session) -> list[Prize]:
    return RecordStore(session).list_prizes()


def delete_prize(session: Session, prize_id: int) -> None:
    RecordStore(session).delete_prize(prize_id)


def delete_all_prizes(session: Session, confirmation: Optional[str]) -> int:
    _require_confirmation(confirmation)
    deleted = RecordStore(session).delete_all_prizes()
    logger.warning(f"Deleted all {deleted} prizes")
    return deleted
