"""Record store over a SQLAlchemy session.

The store is the only place that issues queries against the three raffle
tables. It never commits; the caller owns the transaction boundary (see
:class:`raffledesk.service.RaffleService`), so multi-step cascades run as one
unit.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from .db.utils import utcnow
from .errors import DuplicateEntryError, NotFoundError
from .models import Prize, RaffleEntry, Winner

logger = logging.getLogger(__name__)

_PRIZE_FIELDS = frozenset({"name", "description", "is_available"})
_WINNER_FIELDS = frozenset(
    {"prize_id", "claimed_at", "is_no_show", "notified_at"}
)


class RecordStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    # -------- entries --------
    def list_entries(self) -> list[RaffleEntry]:
        stmt = select(RaffleEntry).order_by(RaffleEntry.entry_time, RaffleEntry.id)
        return list(self._session.scalars(stmt).all())

    def get_entry(self, entry_id: int) -> RaffleEntry:
        entry = self._session.get(RaffleEntry, entry_id)
        if entry is None:
            raise NotFoundError("Entry", entry_id)
        return entry

    def insert_entry(
        self, *, first_name: str, last_name: str, email: str, phone: str
    ) -> RaffleEntry:
        entry = RaffleEntry(
            first_name=first_name, last_name=last_name, email=email, phone=phone
        )
        self._session.add(entry)
        try:
            self._session.flush()
        except IntegrityError as exc:
            # Lost a race against a concurrent submission with the same name.
            raise DuplicateEntryError(first_name, last_name) from exc
        return entry

    def find_entry_by_name(
        self, first_name: str, last_name: str
    ) -> Optional[RaffleEntry]:
        return RaffleEntry.get_by_name(self._session, first_name, last_name)

    def set_entry_won(self, entry_id: int) -> RaffleEntry:
        entry = self.get_entry(entry_id)
        entry.has_won = True
        self._session.flush()
        return entry

    def delete_entry(self, entry_id: int) -> None:
        """Delete an entry after removing every winner that references it."""

        entry = self.get_entry(entry_id)
        winners = self._session.scalars(
            select(Winner).where(Winner.entry_id == entry_id)
        ).all()
        for winner in winners:
            self._session.delete(winner)
        # Winners must be gone before the entry row to keep the FK intact.
        self._session.flush()
        self._session.delete(entry)
        self._session.flush()
        logger.debug(f"Deleted entry {entry_id} and {len(winners)} winner record(s)")

    def delete_all_entries(self) -> int:
        self.delete_all_winners()
        result = self._session.execute(delete(RaffleEntry))
        return result.rowcount or 0

    # -------- prizes --------
    def list_prizes(self) -> list[Prize]:
        stmt = select(Prize).order_by(Prize.created_at, Prize.id)
        return list(self._session.scalars(stmt).all())

    def get_prize(self, prize_id: int) -> Prize:
        prize = self._session.get(Prize, prize_id)
        if prize is None:
            raise NotFoundError("Prize", prize_id)
        return prize

    def insert_prize(self, *, name: str, description: Optional[str] = None) -> Prize:
        prize = Prize(name=name, description=description)
        self._session.add(prize)
        self._session.flush()
        return prize

    def update_prize(self, prize_id: int, **fields: Any) -> Prize:
        unknown = set(fields) - _PRIZE_FIELDS
        if unknown:
            raise ValueError(f"Unknown prize field(s): {', '.join(sorted(unknown))}")
        prize = self.get_prize(prize_id)
        for key, value in fields.items():
            setattr(prize, key, value)
        self._session.flush()
        return prize

    def set_prize_available(self, prize_id: int, available: bool) -> Prize:
        return self.update_prize(prize_id, is_available=available)

    def prize_is_claimed(self, prize_id: int) -> bool:
        stmt = select(Winner.id).where(
            Winner.prize_id == prize_id, Winner.claimed_at.isnot(None)
        )
        return self._session.scalars(stmt.limit(1)).first() is not None

    def _release_prize(self, winners: Sequence[Winner]) -> None:
        # A winner without a prize cannot stay claimed; it reverts to confirmed.
        for winner in winners:
            winner.prize = None
            winner.prize_id = None
            winner.claimed_at = None
        self._session.flush()

    def delete_prize(self, prize_id: int) -> None:
        """Delete a prize, unassigning it from any winner that holds it."""

        prize = self.get_prize(prize_id)
        winners = self._session.scalars(
            select(Winner).where(Winner.prize_id == prize_id)
        ).all()
        self._release_prize(winners)
        self._session.delete(prize)
        self._session.flush()
        logger.debug(f"Deleted prize {prize_id}; unassigned from {len(winners)} winner(s)")

    def delete_all_prizes(self) -> int:
        winners = self._session.scalars(
            select(Winner).where(Winner.prize_id.isnot(None))
        ).all()
        self._release_prize(winners)
        result = self._session.execute(delete(Prize))
        return result.rowcount or 0

    # -------- winners --------
    def list_winners_with_joins(self) -> list[Winner]:
        stmt = (
            select(Winner)
            .options(joinedload(Winner.entry), joinedload(Winner.prize))
            .order_by(Winner.drawn_at, Winner.id)
        )
        return list(self._session.scalars(stmt).unique().all())

    def get_winner(self, winner_id: int) -> Winner:
        winner = self._session.get(
            Winner,
            winner_id,
            options=[joinedload(Winner.entry), joinedload(Winner.prize)],
        )
        if winner is None:
            raise NotFoundError("Winner", winner_id)
        return winner

    def insert_winner(self, entry_id: int) -> Winner:
        winner = Winner(entry_id=entry_id, drawn_at=utcnow())
        self._session.add(winner)
        self._session.flush()
        return winner

    def update_winner(self, winner_id: int, **fields: Any) -> Winner:
        unknown = set(fields) - _WINNER_FIELDS
        if unknown:
            raise ValueError(f"Unknown winner field(s): {', '.join(sorted(unknown))}")
        winner = self.get_winner(winner_id)
        for key, value in fields.items():
            setattr(winner, key, value)
        self._session.flush()
        # Re-resolve the prize relationship after a prize_id change.
        if "prize_id" in fields:
            self._session.expire(winner, ["prize"])
        return winner

    def delete_winner(self, winner_id: int) -> None:
        winner = self.get_winner(winner_id)
        self._session.delete(winner)
        self._session.flush()

    def delete_all_winners(self) -> int:
        result = self._session.execute(delete(Winner))
        return result.rowcount or 0

    def list_active_winner_entry_ids(self) -> list[int]:
        """Return entry ids referenced by winners that are not no-shows."""

        stmt = select(Winner.entry_id).where(Winner.is_no_show.is_(False))
        return list(self._session.scalars(stmt).all())


__all__ = ["RecordStore"]
