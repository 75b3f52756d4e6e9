"""State machine driving entries through draw, confirmation and claim."""

from __future__ import annotations

import logging
import random
from typing import Optional, Protocol, Sequence, TypeVar

from .eligibility import get_eligible_entries
from ..db.utils import utcnow
from ..errors import (
    InvalidTransitionError,
    NoEligibleEntriesError,
    ValidationError,
)
from ..models import RaffleEntry, Winner
from ..store import RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...


def select_uniform(items: Sequence[T], rng: RandomSource) -> T:
    """Pick one element of ``items`` uniformly at random.

    Uses ``index = floor(rng.random() * len(items))``. ``rng`` only needs a
    ``random()`` method returning a float in ``[0.0, 1.0)``.

    Raises
    ------
    ValueError
        If ``items`` is empty.
    """

    if not items:
        raise ValueError("cannot select from an empty sequence")
    index = int(rng.random() * len(items))
    # Guard against a generator that returns exactly 1.0.
    return items[min(index, len(items) - 1)]


class DrawEngine:
    """Engine that draws candidates and records winner outcomes."""

    def __init__(
        self,
        store: RecordStore,
        *,
        rng: Optional[RandomSource] = None,
    ) -> None:
        """Create a draw engine bound to a record store.

        Parameters
        ----------
        store : RecordStore
            Store wrapping the active SQLAlchemy session.
        rng : Optional[RandomSource], default: None
            Random source used for selection. Defaults to the module-level
            :mod:`random` generator; cryptographic strength is not needed.
        """

        self._store = store
        self._rng: RandomSource = rng if rng is not None else random

    def draw_winner(self) -> RaffleEntry:
        """Select a candidate from the eligible pool without persisting it.

        Repeated calls sample independently. The candidate only leaves the
        pool once :meth:`confirm_winner` records a winner for it.

        Raises
        ------
        NoEligibleEntriesError
            If every entry is already held by an active winner, or there are
            no entries at all.
        """

        eligible = get_eligible_entries(self._store)
        if not eligible:
            raise NoEligibleEntriesError()
        candidate = select_uniform(eligible, self._rng)
        logger.info(
            f"Drew candidate entry {candidate.id} from a pool of {len(eligible)}"
        )
        return candidate

    def confirm_winner(self, entry_id: Optional[int]) -> Winner:
        """Persist a drawn candidate as a winner.

        Parameters
        ----------
        entry_id : Optional[int]
            Entry to confirm. ``None`` is treated as a missing field.

        Returns
        -------
        Winner
            New record with no prize, ``claimed_at=None`` and
            ``is_no_show=False``.

        Raises
        ------
        ValidationError
            If ``entry_id`` is missing.
        NotFoundError
            If the entry does not exist.
        InvalidTransitionError
            If the entry is already held by an active winner.
        """

        if entry_id is None:
            raise ValidationError.for_field("entry_id", "Entry ID is required")

        entry = self._store.get_entry(entry_id)
        if entry.id in self._store.list_active_winner_entry_ids():
            raise InvalidTransitionError(
                f"Entry {entry.id!r} is already a confirmed winner"
            )

        winner = self._store.insert_winner(entry.id)
        self._store.set_entry_won(entry.id)
        logger.info(f"Confirmed entry {entry.id} as winner {winner.id}")
        return winner

    def claim_prize(self, winner_id: int, prize_id: Optional[int]) -> Winner:
        """Hand ``prize_id`` to a confirmed winner.

        Sets the winner's prize and ``claimed_at`` and marks the prize as no
        longer available.

        Raises
        ------
        ValidationError
            If ``prize_id`` is missing.
        NotFoundError
            If the winner or prize does not exist.
        InvalidTransitionError
            If the winner already claimed or is a no-show, or the prize was
            already handed out.
        """

        if prize_id is None:
            raise ValidationError.for_field("prize_id", "Prize ID is required")

        winner = self._store.get_winner(winner_id)
        if winner.is_no_show:
            raise InvalidTransitionError(
                f"Winner {winner_id!r} was marked as a no-show"
            )
        if winner.claimed_at is not None:
            raise InvalidTransitionError(
                f"Winner {winner_id!r} has already claimed a prize"
            )

        prize = self._store.get_prize(prize_id)
        if not prize.is_available or self._store.prize_is_claimed(prize.id):
            raise InvalidTransitionError(f"Prize {prize_id!r} is not available")

        winner = self._store.update_winner(
            winner_id, prize_id=prize.id, claimed_at=utcnow()
        )
        self._store.set_prize_available(prize.id, False)
        logger.info(f"Winner {winner_id} claimed prize {prize_id}")
        return winner

    def mark_no_show(self, winner_id: int) -> Winner:
        """Record that a winner did not show up; their entry rejoins the pool.

        Marking an existing no-show again is a no-op.

        Raises
        ------
        NotFoundError
            If the winner does not exist.
        InvalidTransitionError
            If the winner already claimed a prize.
        """

        winner = self._store.get_winner(winner_id)
        if winner.claimed_at is not None:
            raise InvalidTransitionError(
                f"Winner {winner_id!r} has already claimed a prize"
            )
        if winner.is_no_show:
            return winner

        winner = self._store.update_winner(winner_id, is_no_show=True)
        logger.info(f"Winner {winner_id} marked as no-show; entry {winner.entry_id} is eligible again")
        return winner


__all__ = ["DrawEngine", "RandomSource", "select_uniform"]
