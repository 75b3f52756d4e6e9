"""Winner records linking a confirmed entry to its prize-claim outcome."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, ID_TYPE
from ..db.utils import dt_iso

if TYPE_CHECKING:
    from .entry import RaffleEntry
    from .prize import Prize


WINNER_CONFIRMED = "confirmed"
WINNER_CLAIMED = "claimed"
WINNER_NO_SHOW = "no_show"


class Winner(Base):
    """A persisted record linking a drawn entry to an optional prize."""

    __tablename__ = "winners"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    entry_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("raffle_entries.id"), nullable=False, index=True
    )
    """Entry that was drawn and confirmed."""

    prize_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE, ForeignKey("prizes.id"), nullable=True, index=True
    )
    """Prize handed out, or ``None`` while unclaimed."""

    drawn_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    """Timestamp when the winner was confirmed."""

    claimed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    """Set together with ``prize_id`` when the prize is collected."""

    is_no_show: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    """The winner failed to claim; their entry is back in the draw pool."""

    notified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    """Set once at least one notification channel reached the winner."""

    entry: Mapped["RaffleEntry"] = relationship("RaffleEntry")
    prize: Mapped[Optional["Prize"]] = relationship("Prize")

    __table_args__ = (
        CheckConstraint(
            "claimed_at IS NULL OR prize_id IS NOT NULL", name="claim_requires_prize"
        ),
        CheckConstraint(
            "NOT (is_no_show AND claimed_at IS NOT NULL)", name="no_show_or_claimed"
        ),
        Index("ix_winners_is_no_show", "is_no_show"),
    )

    def __init__(
        self,
        *,
        entry: Optional["RaffleEntry"] = None,
        entry_id: Optional[int] = None,
        prize: Optional["Prize"] = None,
        prize_id: Optional[int] = None,
        drawn_at: Optional[datetime] = None,
        claimed_at: Optional[datetime] = None,
        is_no_show: bool = False,
        notified_at: Optional[datetime] = None,
    ) -> None:
        if entry is not None:
            self.entry = entry
        if entry_id is not None:
            self.entry_id = entry_id
        if prize is not None:
            self.prize = prize
        if prize_id is not None:
            self.prize_id = prize_id
        if drawn_at is not None:
            self.drawn_at = drawn_at
        self.claimed_at = claimed_at
        self.is_no_show = is_no_show
        self.notified_at = notified_at

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Winner(id={self.id}, entry_id={self.entry_id}, "
            f"prize_id={self.prize_id}, status={self.status})>"
        )

    @property
    def status(self) -> str:
        """Claim outcome derived from the record's fields."""

        if self.is_no_show:
            return WINNER_NO_SHOW
        if self.claimed_at is not None:
            return WINNER_CLAIMED
        return WINNER_CONFIRMED

    @property
    def is_active(self) -> bool:
        """Whether this record keeps its entry out of the draw pool."""

        return not self.is_no_show

    def to_json(self, *, include_relations: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "entry_id": self.entry_id,
            "prize_id": self.prize_id,
            "drawn_at": dt_iso(self.drawn_at),
            "claimed_at": dt_iso(self.claimed_at),
            "is_no_show": self.is_no_show,
            "notified_at": dt_iso(self.notified_at),
            "status": self.status,
        }
        if include_relations:
            data["entry"] = self.entry.to_json() if self.entry is not None else None
            data["prize"] = self.prize.to_json() if self.prize is not None else None
        return data


__all__ = [
    "Winner",
    "WINNER_CONFIRMED",
    "WINNER_CLAIMED",
    "WINNER_NO_SHOW",
]
