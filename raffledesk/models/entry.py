"""Raffle entry submitted by an attendee."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import Boolean, DateTime, String, UniqueConstraint, false, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .base import Base, ID_TYPE
from ..db.utils import dt_iso


class RaffleEntry(Base):
    """A raffle participant's submitted record."""

    __tablename__ = "raffle_entries"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    """Phone number in canonical ``NNN-NNN-NNNN`` form."""

    entry_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    has_won: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    """Set when a drawn entry is confirmed as a winner. Never cleared."""

    __table_args__ = (
        UniqueConstraint("first_name", "last_name", name="uq_raffle_entries_name"),
    )

    def __init__(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        phone: str,
        entry_time: Optional[datetime] = None,
        has_won: bool = False,
    ) -> None:
        """Create a new :class:`RaffleEntry`.

        Parameters
        ----------
        first_name, last_name : str
            Attendee name. The pair must be unique across entries.
        email : str
            Contact email used for winner notification.
        phone : str
            Contact phone, already canonicalized to ``NNN-NNN-NNNN``.
        entry_time : datetime, optional
            Explicit submission timestamp; defaults to now (UTC).
        has_won : bool, default: False
            Initial winner flag.
        """
        self.first_name = first_name
        self.last_name = last_name
        self.email = email
        self.phone = phone
        self.has_won = has_won
        if entry_time is not None:
            self.entry_time = entry_time

    def __repr__(self) -> str:
        return (
            f"<RaffleEntry(id={self.id}, first_name='{self.first_name}', "
            f"last_name='{self.last_name}', has_won={self.has_won})>"
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def get_by_name(
        cls, session: Session, first_name: str, last_name: str
    ) -> Optional["RaffleEntry"]:
        """Retrieve the entry with exactly this first and last name."""

        return session.scalar(
            select(cls).where(cls.first_name == first_name, cls.last_name == last_name)
        )

    def to_json(self, *, status: Optional[str] = None) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "entry_time": dt_iso(self.entry_time),
            "has_won": self.has_won,
        }
        if status is not None:
            data["status"] = status
        return data
