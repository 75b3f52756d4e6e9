"""Eligibility and duplicate-entry checks."""

from __future__ import annotations

from typing import Optional

from ..models import RaffleEntry
from ..store import RecordStore


def check_duplicate(
    store: RecordStore, first_name: str, last_name: str
) -> Optional[RaffleEntry]:
    """Return the entry already registered under this exact name, if any.

    Matching is case-sensitive and exact on both first and last name. Email is
    deliberately not part of the key: one person may only enter once.
    """

    return store.find_entry_by_name(first_name, last_name)


def get_eligible_entries(store: RecordStore) -> list[RaffleEntry]:
    """Return every entry not held by an active (non no-show) winner.

    Entries whose only winner records are no-shows are back in the pool. The
    order follows the store's listing and carries no meaning.
    """

    active_ids = set(store.list_active_winner_entry_ids())
    entries = store.list_entries()
    if not active_ids:
        return entries
    return [entry for entry in entries if entry.id not in active_ids]


__all__ = ["check_duplicate", "get_eligible_entries"]
