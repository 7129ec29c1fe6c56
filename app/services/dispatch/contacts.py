"""
Per-contact conversation state.

One entry per channel address, held in memory for the lifetime of the
process. The store is owned by the dispatch engine and injected into it.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass
class Contact:
    """Conversation state for one chat participant."""

    address: str
    has_been_greeted: bool = False
    last_menu_id: str | None = None  # Menu most recently sent to this contact
    awaiting_selection: bool = False
    first_seen_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_seen_at: datetime | None = None

    def mark_menu_sent(self, menu_id: str) -> None:
        # Greeted is one-way; a new menu supersedes any pending selection
        self.has_been_greeted = True
        self.last_menu_id = menu_id
        self.awaiting_selection = True

    def mark_selection_resolved(self) -> None:
        self.awaiting_selection = False

    def touch(self) -> None:
        self.last_seen_at = datetime.now(UTC)

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "has_been_greeted": self.has_been_greeted,
            "last_menu_id": self.last_menu_id,
            "awaiting_selection": self.awaiting_selection,
            "first_seen_at": self.first_seen_at.isoformat(),
            "last_seen_at": self.last_seen_at.isoformat() if self.last_seen_at else None,
        }


class ContactStore:
    """
    In-memory keyed store of Contact entries.

    Each address gets its own asyncio.Lock so one contact's events are handled
    strictly in order while other contacts proceed independently.
    """

    def __init__(self) -> None:
        self._contacts: dict[str, Contact] = {}
        # One lock per address, kept for the process lifetime like the contacts
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, address: str) -> Contact | None:
        return self._contacts.get(address)

    def get_or_create(self, address: str) -> Contact:
        contact = self._contacts.get(address)
        if contact is None:
            contact = Contact(address=address)
            self._contacts[address] = contact
        return contact

    def lock_for(self, address: str) -> asyncio.Lock:
        lock = self._locks.get(address)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[address] = lock
        return lock

    def __contains__(self, address: object) -> bool:
        return address in self._contacts

    def __len__(self) -> int:
        return len(self._contacts)
