"""In-memory entity store.

Holds users, item listings and chat threads for the lifetime of the
process.  One instance is created at startup and passed to every
component that needs it.
"""

from __future__ import annotations

import dataclasses
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime

from loguru import logger

from aidbridge.application.exceptions import DuplicateEmailError
from aidbridge.domain.models import (
    ChatMessage,
    DonatedItem,
    ItemStatus,
    NewItem,
    NewUser,
    User,
)
from aidbridge.domain.thread_key import ThreadKey


def _new_id() -> str:
    return uuid.uuid4().hex[:8]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class EntityStore:
    """CRUD operations over users, items and chat threads."""

    def __init__(self) -> None:
        self._users: list[User] = []
        self._items: list[DonatedItem] = []
        self._threads: dict[ThreadKey, list[ChatMessage]] = {}
        self._pending_replies: set[ThreadKey] = set()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def add_user(self, candidate: NewUser) -> User:
        """Register a new user and return it.

        Raises:
            DuplicateEmailError: If the email (any casing) is already taken.
        """
        if self.find_user_by_email(candidate.email):
            raise DuplicateEmailError("An account with this email already exists.")

        user = User(
            user_id=_new_id(),
            email=candidate.email,
            full_name=candidate.full_name,
            user_type=candidate.user_type,
            ngo_verification_id=candidate.ngo_verification_id,
            address=candidate.address,
        )
        self._users.append(user)
        logger.info("Created {} user {} ({})", user.user_type, user.user_id, user.email)
        return user

    def find_user_by_email(self, email: str) -> User | None:
        wanted = email.lower()
        return next((u for u in self._users if u.email.lower() == wanted), None)

    def find_user_by_id(self, user_id: str) -> User | None:
        return next((u for u in self._users if u.user_id == user_id), None)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_item(self, candidate: NewItem) -> DonatedItem:
        """Create a listing with status Available, newest first."""
        item = DonatedItem(
            item_id=_new_id(),
            donor_id=candidate.donor_id,
            item_name=candidate.item_name,
            description=candidate.description,
            category=candidate.category,
            image_url=candidate.image_url,
            status=ItemStatus.AVAILABLE,
        )
        self._items.insert(0, item)
        logger.info("Donor {} listed item {} ({})", item.donor_id, item.item_id, item.item_name)
        return item

    def get_item(self, item_id: str) -> DonatedItem | None:
        return next((i for i in self._items if i.item_id == item_id), None)

    def update_item_status(self, item_id: str, status: ItemStatus) -> DonatedItem | None:
        """Overwrite an item's status and return the new record.

        Unknown ids are ignored and yield None.
        """
        for index, item in enumerate(self._items):
            if item.item_id == item_id:
                break
        else:
            return None

        if item.status != status:
            logger.info("Item {} status {} -> {}", item_id, item.status, status)
        updated = dataclasses.replace(item, status=status)
        self._items[index] = updated
        return updated

    def list_available_items(self, query: str = "") -> list[DonatedItem]:
        """Available items whose name contains *query* (case-insensitive)."""
        needle = query.lower()
        return [
            item
            for item in self._items
            if item.status is ItemStatus.AVAILABLE and needle in item.item_name.lower()
        ]

    def list_items_by_donor(self, donor_id: str) -> list[DonatedItem]:
        return [item for item in self._items if item.donor_id == donor_id]

    # ------------------------------------------------------------------
    # Chat threads
    # ------------------------------------------------------------------

    def get_thread(self, key: ThreadKey) -> tuple[ChatMessage, ...]:
        """Return the thread's messages in insertion order (empty if never written)."""
        return tuple(self._threads.get(key, ()))

    def append_message(self, key: ThreadKey, sender_id: str, text: str) -> tuple[ChatMessage, ...]:
        """Append a message to the thread, creating it if needed."""
        message = ChatMessage(
            message_id=_new_id(),
            sender_id=sender_id,
            text=text,
            timestamp=_utcnow(),
        )
        self._threads.setdefault(key, []).append(message)
        return self.get_thread(key)

    def find_reserving_ngo(self, donor_id: str, item_id: str) -> str | None:
        """Return the NGO id of the conversation about a donor's item, if any."""
        for key in self._threads:
            if key.donor_id == donor_id and key.item_id == item_id:
                return key.ngo_id
        return None

    # ------------------------------------------------------------------
    # Reply bookkeeping
    # ------------------------------------------------------------------

    def begin_reply(self, key: ThreadKey) -> bool:
        """Mark a reply as in flight.  Returns False if one already is."""
        if key in self._pending_replies:
            return False
        self._pending_replies.add(key)
        return True

    def end_reply(self, key: ThreadKey) -> None:
        self._pending_replies.discard(key)

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def seed(
        self,
        users: Iterable[User] = (),
        items: Iterable[DonatedItem] = (),
        threads: dict[ThreadKey, list[ChatMessage]] | None = None,
    ) -> None:
        """Load fixed records with their ids preserved (skips known ids)."""
        known_users = {u.user_id for u in self._users}
        for user in users:
            if user.user_id not in known_users:
                self._users.append(user)
        known_items = {i.item_id for i in self._items}
        for item in items:
            if item.item_id not in known_items:
                self._items.append(item)
        for key, messages in (threads or {}).items():
            self._threads.setdefault(key, []).extend(messages)
        logger.info(
            "Entity store seeded | users={} items={} threads={}",
            len(self._users),
            len(self._items),
            len(self._threads),
        )
