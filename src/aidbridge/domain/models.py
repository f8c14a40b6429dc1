"""Domain entities and value objects.

These are the core data structures of the donation domain, independent of
any infrastructure or framework concerns.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

AI_SENDER_PREFIX = "ai-"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class UserType(StrEnum):
    DONOR = "Donor"
    NGO = "NGO"

    @property
    def counterpart(self) -> UserType:
        """The role on the other side of a donor/NGO conversation."""
        return _COUNTERPART[self]


_COUNTERPART = {
    UserType.DONOR: UserType.NGO,
    UserType.NGO: UserType.DONOR,
}


class ItemStatus(StrEnum):
    AVAILABLE = "Available"
    RESERVED = "Reserved"
    DONATED = "Donated"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class User:
    user_id: str
    email: str
    full_name: str
    user_type: UserType
    ngo_verification_id: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class NewUser:
    """A sign-up candidate (no id assigned yet)."""

    email: str
    full_name: str
    user_type: UserType
    ngo_verification_id: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class DonatedItem:
    item_id: str
    donor_id: str
    item_name: str
    description: str
    category: str
    image_url: str
    status: ItemStatus = ItemStatus.AVAILABLE


@dataclass(frozen=True)
class NewItem:
    """An item listing candidate submitted by a donor."""

    donor_id: str
    item_name: str
    description: str
    category: str
    image_url: str


@dataclass(frozen=True)
class ChatMessage:
    message_id: str
    sender_id: str
    text: str
    timestamp: datetime

    @property
    def is_machine(self) -> bool:
        """True when the message was generated by the reply agent."""
        return self.sender_id.startswith(AI_SENDER_PREFIX)


def synthetic_sender_id(user_id: str) -> str:
    """Sender id for a machine-generated message speaking for *user_id*."""
    return f"{AI_SENDER_PREFIX}{user_id}"
