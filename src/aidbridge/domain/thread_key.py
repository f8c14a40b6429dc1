"""Composite identity of a donor/NGO conversation about one item."""

from __future__ import annotations

from typing import NamedTuple

from aidbridge.domain.models import User, UserType

_SEPARATOR = "_"


class ThreadKey(NamedTuple):
    """Ordered ``(donor_id, ngo_id, item_id)`` triple.

    The donor always comes first, so both participants derive the same key
    no matter who opens the conversation.  Equality and hashing are
    structural, which is what makes "one thread per triple" hold without
    any uniqueness check.
    """

    donor_id: str
    ngo_id: str
    item_id: str

    @classmethod
    def for_participants(cls, user: User, other: User, item_id: str) -> ThreadKey:
        """Build the key from a (current user, counterpart) pair in either order."""
        if user.user_type is UserType.DONOR:
            return cls(donor_id=user.user_id, ngo_id=other.user_id, item_id=item_id)
        return cls(donor_id=other.user_id, ngo_id=user.user_id, item_id=item_id)

    def __str__(self) -> str:
        return _SEPARATOR.join(self)
