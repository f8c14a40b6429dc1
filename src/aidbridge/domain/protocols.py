"""Domain service interfaces (ports).

These protocols define the contracts that infrastructure implementations
must satisfy.  The application layer depends on these abstractions,
not on concrete classes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from aidbridge.domain.models import (
    ChatMessage,
    DonatedItem,
    ItemStatus,
    NewItem,
    NewUser,
    User,
    UserType,
)
from aidbridge.domain.thread_key import ThreadKey

# ---------------------------------------------------------------------------
# Entity store
# ---------------------------------------------------------------------------


@runtime_checkable
class IEntityStore(Protocol):
    """Interface for the users / items / chat threads repository.

    Implementations: EntityStore (in-memory).
    """

    def add_user(self, candidate: NewUser) -> User: ...

    def find_user_by_email(self, email: str) -> User | None: ...

    def find_user_by_id(self, user_id: str) -> User | None: ...

    def add_item(self, candidate: NewItem) -> DonatedItem: ...

    def get_item(self, item_id: str) -> DonatedItem | None: ...

    def update_item_status(self, item_id: str, status: ItemStatus) -> DonatedItem | None: ...

    def list_available_items(self, query: str = "") -> list[DonatedItem]: ...

    def list_items_by_donor(self, donor_id: str) -> list[DonatedItem]: ...

    def get_thread(self, key: ThreadKey) -> Sequence[ChatMessage]: ...

    def append_message(self, key: ThreadKey, sender_id: str, text: str) -> Sequence[ChatMessage]: ...

    def find_reserving_ngo(self, donor_id: str, item_id: str) -> str | None: ...

    def begin_reply(self, key: ThreadKey) -> bool: ...

    def end_reply(self, key: ThreadKey) -> None: ...


# ---------------------------------------------------------------------------
# Reply oracle
# ---------------------------------------------------------------------------


@runtime_checkable
class IReplyOracle(Protocol):
    """Produces the next message of the simulated party in a conversation.

    Implementations: PydanticAIReplyOracle.  Any exception raised is treated
    as a non-fatal failure by the caller.
    """

    async def generate_reply(
        self,
        history: Sequence[ChatMessage],
        item: DonatedItem,
        role: UserType,
    ) -> str: ...
