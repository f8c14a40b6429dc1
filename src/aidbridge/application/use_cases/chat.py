"""Chat use case — reservation, greeting and simulated replies.

Contains the business logic for a donor/NGO conversation about an item:
opening the chat, taking a human turn, asking the reply oracle for the
counterpart's answer and closing the donation.  It has **no dependency on
FastAPI** and can be driven from any transport.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from aidbridge.application.exceptions import (
    EmptyMessageError,
    InvalidStatusTransitionError,
    PermissionDeniedError,
    ReplyPendingError,
)
from aidbridge.domain.models import (
    ChatMessage,
    DonatedItem,
    ItemStatus,
    User,
    UserType,
    synthetic_sender_id,
)
from aidbridge.domain.protocols import IEntityStore, IReplyOracle
from aidbridge.domain.thread_key import ThreadKey
from aidbridge.telemetry import reply_span

REPLY_FAILURE_TEXT = "I'm sorry, I'm having trouble connecting right now. Please try again later."


def greeting_text(donor: User, ngo: User, item: DonatedItem) -> str:
    return (
        f"Hi {donor.full_name}, I'm from {ngo.full_name} and I'm interested "
        f"in the {item.item_name} you posted."
    )


@dataclass
class OpenedChat:
    """A conversation as it stands after an NGO opens or resumes it."""

    key: ThreadKey
    item: DonatedItem
    donor: User
    messages: tuple[ChatMessage, ...]


@dataclass
class ChatTurn:
    """Outcome of a single human turn."""

    key: ThreadKey
    messages: tuple[ChatMessage, ...]
    reply: ChatMessage
    reply_failed: bool = False


class ChatUseCase:
    """Orchestrates conversations between a human and the simulated counterpart.

    Parameters
    ----------
    store:
        The entity store holding users, items and threads.
    oracle:
        Produces the counterpart's replies.
    """

    def __init__(self, store: IEntityStore, oracle: IReplyOracle) -> None:
        self.store = store
        self.oracle = oracle

    # ------------------------------------------------------------------
    # Opening a conversation
    # ------------------------------------------------------------------

    def open_chat(self, ngo: User, item: DonatedItem) -> OpenedChat:
        """Reserve *item* for *ngo* and greet the donor, or resume the NGO's thread.

        Only an Available item can be reserved.  A Reserved item can be
        reopened solely by the NGO whose conversation reserved it.

        Raises:
            PermissionDeniedError: If *ngo* is not an NGO.
            LookupError: If the item or its donor no longer exists.
            InvalidStatusTransitionError: If the item is not open to this NGO.
        """
        if ngo.user_type is not UserType.NGO:
            raise PermissionDeniedError("Only NGOs can start a chat about an item.")

        current = self.store.get_item(item.item_id)
        if current is None:
            raise LookupError("Item not found.")
        donor = self.store.find_user_by_id(current.donor_id)
        if donor is None:
            raise LookupError("Donor not found.")

        key = ThreadKey.for_participants(ngo, donor, current.item_id)
        messages = self.store.get_thread(key)

        if current.status is ItemStatus.AVAILABLE:
            current = self.store.update_item_status(current.item_id, ItemStatus.RESERVED)
        elif current.status is ItemStatus.RESERVED and messages:
            logger.info("Resumed chat {}", key)
            return OpenedChat(key=key, item=current, donor=donor, messages=messages)
        else:
            raise InvalidStatusTransitionError(
                f"Item is {current.status} and cannot be reserved by this NGO."
            )

        if not messages:
            messages = self.store.append_message(
                key, ngo.user_id, greeting_text(donor, ngo, current)
            )
            logger.info("Opened chat {} with greeting", key)
        return OpenedChat(key=key, item=current, donor=donor, messages=tuple(messages))

    def resolve_thread(self, user: User, item: DonatedItem) -> tuple[ThreadKey, User] | None:
        """Return the existing thread key and counterpart for *user* on *item*.

        NGOs only see a thread they opened; donors see the thread of the
        NGO that reserved their item.
        """
        if user.user_type is UserType.NGO:
            donor = self.store.find_user_by_id(item.donor_id)
            if donor is None:
                return None
            key = ThreadKey.for_participants(user, donor, item.item_id)
            if not self.store.get_thread(key):
                return None
            return key, donor

        if item.donor_id != user.user_id:
            return None
        ngo_id = self.store.find_reserving_ngo(user.user_id, item.item_id)
        ngo = self.store.find_user_by_id(ngo_id) if ngo_id else None
        if ngo is None:
            return None
        return ThreadKey.for_participants(user, ngo, item.item_id), ngo

    # ------------------------------------------------------------------
    # Taking a turn
    # ------------------------------------------------------------------

    async def send_message(
        self, user: User, counterpart: User, item: DonatedItem, text: str
    ) -> ChatTurn:
        """Append the human's message and the simulated counterpart's reply.

        A failing oracle never propagates: the reply becomes
        ``REPLY_FAILURE_TEXT`` and the thread stays open for more input.

        Raises:
            EmptyMessageError: If *text* is blank.
            ReplyPendingError: If a reply on this thread is still in flight.
        """
        if not text.strip():
            raise EmptyMessageError("message must not be empty")

        key = ThreadKey.for_participants(user, counterpart, item.item_id)
        if not self.store.begin_reply(key):
            raise ReplyPendingError("A reply to the previous message is still pending.")

        role = user.user_type.counterpart
        failed = False
        try:
            with logger.contextualize(thread=str(key)), reply_span(key, role) as span:
                history = self.store.append_message(key, user.user_id, text)
                try:
                    reply_text = await self.oracle.generate_reply(history, item, role)
                except Exception:
                    logger.exception("Reply generation failed")
                    reply_text = REPLY_FAILURE_TEXT
                    failed = True
                span.set_attribute("aidbridge.reply_failed", failed)

                messages = self.store.append_message(
                    key, synthetic_sender_id(counterpart.user_id), reply_text
                )
                logger.info("Chat turn | role={} failed={}", role, failed)
        finally:
            self.store.end_reply(key)

        return ChatTurn(key=key, messages=tuple(messages), reply=messages[-1], reply_failed=failed)

    # ------------------------------------------------------------------
    # Closing the donation
    # ------------------------------------------------------------------

    def mark_donated(self, donor: User, item: DonatedItem) -> DonatedItem:
        """Move a reserved item to its terminal Donated status.

        Raises:
            LookupError: If the item no longer exists.
            PermissionDeniedError: If *donor* does not own the item.
            InvalidStatusTransitionError: If the item is not Reserved.
        """
        current = self.store.get_item(item.item_id)
        if current is None:
            raise LookupError("Item not found.")
        if current.donor_id != donor.user_id:
            raise PermissionDeniedError("Only the donor who listed the item can close it.")
        if current.status is not ItemStatus.RESERVED:
            raise InvalidStatusTransitionError(
                f"Item is {current.status}; only Reserved items can be marked Donated."
            )
        return self.store.update_item_status(current.item_id, ItemStatus.DONATED)
