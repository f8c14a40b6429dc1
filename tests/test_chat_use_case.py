"""Tests for ChatUseCase — reservation, greeting and simulated replies."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from aidbridge.application.exceptions import (
    EmptyMessageError,
    InvalidStatusTransitionError,
    PermissionDeniedError,
    ReplyPendingError,
)
from aidbridge.application.use_cases.chat import REPLY_FAILURE_TEXT, ChatUseCase
from aidbridge.domain.models import DonatedItem, ItemStatus, NewUser, User, UserType
from aidbridge.domain.thread_key import ThreadKey
from aidbridge.services.entity_store import EntityStore

# ---------------------------------------------------------------------------
# Opening a chat
# ---------------------------------------------------------------------------


class TestOpenChat:
    def test_reserves_item_and_greets(
        self,
        chat_use_case: ChatUseCase,
        store: EntityStore,
        ngo: User,
        donor: User,
        item: DonatedItem,
    ):
        opened = chat_use_case.open_chat(ngo, item)

        assert opened.item.status is ItemStatus.RESERVED
        assert store.get_item(item.item_id).status is ItemStatus.RESERVED
        assert opened.donor == donor
        assert opened.key == ThreadKey(donor.user_id, ngo.user_id, item.item_id)
        assert len(opened.messages) == 1
        assert opened.messages[0].sender_id == ngo.user_id
        assert not opened.messages[0].is_machine
        assert opened.messages[0].text == (
            "Hi Jane, I'm from GoodCause NGO and I'm interested in the Winter Coat you posted."
        )

    def test_listing_object_is_not_mutated(
        self, chat_use_case: ChatUseCase, ngo: User, item: DonatedItem
    ):
        chat_use_case.open_chat(ngo, item)
        assert item.status is ItemStatus.AVAILABLE

    def test_same_ngo_resumes_without_second_greeting(
        self, chat_use_case: ChatUseCase, ngo: User, item: DonatedItem
    ):
        first = chat_use_case.open_chat(ngo, item)
        again = chat_use_case.open_chat(ngo, item)
        assert again.key == first.key
        assert again.item.status is ItemStatus.RESERVED
        assert len(again.messages) == 1

    def test_resume_keeps_exchanged_messages(
        self, chat_use_case: ChatUseCase, store: EntityStore, ngo: User, item: DonatedItem
    ):
        opened = chat_use_case.open_chat(ngo, item)
        store.append_message(opened.key, ngo.user_id, "Still available on Friday?")

        resumed = chat_use_case.open_chat(ngo, item)
        assert [m.text for m in resumed.messages][-1] == "Still available on Friday?"

    def test_second_ngo_cannot_take_reserved_item(
        self,
        chat_use_case: ChatUseCase,
        store: EntityStore,
        ngo: User,
        donor: User,
        item: DonatedItem,
    ):
        chat_use_case.open_chat(ngo, item)
        rival = store.add_user(
            NewUser(email="help@rival.org", full_name="Rival NGO", user_type=UserType.NGO)
        )

        with pytest.raises(InvalidStatusTransitionError):
            chat_use_case.open_chat(rival, item)

        assert store.get_thread(ThreadKey.for_participants(rival, donor, item.item_id)) == ()
        assert store.find_reserving_ngo(donor.user_id, item.item_id) == ngo.user_id

    def test_donated_item_cannot_be_reopened(
        self,
        chat_use_case: ChatUseCase,
        store: EntityStore,
        ngo: User,
        donor: User,
        item: DonatedItem,
    ):
        chat_use_case.open_chat(ngo, item)
        chat_use_case.mark_donated(donor, item)

        with pytest.raises(InvalidStatusTransitionError):
            chat_use_case.open_chat(ngo, item)
        assert store.get_item(item.item_id).status is ItemStatus.DONATED

    def test_reserved_item_without_thread_rejected(
        self, chat_use_case: ChatUseCase, store: EntityStore, ngo: User, item: DonatedItem
    ):
        store.update_item_status(item.item_id, ItemStatus.RESERVED)
        with pytest.raises(InvalidStatusTransitionError):
            chat_use_case.open_chat(ngo, item)

    def test_donor_cannot_open(
        self, chat_use_case: ChatUseCase, store: EntityStore, donor: User, item: DonatedItem
    ):
        with pytest.raises(PermissionDeniedError):
            chat_use_case.open_chat(donor, item)
        assert store.get_item(item.item_id).status is ItemStatus.AVAILABLE

    def test_does_not_call_oracle(
        self, chat_use_case: ChatUseCase, oracle: AsyncMock, ngo: User, item: DonatedItem
    ):
        chat_use_case.open_chat(ngo, item)
        oracle.generate_reply.assert_not_called()


class TestResolveThread:
    def test_donor_sees_reserving_ngo(
        self, chat_use_case: ChatUseCase, donor: User, ngo: User, item: DonatedItem
    ):
        chat_use_case.open_chat(ngo, item)
        key, counterpart = chat_use_case.resolve_thread(donor, item)
        assert counterpart == ngo
        assert key.ngo_id == ngo.user_id

    def test_ngo_sees_own_thread(
        self, chat_use_case: ChatUseCase, donor: User, ngo: User, item: DonatedItem
    ):
        chat_use_case.open_chat(ngo, item)
        key, counterpart = chat_use_case.resolve_thread(ngo, item)
        assert counterpart == donor
        assert key == ThreadKey(donor.user_id, ngo.user_id, item.item_id)

    def test_ngo_without_opened_chat(
        self, chat_use_case: ChatUseCase, ngo: User, item: DonatedItem
    ):
        assert chat_use_case.resolve_thread(ngo, item) is None

    def test_donor_without_thread(self, chat_use_case: ChatUseCase, donor: User, item: DonatedItem):
        assert chat_use_case.resolve_thread(donor, item) is None

    def test_other_donor_gets_nothing(
        self, chat_use_case: ChatUseCase, store: EntityStore, ngo: User, item: DonatedItem
    ):
        chat_use_case.open_chat(ngo, item)
        stranger = store.add_user(NewUser(email="x@y.z", full_name="X", user_type=UserType.DONOR))
        assert chat_use_case.resolve_thread(stranger, item) is None


# ---------------------------------------------------------------------------
# Sending messages
# ---------------------------------------------------------------------------


class TestSendMessage:
    async def test_appends_human_then_machine(
        self, chat_use_case: ChatUseCase, ngo: User, donor: User, item: DonatedItem
    ):
        turn = await chat_use_case.send_message(ngo, donor, item, "When can I pick it up?")

        assert [m.text for m in turn.messages] == [
            "When can I pick it up?",
            "Sure, pickup on Saturday works.",
        ]
        assert turn.messages[0].sender_id == ngo.user_id
        assert turn.reply.sender_id == f"ai-{donor.user_id}"
        assert turn.reply.is_machine
        assert turn.reply_failed is False

    async def test_simulates_opposite_role(
        self,
        chat_use_case: ChatUseCase,
        oracle: AsyncMock,
        ngo: User,
        donor: User,
        item: DonatedItem,
    ):
        await chat_use_case.send_message(ngo, donor, item, "Hello")
        assert oracle.generate_reply.call_args[0][2] is UserType.DONOR

        await chat_use_case.send_message(donor, ngo, item, "Hello back")
        assert oracle.generate_reply.call_args[0][2] is UserType.NGO

    async def test_oracle_sees_history_including_new_message(
        self,
        chat_use_case: ChatUseCase,
        oracle: AsyncMock,
        ngo: User,
        donor: User,
        item: DonatedItem,
    ):
        chat_use_case.open_chat(ngo, item)
        await chat_use_case.send_message(ngo, donor, item, "Is it still clean?")

        history, passed_item, _ = oracle.generate_reply.call_args[0]
        assert passed_item is item
        assert len(history) == 2
        assert history[-1].text == "Is it still clean?"

    async def test_oracle_failure_appends_apology(
        self,
        chat_use_case: ChatUseCase,
        oracle: AsyncMock,
        store: EntityStore,
        ngo: User,
        donor: User,
        item: DonatedItem,
    ):
        oracle.generate_reply.side_effect = ConnectionError("network down")

        turn = await chat_use_case.send_message(ngo, donor, item, "Hello?")

        machine = [m for m in turn.messages if m.is_machine]
        assert len(machine) == 1
        assert machine[0].text == REPLY_FAILURE_TEXT
        assert turn.messages[0].text == "Hello?"
        assert turn.reply_failed is True

        # Input is accepted again after the failure.
        oracle.generate_reply.side_effect = None
        again = await chat_use_case.send_message(ngo, donor, item, "Retrying")
        assert again.reply.text == "Sure, pickup on Saturday works."
        assert len(store.get_thread(turn.key)) == 4

    async def test_blank_message_rejected(
        self, chat_use_case: ChatUseCase, store: EntityStore, ngo: User, donor: User, item: DonatedItem
    ):
        with pytest.raises(EmptyMessageError):
            await chat_use_case.send_message(ngo, donor, item, "   ")
        assert store.get_thread(ThreadKey.for_participants(ngo, donor, item.item_id)) == ()

    async def test_second_send_while_pending_rejected(
        self,
        chat_use_case: ChatUseCase,
        oracle: AsyncMock,
        ngo: User,
        donor: User,
        item: DonatedItem,
    ):
        release = asyncio.Event()

        async def slow_reply(*_args):
            await release.wait()
            return "Done"

        oracle.generate_reply.side_effect = slow_reply

        first = asyncio.create_task(chat_use_case.send_message(ngo, donor, item, "One"))
        await asyncio.sleep(0)
        with pytest.raises(ReplyPendingError):
            await chat_use_case.send_message(ngo, donor, item, "Two")

        release.set()
        turn = await first
        assert [m.text for m in turn.messages] == ["One", "Done"]


# ---------------------------------------------------------------------------
# Closing a donation
# ---------------------------------------------------------------------------


class TestMarkDonated:
    def test_reserved_item_becomes_donated(
        self,
        chat_use_case: ChatUseCase,
        store: EntityStore,
        ngo: User,
        donor: User,
        item: DonatedItem,
    ):
        chat_use_case.open_chat(ngo, item)
        donated = chat_use_case.mark_donated(donor, item)

        assert donated.status is ItemStatus.DONATED
        assert store.get_item(item.item_id) == donated
        assert item.status is ItemStatus.AVAILABLE

    def test_available_item_rejected(
        self, chat_use_case: ChatUseCase, store: EntityStore, donor: User, item: DonatedItem
    ):
        with pytest.raises(InvalidStatusTransitionError):
            chat_use_case.mark_donated(donor, item)
        assert store.get_item(item.item_id).status is ItemStatus.AVAILABLE

    def test_donated_twice_rejected(
        self, chat_use_case: ChatUseCase, ngo: User, donor: User, item: DonatedItem
    ):
        chat_use_case.open_chat(ngo, item)
        chat_use_case.mark_donated(donor, item)
        with pytest.raises(InvalidStatusTransitionError):
            chat_use_case.mark_donated(donor, item)

    def test_only_owner(self, chat_use_case: ChatUseCase, ngo: User, item: DonatedItem):
        chat_use_case.open_chat(ngo, item)
        with pytest.raises(PermissionDeniedError):
            chat_use_case.mark_donated(ngo, item)
