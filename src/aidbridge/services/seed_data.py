"""Sample records loaded into the entity store at startup."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from aidbridge.domain.models import ChatMessage, DonatedItem, ItemStatus, User, UserType
from aidbridge.domain.thread_key import ThreadKey
from aidbridge.services.entity_store import EntityStore

SAMPLE_USERS = (
    User(
        user_id="donor1",
        email="donor@example.com",
        full_name="Jane Donor",
        user_type=UserType.DONOR,
    ),
    User(
        user_id="ngo1",
        email="ngo@example.com",
        full_name="GoodCause NGO",
        user_type=UserType.NGO,
        ngo_verification_id="NGO-12345",
        address="123 Charity Lane",
    ),
)


def _sample_items() -> list[DonatedItem]:
    return [
        DonatedItem(
            item_id="item1",
            donor_id="donor1",
            item_name="Winter Coat",
            description="A warm, gently used winter coat, size L.",
            category="Clothing",
            image_url="https://picsum.photos/seed/coat/400/300",
            status=ItemStatus.AVAILABLE,
        ),
        DonatedItem(
            item_id="item2",
            donor_id="donor1",
            item_name="Canned Goods",
            description="A box of assorted canned vegetables and soups.",
            category="Food",
            image_url="https://picsum.photos/seed/food/400/300",
            status=ItemStatus.RESERVED,
        ),
    ]


def _sample_threads() -> dict[ThreadKey, list[ChatMessage]]:
    return {
        ThreadKey("donor1", "ngo1", "item2"): [
            ChatMessage(
                message_id="msg1",
                sender_id="ngo1",
                text="Hi Jane, we're interested in the canned goods. Are they still available for pickup?",
                timestamp=datetime.now(UTC) - timedelta(minutes=5),
            )
        ]
    }


def seeded_store() -> EntityStore:
    """Return a fresh store holding the sample donor, NGO, items and thread."""
    store = EntityStore()
    store.seed(users=SAMPLE_USERS, items=_sample_items(), threads=_sample_threads())
    return store
