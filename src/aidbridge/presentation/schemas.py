"""HTTP request/response schemas (Pydantic models) for the REST API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from aidbridge.domain.models import ChatMessage, DonatedItem, ItemStatus, User, UserType
from aidbridge.domain.navigation import Page

# ---------------------------------------------------------------------------
# Users & auth
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    user_id: str
    email: str
    full_name: str
    user_type: UserType
    ngo_verification_id: str | None = None
    address: str | None = None

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(
            user_id=user.user_id,
            email=user.email,
            full_name=user.full_name,
            user_type=user.user_type,
            ngo_verification_id=user.ngo_verification_id,
            address=user.address,
        )


class LoginRequest(BaseModel):
    """Request body for POST /auth/login.  The password is not checked."""

    email: str = Field(min_length=1, description="Account email (case-insensitive)")
    password: str = Field(default="", description="Accepted but ignored (mock auth)")


class SignUpRequest(BaseModel):
    """Request body for POST /auth/signup."""

    full_name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    password: str = Field(min_length=1, description="Required by the form, never stored")
    user_type: UserType = UserType.DONOR
    ngo_verification_id: str | None = None
    address: str | None = None


class AuthResponse(BaseModel):
    """Response from login and sign-up: a token plus the page to show next."""

    token: str
    user: UserResponse
    landing_page: Page


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


class ItemCreateRequest(BaseModel):
    """Request body for POST /items."""

    item_name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: str = Field(default="Clothing", min_length=1)
    image_url: str = Field(min_length=1, description="Image reference for the listing")


class ItemResponse(BaseModel):
    item_id: str
    donor_id: str
    item_name: str
    description: str
    category: str
    image_url: str
    status: ItemStatus

    @classmethod
    def from_item(cls, item: DonatedItem) -> ItemResponse:
        return cls(
            item_id=item.item_id,
            donor_id=item.donor_id,
            item_name=item.item_name,
            description=item.description,
            category=item.category,
            image_url=item.image_url,
            status=item.status,
        )


class ItemDetailResponse(ItemResponse):
    donor_name: str


class DonorItemResponse(ItemResponse):
    """An item on the donor dashboard, with the reserving NGO when chat is possible."""

    reserved_by: UserResponse | None = None
    can_chat: bool = False


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    message_id: str
    sender_id: str
    text: str
    timestamp: datetime
    is_machine: bool

    @classmethod
    def from_message(cls, msg: ChatMessage) -> MessageResponse:
        return cls(
            message_id=msg.message_id,
            sender_id=msg.sender_id,
            text=msg.text,
            timestamp=msg.timestamp,
            is_machine=msg.is_machine,
        )


class ThreadResponse(BaseModel):
    """A conversation about one item between one donor and one NGO."""

    thread_id: str | None = Field(description="donor_ngo_item key; None when no thread exists")
    item: ItemResponse
    counterpart: UserResponse | None = None
    messages: list[MessageResponse] = Field(default_factory=list)


class SendMessageRequest(BaseModel):
    """Request body for POST /items/{item_id}/messages."""

    text: str = Field(min_length=1, description="The new message")


class SendMessageResponse(ThreadResponse):
    reply_failed: bool = False
