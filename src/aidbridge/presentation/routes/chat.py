"""Chat routes — open a conversation, read it, take a turn."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger

from aidbridge.application.exceptions import (
    EmptyMessageError,
    InvalidStatusTransitionError,
    PermissionDeniedError,
    ReplyPendingError,
)
from aidbridge.application.use_cases.chat import ChatUseCase
from aidbridge.auth import get_current_user
from aidbridge.domain.models import User
from aidbridge.presentation.routes.items import get_item_or_404
from aidbridge.presentation.schemas import (
    ItemResponse,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
    ThreadResponse,
    UserResponse,
)
from aidbridge.services.entity_store import EntityStore

router = APIRouter(tags=["chat"])


@router.get("/health")
async def health():
    """Simple liveness / readiness check."""
    return {"status": "ok"}


@router.post("/items/{item_id}/chat", response_model=ThreadResponse)
async def open_chat(
    item_id: str,
    raw_request: Request,
    current_user: User = Depends(get_current_user),
):
    """NGO starts (or resumes) the conversation about an item, reserving it."""
    store: EntityStore = raw_request.app.state.store
    uc: ChatUseCase = raw_request.app.state.chat_uc
    item = get_item_or_404(store, item_id)

    try:
        opened = uc.open_chat(current_user, item)
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except InvalidStatusTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    logger.info(
        "POST /items/{}/chat | user={} thread={}", item_id, current_user.user_id, opened.key
    )
    return ThreadResponse(
        thread_id=str(opened.key),
        item=ItemResponse.from_item(opened.item),
        counterpart=UserResponse.from_user(opened.donor),
        messages=[MessageResponse.from_message(m) for m in opened.messages],
    )


@router.get("/items/{item_id}/messages", response_model=ThreadResponse)
async def get_messages(
    item_id: str,
    raw_request: Request,
    current_user: User = Depends(get_current_user),
):
    """The current user's conversation about an item (empty if none yet)."""
    store: EntityStore = raw_request.app.state.store
    uc: ChatUseCase = raw_request.app.state.chat_uc
    item = get_item_or_404(store, item_id)

    resolved = uc.resolve_thread(current_user, item)
    if resolved is None:
        return ThreadResponse(thread_id=None, item=ItemResponse.from_item(item))

    key, counterpart = resolved
    return ThreadResponse(
        thread_id=str(key),
        item=ItemResponse.from_item(item),
        counterpart=UserResponse.from_user(counterpart),
        messages=[MessageResponse.from_message(m) for m in store.get_thread(key)],
    )


@router.post("/items/{item_id}/messages", response_model=SendMessageResponse)
async def send_message(
    request: SendMessageRequest,
    item_id: str,
    raw_request: Request,
    current_user: User = Depends(get_current_user),
):
    """Send a message and receive the simulated counterpart's reply."""
    store: EntityStore = raw_request.app.state.store
    uc: ChatUseCase = raw_request.app.state.chat_uc
    item = get_item_or_404(store, item_id)

    resolved = uc.resolve_thread(current_user, item)
    if resolved is None:
        raise HTTPException(status_code=404, detail="No conversation about this item")
    _, counterpart = resolved

    logger.info(
        "POST /items/{}/messages | user={} msg={}",
        item_id,
        current_user.user_id,
        request.text[:60],
    )

    try:
        turn = await uc.send_message(current_user, counterpart, item, request.text)
    except EmptyMessageError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except ReplyPendingError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    return SendMessageResponse(
        thread_id=str(turn.key),
        item=ItemResponse.from_item(item),
        counterpart=UserResponse.from_user(counterpart),
        messages=[MessageResponse.from_message(m) for m in turn.messages],
        reply_failed=turn.reply_failed,
    )
