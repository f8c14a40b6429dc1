"""Item routes — listing, browsing, dashboards and closing a donation."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger

from aidbridge.application.exceptions import InvalidStatusTransitionError, PermissionDeniedError
from aidbridge.application.use_cases.chat import ChatUseCase
from aidbridge.auth import get_current_user
from aidbridge.domain.models import DonatedItem, ItemStatus, NewItem, User, UserType
from aidbridge.presentation.schemas import (
    DonorItemResponse,
    ItemCreateRequest,
    ItemDetailResponse,
    ItemResponse,
    UserResponse,
)
from aidbridge.services.entity_store import EntityStore

router = APIRouter(tags=["items"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def get_item_or_404(store: EntityStore, item_id: str) -> DonatedItem:
    item = store.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


def _require_role(user: User, role: UserType) -> None:
    if user.user_type is not role:
        raise HTTPException(status_code=403, detail=f"Only {role} accounts can do this")


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@router.post("/items", response_model=ItemResponse, status_code=201)
async def create_item(
    request: ItemCreateRequest,
    raw_request: Request,
    current_user: User = Depends(get_current_user),
):
    """List a new item for donation.  It starts out Available."""
    _require_role(current_user, UserType.DONOR)
    store: EntityStore = raw_request.app.state.store

    item = store.add_item(
        NewItem(
            donor_id=current_user.user_id,
            item_name=request.item_name,
            description=request.description,
            category=request.category,
            image_url=request.image_url,
        )
    )
    logger.info("POST /items | user={} item={}", current_user.user_id, item.item_id)
    return ItemResponse.from_item(item)


@router.get("/items", response_model=list[ItemResponse])
async def list_available(
    raw_request: Request,
    q: str = "",
    _current_user: User = Depends(get_current_user),
):
    """Available items whose name matches ``q`` (NGO dashboard)."""
    store: EntityStore = raw_request.app.state.store
    return [ItemResponse.from_item(i) for i in store.list_available_items(q)]


@router.get("/items/mine", response_model=list[DonorItemResponse])
async def list_mine(
    raw_request: Request,
    current_user: User = Depends(get_current_user),
):
    """The donor's own items, with the reserving NGO for reserved ones."""
    _require_role(current_user, UserType.DONOR)
    store: EntityStore = raw_request.app.state.store

    results: list[DonorItemResponse] = []
    for item in store.list_items_by_donor(current_user.user_id):
        ngo = None
        if item.status is ItemStatus.RESERVED:
            ngo_id = store.find_reserving_ngo(current_user.user_id, item.item_id)
            ngo = store.find_user_by_id(ngo_id) if ngo_id else None
        results.append(
            DonorItemResponse(
                **ItemResponse.from_item(item).model_dump(),
                reserved_by=UserResponse.from_user(ngo) if ngo else None,
                can_chat=ngo is not None,
            )
        )
    return results


@router.get("/items/{item_id}", response_model=ItemDetailResponse)
async def get_item(
    item_id: str,
    raw_request: Request,
    _current_user: User = Depends(get_current_user),
):
    store: EntityStore = raw_request.app.state.store
    item = get_item_or_404(store, item_id)

    donor = store.find_user_by_id(item.donor_id)
    if donor is None:
        raise HTTPException(status_code=404, detail="Donor not found.")
    return ItemDetailResponse(**ItemResponse.from_item(item).model_dump(), donor_name=donor.full_name)


# ---------------------------------------------------------------------------
# Closing a donation
# ---------------------------------------------------------------------------


@router.post("/items/{item_id}/donated", response_model=ItemResponse)
async def mark_donated(
    item_id: str,
    raw_request: Request,
    current_user: User = Depends(get_current_user),
):
    """Mark a reserved item as handed over."""
    store: EntityStore = raw_request.app.state.store
    uc: ChatUseCase = raw_request.app.state.chat_uc
    item = get_item_or_404(store, item_id)

    try:
        donated = uc.mark_donated(current_user, item)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except InvalidStatusTransitionError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    logger.info("POST /items/{}/donated | user={}", item_id, current_user.user_id)
    return ItemResponse.from_item(donated)
