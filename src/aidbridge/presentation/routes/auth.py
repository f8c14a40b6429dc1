"""Auth routes — mock login, sign-up and the current user."""

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger

from aidbridge.application.exceptions import DuplicateEmailError
from aidbridge.auth import create_token, get_current_user
from aidbridge.domain.models import NewUser, User
from aidbridge.domain.navigation import landing_page
from aidbridge.presentation.schemas import AuthResponse, LoginRequest, SignUpRequest, UserResponse
from aidbridge.services.entity_store import EntityStore

router = APIRouter(tags=["auth"])


def _auth_response(user: User, raw_request: Request) -> AuthResponse:
    return AuthResponse(
        token=create_token(user, raw_request.app.state.settings),
        user=UserResponse.from_user(user),
        landing_page=landing_page(user.user_type),
    )


@router.post("/auth/login", response_model=AuthResponse)
async def login(request: LoginRequest, raw_request: Request):
    """Log in by email lookup.  Any password is accepted."""
    store: EntityStore = raw_request.app.state.store

    user = store.find_user_by_email(request.email)
    if not user:
        raise HTTPException(
            status_code=401,
            detail="User not found. Please check the email or sign up.",
        )

    logger.info("POST /auth/login | user={} role={}", user.user_id, user.user_type)
    return _auth_response(user, raw_request)


@router.post("/auth/signup", response_model=AuthResponse, status_code=201)
async def signup(request: SignUpRequest, raw_request: Request):
    """Create an account and log the new user in."""
    store: EntityStore = raw_request.app.state.store

    try:
        user = store.add_user(
            NewUser(
                email=request.email,
                full_name=request.full_name,
                user_type=request.user_type,
                ngo_verification_id=request.ngo_verification_id,
                address=request.address,
            )
        )
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    logger.info("POST /auth/signup | user={} role={}", user.user_id, user.user_type)
    return _auth_response(user, raw_request)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return UserResponse.from_user(current_user)
