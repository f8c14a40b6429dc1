"""JWT helpers for the mock email-only login.

Provides token creation/verification and a FastAPI dependency that resolves
the ``Authorization: Bearer <token>`` header to a user in the entity store.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
from fastapi import HTTPException, Request
from loguru import logger

from aidbridge.config import Settings
from aidbridge.domain.models import User
from aidbridge.services.entity_store import EntityStore

ALGORITHM = "HS256"


# ---------------------------------------------------------------------------
# Token helpers
# ---------------------------------------------------------------------------


def create_token(user: User, settings: Settings) -> str:
    """Create a signed JWT carrying the user's id and role."""
    now = datetime.now(UTC)
    payload = {
        "sub": user.user_id,
        "name": user.full_name,
        "role": user.user_type.value,
        "exp": now + timedelta(hours=settings.jwt_expiry_hours),
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(token: str, settings: Settings) -> dict:
    """Decode and verify a JWT. Raises on invalid/expired tokens."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------


async def get_current_user(request: Request) -> User:
    """FastAPI dependency: the user named by the bearer token."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    token = auth_header[7:]
    try:
        claims = decode_token(token, request.app.state.settings)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        logger.warning("Invalid JWT presented")
        raise HTTPException(status_code=401, detail="Invalid token")

    store: EntityStore = request.app.state.store
    user = store.find_user_by_id(claims["sub"])
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user
