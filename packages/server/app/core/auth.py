"""
Caller identity for Focus Desk.

Every request may carry ``Authorization: Bearer <JWT>``. The token's ``sub``
claim is the owner id that scopes projects, tasks and dependencies.

- Queries depend on ``get_optional_identity`` and degrade to empty results
  for anonymous callers.
- Mutations depend on ``require_identity`` and fail with 401.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader

from app.core.config import get_settings

log = structlog.get_logger()
settings = get_settings()

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_access_token(
    subject: str,
    *,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT for ``subject``. Used by local tooling and tests."""
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": subject,
        "iat": now,
        "exp": exp,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


# ---------------------------------------------------------------------------
# Identity dependencies
# ---------------------------------------------------------------------------

class Identity:
    """The authenticated caller."""

    def __init__(self, subject: str):
        self.subject = subject

    @property
    def user_id(self) -> str:
        """Owner id that scopes projects, tasks and dependencies."""
        return self.subject

    def __repr__(self) -> str:
        return f"Identity(subject={self.subject!r})"


def _identity_from_header(authorization: Optional[str]) -> Optional[Identity]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[7:].strip()
    try:
        payload = decode_jwt(token)
    except jwt.PyJWTError as exc:
        log.info("auth.token_rejected", reason=str(exc))
        return None
    subject = payload.get("sub")
    if not subject:
        return None
    return Identity(subject=subject)


async def get_optional_identity(
    request: Request,
    authorization: Optional[str] = Depends(api_key_header),
) -> Optional[Identity]:
    """Resolve the caller, or ``None`` when no valid token was sent."""
    identity = _identity_from_header(authorization)
    request.state.identity = identity
    return identity


async def require_identity(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Identity:
    """Mutations require an authenticated caller."""
    if identity is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return identity
