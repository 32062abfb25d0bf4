"""Bearer access tokens (signed JWTs) for API authentication."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt

from app.config import settings
from app.exceptions import UnauthorizedError


def issue_access_token(
    user_id: UUID,
    role: str = "user",
    email: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Sign an access token for ``user_id`` with the configured issuer and audience."""
    now = datetime.now(timezone.utc)
    ttl = expires_minutes if expires_minutes is not None else settings.jwt_expiration
    claims: Dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl)).timestamp()),
    }
    if email:
        claims["email"] = email
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature, expiry, issuer and audience.

    Raises:
        UnauthorizedError: token is expired, forged or lacks a valid subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except ExpiredSignatureError as exc:
        raise UnauthorizedError("Token expired") from exc
    except JWTError as exc:
        raise UnauthorizedError("Invalid token") from exc

    subject = str(payload.get("sub", "")).strip()
    try:
        payload["sub"] = UUID(subject)
    except ValueError as exc:
        raise UnauthorizedError("Token subject is not a valid user id") from exc
    return payload
