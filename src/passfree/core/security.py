# core/security.py

import hashlib
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from passfree.core.config import settings
from passfree.core.exceptions import InvalidSessionError

SESSION_TOKEN_TYPE = "passfree_session"


class SecurityUtils:
    @staticmethod
    def fingerprint(value: str, length: int = 16) -> str:
        """Short non-reversible identifier for logs and redemption keys."""
        return hashlib.sha256(value.encode()).hexdigest()[:length]


class TokenManager:
    """Session JWTs issued after a login link has been validated."""

    @staticmethod
    def create_session_token(
        identity: str, expires_delta: timedelta | None = None, now: datetime | None = None
    ) -> str:
        issued_at = now or datetime.now(UTC)
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)

        to_encode: dict[str, Any] = {
            "sub": identity,
            "type": SESSION_TOKEN_TYPE,
            "exp": issued_at + expires_delta,
            "iat": issued_at,
            "iss": settings.JWT_ISSUER,
            "aud": settings.JWT_AUDIENCE,
        }
        return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM],
                audience=settings.JWT_AUDIENCE,
                issuer=settings.JWT_ISSUER,
            )
            return payload
        except JWTError as e:
            raise InvalidSessionError(f"Invalid token: {str(e)}") from e

    @staticmethod
    def verify_session_token(token: str) -> dict[str, Any]:
        payload = TokenManager.decode_token(token)

        if payload.get("type") != SESSION_TOKEN_TYPE:
            raise InvalidSessionError("Invalid token type")

        if not payload.get("sub"):
            raise InvalidSessionError("Session token has no subject")

        return payload


# Export instances
token_manager = TokenManager()
