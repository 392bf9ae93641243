from typing import Protocol

from pydantic import ValidationError

from passfree.auth_strategies.passwordless import normalize_identity
from passfree.core.exceptions import InvalidIdentityError
from passfree.schemas.passwordless import LoginLinkRequest


class IdentityValidator(Protocol):
    def validate(self, raw_identity: str) -> str:
        """Return the normalized identity or raise InvalidIdentityError."""
        ...


class EmailIdentityValidator:
    """Syntactic email check, applied before any token is issued."""

    def validate(self, raw_identity: str) -> str:
        try:
            request = LoginLinkRequest(email=raw_identity)
        except ValidationError as exc:
            raise InvalidIdentityError("Email address is not valid") from exc
        return normalize_identity(str(request.email))
