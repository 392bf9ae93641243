# auth_strategies/passwordless.py
"""
Passwordless Authentication Tokens
==================================
Flow:
  1. generate_tokens(user, expires_in, correlation_id)
       └─ AuthToken        {email_address, valid_until, correlation_id} → protect
       └─ CorrelationToken {correlation_id}                             → protect
     generate_correlation_token(correlation_id)
       └─ CorrelationToken alone, for attempts that never get a link
  2. The auth token travels in the emailed link, the correlation token in a
     cookie on the browser that asked for the link.
  3. validate_tokens(auth_token, correlation_token)
       └─ unprotect + parse both      → ERROR on any failure
       └─ correlation ids must match  → CORRELATION_MISMATCH
       └─ valid_until >= now          → EXPIRED otherwise
       └─ SUCCESS with the identity from the auth token

Nothing is stored server-side. Everything needed to validate a login attempt
lives inside the two protected strings.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Generic, NamedTuple, TypeVar

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, ValidationError

from passfree.auth_strategies.constants import NULL_USER, PASSWORDLESS_AUTH_PURPOSE
from passfree.core.clock import Clock
from passfree.core.exceptions import InvalidIdentityError, InvalidValidityError, ProtectionError
from passfree.core.protection import DataProtectionProvider

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class TokenValidationResult(str, Enum):
    SUCCESS = "success"
    CORRELATION_MISMATCH = "correlation_mismatch"
    EXPIRED = "expired"
    ERROR = "error"


class AuthToken(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    email_address: str = Field(..., min_length=1)
    valid_until: AwareDatetime
    correlation_id: uuid.UUID


class CorrelationToken(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    correlation_id: uuid.UUID


class IssuedTokens(NamedTuple):
    auth_token: str
    correlation_token: str


class TokenValidation(NamedTuple):
    result: TokenValidationResult
    user: str


@dataclass(frozen=True)
class Decoded(Generic[T]):
    """Outcome of a single unprotect-and-parse step."""

    value: T | None = None
    error: str | None = None


def normalize_identity(user: str) -> str:
    return user.strip().lower()


def _rejected(result: TokenValidationResult) -> TokenValidation:
    return TokenValidation(result, NULL_USER)


class PasswordlessAuthenticationProvider:
    """
    Issues and validates the auth/correlation token pair for one login attempt.

    Stateless and safe to share between concurrent requests. The clock and the
    protection provider are injected so tests can pin time and keys.
    """

    def __init__(
        self,
        clock: Clock,
        data_protection_provider: DataProtectionProvider,
        purpose: str = PASSWORDLESS_AUTH_PURPOSE,
    ) -> None:
        self.clock = clock
        self._protector = data_protection_provider.create_protector(purpose)

    def generate_tokens(
        self,
        user: str,
        expires_in: timedelta,
        correlation_id: uuid.UUID,
    ) -> IssuedTokens:
        """
        Build and protect the token pair.

        Raises:
          - InvalidIdentityError  if the identity is empty
          - InvalidValidityError  if expires_in is not a positive duration
          - TypeError             if correlation_id is not a UUID
        """
        identity = normalize_identity(user) if isinstance(user, str) else ""
        if not identity:
            raise InvalidIdentityError("Identity must be a non-empty string")

        if not isinstance(expires_in, timedelta) or expires_in <= timedelta(0):
            raise InvalidValidityError()

        if not isinstance(correlation_id, uuid.UUID):
            raise TypeError("correlation_id must be a uuid.UUID")

        valid_until = self.clock.now() + expires_in

        auth_token = AuthToken(
            email_address=identity,
            valid_until=valid_until,
            correlation_id=correlation_id,
        )

        return IssuedTokens(
            auth_token=self._protector.protect(auth_token.model_dump_json()),
            correlation_token=self.generate_correlation_token(correlation_id),
        )

    def generate_correlation_token(self, correlation_id: uuid.UUID) -> str:
        """Protect a correlation token with no auth token to pair it with."""
        if not isinstance(correlation_id, uuid.UUID):
            raise TypeError("correlation_id must be a uuid.UUID")

        correlation_token = CorrelationToken(correlation_id=correlation_id)
        return self._protector.protect(correlation_token.model_dump_json())

    def validate_tokens(
        self,
        auth_token_string: str,
        correlation_token_string: str,
    ) -> TokenValidation:
        """
        Validate an auth and correlation token.

        Never raises. Any non-SUCCESS result carries NULL_USER as the identity.
        """
        try:
            return self._validate(auth_token_string, correlation_token_string)
        except Exception as exc:
            logger.error(f"[PassFree] Unexpected error during token validation: {exc}", exc_info=True)
            return _rejected(TokenValidationResult.ERROR)

    def _validate(self, auth_token_string: str, correlation_token_string: str) -> TokenValidation:
        auth = self._decode(auth_token_string, AuthToken)
        correlation = self._decode(correlation_token_string, CorrelationToken)

        auth_token, correlation_token = auth.value, correlation.value
        if auth_token is None or correlation_token is None:
            logger.error(
                f"[PassFree] Token decode failed. auth={auth.error or 'ok'} "
                f"correlation={correlation.error or 'ok'}"
            )
            return _rejected(TokenValidationResult.ERROR)

        # Correlation identifiers must match
        if auth_token.correlation_id != correlation_token.correlation_id:
            return _rejected(TokenValidationResult.CORRELATION_MISMATCH)

        # Still valid at exactly valid_until
        if auth_token.valid_until < self.clock.now():
            return _rejected(TokenValidationResult.EXPIRED)

        return TokenValidation(TokenValidationResult.SUCCESS, auth_token.email_address)

    def _decode(self, protected: str, model: type[T]) -> Decoded[T]:
        try:
            payload = self._protector.unprotect(protected)
        except ProtectionError as exc:
            return Decoded(error=f"{model.__name__}: {exc.message}")

        try:
            return Decoded(value=model.model_validate_json(payload))
        except ValidationError as exc:
            return Decoded(error=f"{model.__name__}: {exc.error_count()} invalid field(s)")
