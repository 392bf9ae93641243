# services/login_service.py
"""
PasswordlessLoginService
========================
Orchestrates a login attempt around the stateless token protocol:

  request_login_link(email)
    └─ IdentityValidator.validate()              ← syntax check, nothing issued on failure
    └─ PassFreeService.is_authorized_to_login()  ← refused: decoy correlation token only
    └─ PasswordlessAuthenticationProvider.generate_tokens()
    └─ PassFreeService.send_login_email()        ← link carries the auth token
    └─ returns the correlation token for the browser cookie

  complete_login(auth_token, correlation_token)
    └─ PasswordlessAuthenticationProvider.validate_tokens()
    └─ RedemptionStore.redeem()                  ← only when single-use links are enabled
"""

import logging
import uuid
from datetime import timedelta
from urllib.parse import urlencode

from passfree.auth_strategies.constants import AUTH_TOKEN_QUERY_PARAM
from passfree.auth_strategies.passwordless import (
    PasswordlessAuthenticationProvider,
    TokenValidation,
    TokenValidationResult,
)
from passfree.core.exceptions import EmailDeliveryError, TokenAlreadyUsedError
from passfree.core.security import SecurityUtils
from passfree.services.identity import EmailIdentityValidator, IdentityValidator
from passfree.services.passfree_service import PassFreeService
from passfree.services.redemption_store import RedemptionStore

logger = logging.getLogger(__name__)


class PasswordlessLoginService:
    def __init__(
        self,
        provider: PasswordlessAuthenticationProvider,
        passfree_service: PassFreeService,
        callback_url: str,
        link_ttl: timedelta,
        identity_validator: IdentityValidator | None = None,
        redemption_store: RedemptionStore | None = None,
    ) -> None:
        self.provider = provider
        self.passfree_service = passfree_service
        self.callback_url = callback_url
        self.link_ttl = link_ttl
        self.identity_validator = identity_validator or EmailIdentityValidator()
        self.redemption_store = redemption_store

    def build_login_link(self, auth_token: str) -> str:
        return f"{self.callback_url}?{urlencode({AUTH_TOKEN_QUERY_PARAM: auth_token})}"

    async def request_login_link(self, raw_identity: str) -> str:
        """
        Issue a login link and dispatch it.

        Returns the correlation token to store on the requesting client.
        Identities that are not authorized get a decoy correlation token and
        no auth token is ever issued for them. A failed dispatch is logged and
        answered the same way, so the response does not reveal which addresses
        may log in.

        Raises:
          - InvalidIdentityError  if the identity fails syntax validation
        """
        identity = self.identity_validator.validate(raw_identity)
        subject = SecurityUtils.fingerprint(identity)
        correlation_id = uuid.uuid4()

        if not await self.passfree_service.is_authorized_to_login(identity):
            logger.warning(f"[PassFree] Link requested for unauthorized identity: {subject}")
            return self.provider.generate_correlation_token(correlation_id)

        tokens = self.provider.generate_tokens(identity, self.link_ttl, correlation_id)

        try:
            await self.passfree_service.send_login_email(
                identity, self.build_login_link(tokens.auth_token), self.link_ttl
            )
        except EmailDeliveryError as exc:
            # Log the real error server-side but never leak it to the caller
            logger.error(f"[PassFree] Login email dispatch failed. user={subject}: {exc.message}")
            return tokens.correlation_token

        logger.info(f"[PassFree] Login link dispatched. user={subject} correlation_id={correlation_id}")
        return tokens.correlation_token

    async def complete_login(self, auth_token: str, correlation_token: str) -> TokenValidation:
        """
        Validate the token pair presented by the browser.

        Raises:
          - TokenAlreadyUsedError  if single-use links are enabled and the
            attempt was already redeemed
        """
        validation = self.provider.validate_tokens(auth_token, correlation_token)

        if validation.result != TokenValidationResult.SUCCESS:
            logger.warning(f"[PassFree] Login link rejected. result={validation.result.value}")
            return validation

        if self.redemption_store is not None:
            if not await self.redemption_store.redeem(correlation_token, self.link_ttl):
                raise TokenAlreadyUsedError()

        logger.info(f"[PassFree] User authenticated. user={SecurityUtils.fingerprint(validation.user)}")
        return validation
