"""Tests for PasswordlessLoginService and its collaborators."""

import logging
import uuid
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse

import pytest

from passfree.auth_strategies.constants import NULL_USER, REDEEMED_LINK_PREFIX
from passfree.auth_strategies.passwordless import (
    PasswordlessAuthenticationProvider,
    TokenValidationResult,
)
from passfree.core.exceptions import (
    EmailDeliveryError,
    InvalidIdentityError,
    TokenAlreadyUsedError,
)
from passfree.core.protection import DataProtectionProvider
from passfree.services.identity import EmailIdentityValidator
from passfree.services.login_service import PasswordlessLoginService
from passfree.services.passfree_service import DefaultPassFreeService
from passfree.services.redemption_store import RedisRedemptionStore
from tests.conftest import (
    TEST_SECRET_KEY,
    FrozenClock,
    InMemoryRedemptionStore,
    RecordingPassFreeService,
)

CALLBACK_URL = "https://testserver/passfree/login/callback"
LINK_TTL = timedelta(minutes=15)


def _token_from_link(link: str) -> str:
    return parse_qs(urlparse(link).query)["token"][0]


@pytest.fixture
def login_service(provider, passfree_service) -> PasswordlessLoginService:
    return PasswordlessLoginService(
        provider,
        passfree_service,
        callback_url=CALLBACK_URL,
        link_ttl=LINK_TTL,
    )


class TestEmailIdentityValidator:
    def test_accepts_and_normalizes(self):
        assert EmailIdentityValidator().validate("Alice@Example.com") == "alice@example.com"

    @pytest.mark.parametrize("value", ["not-an-email", "", "alice@", "@example.com"])
    def test_rejects_bad_syntax(self, value):
        with pytest.raises(InvalidIdentityError):
            EmailIdentityValidator().validate(value)


class TestRequestLoginLink:
    async def test_sends_link_for_authorized_identity(
        self, login_service, passfree_service: RecordingPassFreeService
    ):
        correlation_token = await login_service.request_login_link("Alice@Example.com")

        assert len(passfree_service.sent) == 1
        user, link, valid_for = passfree_service.sent[0]
        assert user == "alice@example.com"
        assert link.startswith(f"{CALLBACK_URL}?token=")
        assert valid_for == LINK_TTL

        validation = await login_service.complete_login(_token_from_link(link), correlation_token)
        assert validation == (TokenValidationResult.SUCCESS, "alice@example.com")

    async def test_invalid_email_never_reaches_issuance(self, login_service, passfree_service):
        login_service.provider.generate_tokens = MagicMock()

        with pytest.raises(InvalidIdentityError):
            await login_service.request_login_link("not-an-email")

        login_service.provider.generate_tokens.assert_not_called()
        assert passfree_service.sent == []

    async def test_unauthorized_identity_gets_decoy(self, login_service, passfree_service):
        passfree_service.authorized = False

        correlation_token = await login_service.request_login_link("eve@example.com")

        assert correlation_token
        assert passfree_service.sent == []

    async def test_unauthorized_identity_is_never_issued_an_auth_token(
        self, login_service, passfree_service, provider, clock
    ):
        passfree_service.authorized = False
        login_service.provider.generate_tokens = MagicMock(wraps=provider.generate_tokens)

        decoy = await login_service.request_login_link("mallory@example.com")

        login_service.provider.generate_tokens.assert_not_called()
        # The decoy is well formed but no auth token will ever pair with it
        other = PasswordlessAuthenticationProvider(clock, DataProtectionProvider([TEST_SECRET_KEY]))
        real = other.generate_tokens("mallory@example.com", LINK_TTL, uuid.uuid4())
        assert provider.validate_tokens(real.auth_token, decoy) == (
            TokenValidationResult.CORRELATION_MISMATCH,
            NULL_USER,
        )

    async def test_delivery_failure_is_logged_and_looks_like_success(self, provider, caplog):
        failing = RecordingPassFreeService()
        failing.send_login_email = AsyncMock(side_effect=EmailDeliveryError("smtp down"))
        service = PasswordlessLoginService(
            provider, failing, callback_url=CALLBACK_URL, link_ttl=LINK_TTL
        )

        with caplog.at_level(logging.ERROR, logger="passfree.services.login_service"):
            correlation_token = await service.request_login_link("alice@example.com")

        assert correlation_token
        assert "smtp down" in caplog.text


class TestCompleteLogin:
    async def test_expired_link(self, login_service, passfree_service, clock: FrozenClock):
        correlation_token = await login_service.request_login_link("alice@example.com")
        auth_token = _token_from_link(passfree_service.sent[0][1])

        clock.advance(LINK_TTL + timedelta(seconds=1))
        validation = await login_service.complete_login(auth_token, correlation_token)

        assert validation == (TokenValidationResult.EXPIRED, NULL_USER)

    async def test_links_are_reusable_without_a_redemption_store(
        self, login_service, passfree_service
    ):
        correlation_token = await login_service.request_login_link("alice@example.com")
        auth_token = _token_from_link(passfree_service.sent[0][1])

        for _ in range(2):
            validation = await login_service.complete_login(auth_token, correlation_token)
            assert validation.result == TokenValidationResult.SUCCESS

    async def test_single_use_links(self, provider, passfree_service):
        service = PasswordlessLoginService(
            provider,
            passfree_service,
            callback_url=CALLBACK_URL,
            link_ttl=LINK_TTL,
            redemption_store=InMemoryRedemptionStore(),
        )
        correlation_token = await service.request_login_link("alice@example.com")
        auth_token = _token_from_link(passfree_service.sent[0][1])

        first = await service.complete_login(auth_token, correlation_token)
        assert first.result == TokenValidationResult.SUCCESS

        with pytest.raises(TokenAlreadyUsedError):
            await service.complete_login(auth_token, correlation_token)

    async def test_failed_validation_does_not_redeem(self, provider, passfree_service):
        store = InMemoryRedemptionStore()
        service = PasswordlessLoginService(
            provider,
            passfree_service,
            callback_url=CALLBACK_URL,
            link_ttl=LINK_TTL,
            redemption_store=store,
        )

        validation = await service.complete_login("garbage", "garbage")

        assert validation.result == TokenValidationResult.ERROR
        assert store.redeemed == set()


class TestRedisRedemptionStore:
    async def test_first_redemption_wins(self):
        redis = AsyncMock()
        redis.set.side_effect = [True, None]
        store = RedisRedemptionStore(redis)

        assert await store.redeem("correlation", timedelta(minutes=15)) is True
        assert await store.redeem("correlation", timedelta(minutes=15)) is False

        key = RedisRedemptionStore.key_for("correlation")
        assert key.startswith(REDEEMED_LINK_PREFIX)
        assert "correlation" not in key
        redis.set.assert_called_with(key, "redeemed", ex=900, nx=True)


class TestDefaultPassFreeService:
    async def test_allows_everyone_without_domain_list(self):
        service = DefaultPassFreeService(AsyncMock())

        assert await service.is_authorized_to_login("anyone@anywhere.org") is True

    async def test_domain_allow_list(self):
        service = DefaultPassFreeService(AsyncMock(), allowed_domains=["Example.com"])

        assert await service.is_authorized_to_login("alice@example.com") is True
        assert await service.is_authorized_to_login("eve@evil.example") is False

    async def test_send_login_email_renders_link(self):
        email_provider = AsyncMock()
        email_provider.send_email.return_value = True
        service = DefaultPassFreeService(email_provider, app_name="Acme")

        await service.send_login_email(
            "alice@example.com", "https://acme.test/cb?token=abc", timedelta(minutes=5)
        )

        to_emails, subject, html = email_provider.send_email.await_args.args
        assert to_emails == ["alice@example.com"]
        assert "Acme" in subject
        assert "https://acme.test/cb?token=abc" in html
        assert "5 minutes" in html

    async def test_send_failure_raises(self):
        email_provider = AsyncMock()
        email_provider.send_email.return_value = False
        service = DefaultPassFreeService(email_provider)

        with pytest.raises(EmailDeliveryError):
            await service.send_login_email("alice@example.com", "https://x", timedelta(minutes=5))
