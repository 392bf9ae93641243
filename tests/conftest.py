import os

# Settings are read at import time; configure them before passfree is imported.
# Security: test-only secrets.
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-at-least-32-characters-long")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-that-is-at-least-32-characters-long")
os.environ.setdefault("APP_URL", "https://testserver")

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import UTC, datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from passfree.auth_strategies.passwordless import PasswordlessAuthenticationProvider  # noqa: E402
from passfree.core.protection import DataProtectionProvider  # noqa: E402
from passfree.main import create_app  # noqa: E402
from passfree.services.passfree_service import PassFreeService  # noqa: E402

TEST_SECRET_KEY = os.environ["SECRET_KEY"]
T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, current: datetime = T0) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta


class RecordingPassFreeService(PassFreeService):
    """Authorizes according to a flag and keeps sent links instead of mailing them."""

    def __init__(self, authorized: bool = True) -> None:
        self.authorized = authorized
        self.sent: list[tuple[str, str, timedelta]] = []

    async def is_authorized_to_login(self, user: str) -> bool:
        return self.authorized

    async def send_login_email(self, user: str, login_link: str, valid_for: timedelta) -> None:
        self.sent.append((user, login_link, valid_for))


class InMemoryRedemptionStore:
    def __init__(self) -> None:
        self.redeemed: set[str] = set()

    async def redeem(self, correlation_token: str, ttl: timedelta) -> bool:
        if correlation_token in self.redeemed:
            return False
        self.redeemed.add(correlation_token)
        return True


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def data_protection_provider() -> DataProtectionProvider:
    return DataProtectionProvider([TEST_SECRET_KEY])


@pytest.fixture
def provider(
    clock: FrozenClock, data_protection_provider: DataProtectionProvider
) -> PasswordlessAuthenticationProvider:
    return PasswordlessAuthenticationProvider(clock, data_protection_provider)


@pytest.fixture
def passfree_service() -> RecordingPassFreeService:
    return RecordingPassFreeService()


@pytest.fixture
def app(clock: FrozenClock, passfree_service: RecordingPassFreeService) -> FastAPI:
    return create_app(clock=clock, passfree_service=passfree_service)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="https://testserver") as ac:
        yield ac
