import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta

import uvicorn
from fastapi import FastAPI

from passfree.api.v1.passwordless import LOGIN_CALLBACK_PATH
from passfree.api.v1.router import api_router
from passfree.auth_strategies.passwordless import PasswordlessAuthenticationProvider
from passfree.core.clock import Clock, system_clock
from passfree.core.config import settings
from passfree.core.protection import DataProtectionProvider
from passfree.core.redis import redis_client
from passfree.external_services.email.factory import EmailServiceFactory
from passfree.services.login_service import PasswordlessLoginService
from passfree.services.passfree_service import DefaultPassFreeService, PassFreeService
from passfree.services.redemption_store import RedemptionStore, RedisRedemptionStore

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(f"Starting up {app.title}...")

    login_service: PasswordlessLoginService = app.state.login_service
    if settings.SINGLE_USE_LINKS and login_service.redemption_store is None:
        await redis_client.connect()
        login_service.redemption_store = RedisRedemptionStore(redis_client.client)

    yield

    logger.info(f"Shutting down {app.title}...")
    await redis_client.disconnect()


def create_app(
    clock: Clock = system_clock,
    passfree_service: PassFreeService | None = None,
    redemption_store: RedemptionStore | None = None,
) -> FastAPI:
    """
    Build the application with its collaborators wired explicitly.

    Key material is read once here and handed to the token provider.
    """
    data_protection_provider = DataProtectionProvider(settings.protection_keys)
    token_provider = PasswordlessAuthenticationProvider(clock, data_protection_provider)

    if passfree_service is None:
        passfree_service = DefaultPassFreeService(
            EmailServiceFactory.from_settings(settings),
            allowed_domains=list(settings.ALLOWED_EMAIL_DOMAINS),
            app_name=settings.APP_NAME,
        )

    login_service = PasswordlessLoginService(
        token_provider,
        passfree_service,
        callback_url=f"{settings.APP_URL.rstrip('/')}{LOGIN_CALLBACK_PATH}",
        link_ttl=timedelta(minutes=settings.LOGIN_LINK_TTL_MINUTES),
        redemption_store=redemption_store,
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=settings.APP_DESCRIPTION,
        lifespan=lifespan,
    )
    app.state.login_service = login_service

    app.include_router(api_router)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "passfree.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
