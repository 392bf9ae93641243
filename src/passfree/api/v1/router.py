from fastapi import APIRouter, Depends

from passfree.api.deps import get_current_user
from passfree.api.v1 import passwordless
from passfree.core.config import settings
from passfree.core.redis import check_redis
from passfree.schemas.passwordless import CurrentUserResponse, HealthResponse

api_router = APIRouter()

api_router.include_router(passwordless.router)


@api_router.get("/me", response_model=CurrentUserResponse)
async def read_current_user(
    current_user: CurrentUserResponse = Depends(get_current_user),
) -> CurrentUserResponse:
    return current_user


@api_router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    if settings.SINGLE_USE_LINKS:
        try:
            await check_redis()
        except Exception as e:
            return HealthResponse(status="unhealthy", error=str(e))
    return HealthResponse(status="healthy")
