from datetime import UTC, datetime

from fastapi import HTTPException, Request, status

from passfree.core.config import settings
from passfree.core.exceptions import InvalidSessionError
from passfree.core.security import token_manager
from passfree.schemas.passwordless import CurrentUserResponse
from passfree.services.login_service import PasswordlessLoginService


def get_login_service(request: Request) -> PasswordlessLoginService:
    return request.app.state.login_service


async def get_current_user(request: Request) -> CurrentUserResponse:
    """
    Dependency to get the current authenticated user from the session cookie.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        payload = token_manager.verify_session_token(token)
    except InvalidSessionError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
        ) from e

    return CurrentUserResponse(
        email=payload["sub"],
        expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
    )
