# api/v1/passwordless.py
"""
Passwordless login endpoints
============================

GET  {LOGIN_PATH}
  - Renders the email form

POST {LOGIN_PATH}
  - Accepts the form field ``email``
  - Issues the token pair, emails the link, stores the correlation token in a cookie
  - Always redirects to the "link sent" page for well-formed addresses, even when
    the identity is refused or the email could not be sent (prevents enumeration)

GET  {LOGIN_PATH}/callback?token=<auth token>
  - Validates the link token against the correlation cookie
  - On success sets the session cookie; on any failure redirects with a generic error

POST {LOGOUT_PATH}
  - Clears the session cookie
"""

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from passfree.api.deps import get_login_service
from passfree.auth_strategies.constants import (
    AUTH_TOKEN_QUERY_PARAM,
    ERROR_INVALID_EMAIL,
    ERROR_LOGIN_FAILED,
)
from passfree.auth_strategies.passwordless import TokenValidationResult
from passfree.core.config import settings
from passfree.core.exceptions import InvalidIdentityError, TokenAlreadyUsedError
from passfree.core.security import token_manager
from passfree.core.templates import jinja_env
from passfree.services.login_service import PasswordlessLoginService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["passwordless"])

LOGIN_SENT_PATH = f"{settings.LOGIN_PATH}/sent"
LOGIN_CALLBACK_PATH = f"{settings.LOGIN_PATH}/callback"

_ERROR_MESSAGES = {
    ERROR_INVALID_EMAIL: "Please enter a valid email address.",
    ERROR_LOGIN_FAILED: "We could not sign you in. Please request a new link.",
}


def _render(template_name: str, **context: object) -> HTMLResponse:
    template = jinja_env.get_template(template_name)
    return HTMLResponse(
        template.render(
            title=settings.PAGE_TITLE,
            css_class=settings.CUSTOM_CSS_CLASS,
            **context,
        )
    )


def _failure_redirect(error_code: str) -> RedirectResponse:
    url = f"{settings.DEFAULT_REDIRECT_PATH}?{urlencode({'error': error_code})}"
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def _login_failed() -> RedirectResponse:
    response = _failure_redirect(ERROR_LOGIN_FAILED)
    response.delete_cookie(settings.CORRELATION_COOKIE_NAME, path="/")
    return response


async def login_page(error: str | None = Query(default=None)) -> HTMLResponse:
    return _render(
        "login.html",
        login_path=settings.LOGIN_PATH,
        error_message=_ERROR_MESSAGES.get(error or ""),
    )


# The hosting app's login page and the PassFree form may live at the same path
for _path in dict.fromkeys([settings.LOGIN_PATH, settings.DEFAULT_REDIRECT_PATH]):
    router.add_api_route(
        _path,
        login_page,
        methods=["GET"],
        response_class=HTMLResponse,
        summary="Render the passwordless login form",
    )


@router.post(
    settings.LOGIN_PATH,
    status_code=status.HTTP_303_SEE_OTHER,
    summary="Request a sign-in link",
)
async def request_login_link(
    email: str = Form(default=""),
    login_service: PasswordlessLoginService = Depends(get_login_service),
) -> RedirectResponse:
    try:
        correlation_token = await login_service.request_login_link(email)
    except InvalidIdentityError:
        return _failure_redirect(ERROR_INVALID_EMAIL)

    response = RedirectResponse(url=LOGIN_SENT_PATH, status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        settings.CORRELATION_COOKIE_NAME,
        correlation_token,
        max_age=int(login_service.link_ttl.total_seconds()),
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    return response


@router.get(LOGIN_SENT_PATH, response_class=HTMLResponse, summary="Sign-in link sent")
async def login_link_sent(
    login_service: PasswordlessLoginService = Depends(get_login_service),
) -> HTMLResponse:
    return _render(
        "login_sent.html",
        valid_minutes=int(login_service.link_ttl.total_seconds() // 60),
    )


@router.get(LOGIN_CALLBACK_PATH, summary="Complete a passwordless login")
async def complete_login(
    request: Request,
    token: str = Query(default="", alias=AUTH_TOKEN_QUERY_PARAM),
    login_service: PasswordlessLoginService = Depends(get_login_service),
) -> RedirectResponse:
    correlation_token = request.cookies.get(settings.CORRELATION_COOKIE_NAME, "")

    try:
        validation = await login_service.complete_login(token, correlation_token)
    except TokenAlreadyUsedError:
        logger.warning("[PassFree] Login link replayed after redemption")
        return _login_failed()

    if validation.result != TokenValidationResult.SUCCESS:
        return _login_failed()

    response = RedirectResponse(
        url=settings.SUCCESS_REDIRECT_PATH, status_code=status.HTTP_303_SEE_OTHER
    )
    response.delete_cookie(settings.CORRELATION_COOKIE_NAME, path="/")
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token_manager.create_session_token(validation.user),
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
    )
    return response


@router.post(settings.LOGOUT_PATH, status_code=status.HTTP_303_SEE_OTHER, summary="Sign out")
async def logout() -> RedirectResponse:
    response = RedirectResponse(
        url=settings.DEFAULT_REDIRECT_PATH, status_code=status.HTTP_303_SEE_OTHER
    )
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return response
