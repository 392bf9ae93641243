# schemas/passwordless.py
"""
Pydantic schemas for the passwordless login endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class LoginLinkRequest(BaseModel):
    """
    Form body for POST {LOGIN_PATH}
    The only input required from the user is their email address.
    """

    email: EmailStr = Field(
        ...,
        description="Email address to send the sign-in link to",
        examples=["user@example.com"],
    )


class CurrentUserResponse(BaseModel):
    email: str
    expires_at: datetime


class HealthResponse(BaseModel):
    status: str
    error: str | None = None
