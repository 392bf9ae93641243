# core/exceptions.py

from typing import Any

from fastapi import HTTPException, status


class PassFreeException(Exception):
    def __init__(
        self, message: str, error_code: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ProtectionError(PassFreeException):
    def __init__(self, message: str = "Protected payload could not be unprotected"):
        super().__init__(message, error_code="PROTECTION_FAILED")


class InvalidIdentityError(PassFreeException):
    def __init__(self, message: str = "Identity is not valid"):
        super().__init__(message, error_code="INVALID_IDENTITY")


class InvalidValidityError(PassFreeException):
    def __init__(self, message: str = "Validity duration must be positive"):
        super().__init__(message, error_code="INVALID_VALIDITY")


class EmailDeliveryError(PassFreeException):
    def __init__(self, message: str = "Login email could not be delivered"):
        super().__init__(message, error_code="EMAIL_DELIVERY_FAILED")


class InvalidSessionError(PassFreeException):
    def __init__(self, message: str = "Session is invalid or expired"):
        super().__init__(message, error_code="INVALID_SESSION")


class TokenAlreadyUsedError(PassFreeException):
    def __init__(self, message: str = "Login link has already been used"):
        super().__init__(message, error_code="TOKEN_ALREADY_USED")


# HTTP Exception converters
def convert_to_http_exception(exc: PassFreeException) -> HTTPException:
    status_map = {
        "PROTECTION_FAILED": status.HTTP_401_UNAUTHORIZED,
        "INVALID_IDENTITY": status.HTTP_400_BAD_REQUEST,
        "INVALID_VALIDITY": status.HTTP_400_BAD_REQUEST,
        "EMAIL_DELIVERY_FAILED": status.HTTP_502_BAD_GATEWAY,
        "INVALID_SESSION": status.HTTP_401_UNAUTHORIZED,
        "TOKEN_ALREADY_USED": status.HTTP_401_UNAUTHORIZED,
    }

    status_code = status_map.get(exc.error_code or "", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail={"message": exc.message, "error_code": exc.error_code, "details": exc.details},
    )
