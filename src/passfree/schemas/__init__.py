from .passwordless import CurrentUserResponse, HealthResponse, LoginLinkRequest

__all__ = ["CurrentUserResponse", "HealthResponse", "LoginLinkRequest"]
