"""Error taxonomy shared by the persistence client, identity layer and CLI."""

from __future__ import annotations


class FitlogError(Exception):
    pass


class ConfigError(FitlogError):
    """Required environment configuration is missing or malformed."""


class RequestError(FitlogError):
    """Non-success HTTP response from the REST persistence endpoint.

    The backend's error body is not interpreted; only the status code is kept.
    """

    def __init__(self, status: int, operation: str = "Request") -> None:
        super().__init__(f"{operation} failed ({status})")
        self.status = status
        self.operation = operation


class AuthError(FitlogError):
    """Identity provider rejected sign-in or sign-up; message is the provider's text."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code
