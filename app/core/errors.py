"""
Error taxonomy for the account connection flow.

Every error carries a stable ``code`` and a public ``message`` that are safe to
return to end users. The exception's own string (``str(exc)``) holds the
upstream detail and is only meant for logs.
"""

from __future__ import annotations


class ConnectionFlowError(Exception):
    """Base class for failures raised while linking an external account."""

    code = "general_error"
    message = "General error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail or self.message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class InvalidStateError(ConnectionFlowError):
    """The state token is malformed, tampered with, or expired."""

    code = "invalid_oauth_state"
    message = "Invalid OAuth2 state"


class TokenExchangeError(ConnectionFlowError):
    """The authorization code could not be exchanged for an access token."""

    code = "token_exchange_failed"
    message = "Failed to exchange authorization code"


class InvalidCredentialError(ConnectionFlowError):
    """The provider rejected the access token as unusable."""

    code = "invalid_oauth_token"
    message = "Invalid OAuth2 access token"


class GeneralProviderError(ConnectionFlowError):
    """Any other upstream failure, such as fetching the user profile."""


class ConnectionConfigurationError(ConnectionFlowError):
    """The connector is disabled or missing credentials."""

    code = "connection_not_configured"
    message = "Connection is not configured"


class UnknownConnectionError(ConnectionFlowError):
    """No connector is registered for the requested identifier."""

    code = "unknown_connection"
    message = "Unknown connection type"


__all__ = [
    "ConnectionConfigurationError",
    "ConnectionFlowError",
    "GeneralProviderError",
    "InvalidCredentialError",
    "InvalidStateError",
    "TokenExchangeError",
    "UnknownConnectionError",
]
