"""Public schema exports."""

from .connection import (
    AuthorizationUrlResponse,
    ConnectionCallbackPayload,
    ConnectionCallbackResponse,
    ConnectionView,
)

__all__ = [
    "AuthorizationUrlResponse",
    "ConnectionCallbackPayload",
    "ConnectionCallbackResponse",
    "ConnectionView",
]
