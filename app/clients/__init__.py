"""Expose constructed client wrappers."""

from .connection_store import SQLiteConnectionStore
from .oauth_state import ConnectionStateEncoder
from .xbox_auth import XboxOAuthClient

__all__ = [
    "ConnectionStateEncoder",
    "SQLiteConnectionStore",
    "XboxOAuthClient",
]
