"""Service layer exports."""

from .connection import Connection, ConnectionRegistry, ConnectionStore
from .token_cipher import TokenCipherService
from .xbox_connection import XboxConnection

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "ConnectionStore",
    "TokenCipherService",
    "XboxConnection",
]
