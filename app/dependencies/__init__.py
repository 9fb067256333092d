"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_connection_registry,
    get_connection_store,
    get_token_cipher_service,
    get_xbox_connection,
)
from .config import SettingsDependency, get_app_settings

__all__ = [
    "SettingsDependency",
    "get_app_settings",
    "get_connection_registry",
    "get_connection_store",
    "get_token_cipher_service",
    "get_xbox_connection",
]
