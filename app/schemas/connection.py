"""Schemas related to account connection flows."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.models.connection import ConnectionRecord


class ConnectionCallbackPayload(BaseModel):
    """Parameters delivered to a connector once the provider redirects back."""

    state: str = Field(..., description="Opaque state token issued with the authorization URL.")
    code: Optional[str] = Field(
        None, description="Authorization code returned by the provider."
    )
    friend_sync: bool = Field(
        False, description="Whether the user opted into syncing provider friends."
    )


class AuthorizationUrlResponse(BaseModel):
    """Consent screen URL for a connector."""

    url: str


class ConnectionView(BaseModel):
    """Public representation of a linked account, without provider tokens."""

    id: str
    type: str
    external_id: str
    name: Optional[str] = None
    friend_sync: bool
    verified: bool
    revoked: bool
    created_at: datetime

    @classmethod
    def from_record(cls, record: ConnectionRecord) -> "ConnectionView":
        return cls(**record.model_dump(exclude={"user_id", "token_data"}))


class ConnectionCallbackResponse(BaseModel):
    """Outcome of a callback exchange."""

    status: Literal["connected", "already_connected"]
    connection: Optional[ConnectionView] = None


__all__ = [
    "AuthorizationUrlResponse",
    "ConnectionCallbackPayload",
    "ConnectionCallbackResponse",
    "ConnectionView",
]
