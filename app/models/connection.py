"""
Domain models for linked external accounts.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ProviderTokenResponse(BaseModel):
    """Token endpoint response, kept verbatim including unknown fields."""

    model_config = ConfigDict(extra="allow")

    access_token: str
    token_type: Optional[str] = None
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    def as_token_data(self, *, fetched_at: int) -> Dict[str, Any]:
        """Return the fields the provider sent plus the capture timestamp."""
        data = self.model_dump(exclude_unset=True)
        data["fetched_at"] = fetched_at
        return data


class ExternalIdentity(BaseModel):
    """Identity asserted by the provider for the authorizing user."""

    external_id: str = Field(..., description="Stable provider-assigned identifier.")
    display_name: Optional[str] = None
    raw_claims: Dict[str, Any] = Field(default_factory=dict)


class ConnectionRecord(BaseModel):
    """Durable link between a host user and an external identity."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str
    type: str = Field(..., description="Connector identifier, e.g. 'xbox'.")
    external_id: str
    name: Optional[str] = None
    friend_sync: bool = False
    token_data: Dict[str, Any] = Field(default_factory=dict)
    verified: bool = True
    revoked: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = ["ConnectionRecord", "ExternalIdentity", "ProviderTokenResponse"]
