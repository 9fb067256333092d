"""
Self-contained OAuth state tokens.

A state token carries everything needed to resume an authorization attempt:
the host user id, the connector it was minted for, a nonce and the issue time.
It is signed with HMAC-SHA256 so nothing has to be stored server-side.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import json
import uuid
from datetime import datetime, timedelta, timezone
from hashlib import sha256
from typing import Any, Dict

from app.core.errors import InvalidStateError

_SIGNATURE_SIZE = 32


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(token: str) -> bytes:
    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError, ValueError) as exc:
        raise InvalidStateError("State is not valid base64.") from exc
    # urlsafe_b64decode silently drops stray characters and ignores spare bits,
    # so only the canonical encoding of the decoded bytes is accepted.
    if _b64encode(raw) != token:
        raise InvalidStateError("State is not canonically encoded.")
    return raw


class ConnectionStateEncoder:
    """Encode and validate state values bound to a single connector."""

    def __init__(self, secret_key: str, *, connection_id: str, ttl_seconds: int = 900) -> None:
        if not secret_key:
            raise ValueError("State signing secret must be provided.")
        self._secret_key = secret_key.encode("utf-8")
        self._connection_id = connection_id
        self._ttl = timedelta(seconds=ttl_seconds)

    def encode(self, payload: Dict[str, Any]) -> str:
        serialized = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
        signature = hmac.new(self._secret_key, serialized, sha256).digest()
        return _b64encode(signature + serialized)

    def decode(self, token: str) -> Dict[str, Any]:
        """Verify the signature and return the payload. Expiry is not checked."""
        if not token:
            raise InvalidStateError("State is empty.")
        decoded = _b64decode(token)
        if len(decoded) <= _SIGNATURE_SIZE:
            raise InvalidStateError("State is too short.")
        signature, serialized = decoded[:_SIGNATURE_SIZE], decoded[_SIGNATURE_SIZE:]
        expected_signature = hmac.new(self._secret_key, serialized, sha256).digest()
        if not hmac.compare_digest(signature, expected_signature):
            raise InvalidStateError("Invalid OAuth state signature.")
        try:
            payload = json.loads(serialized)
        except ValueError as exc:
            raise InvalidStateError("State payload is not JSON.") from exc
        if not isinstance(payload, dict):
            raise InvalidStateError("State payload is not an object.")
        return payload

    def create_state(self, user_id: str) -> str:
        """Mint a state token for ``user_id``."""
        return self.encode(
            {
                "user_id": user_id,
                "connection": self._connection_id,
                "nonce": uuid.uuid4().hex,
                "issued_at": datetime.now(timezone.utc).isoformat(),
            }
        )

    def validate_state(self, token: str) -> str:
        """Check integrity, binding and age of a state token; return its user id."""
        payload = self.decode(token)

        user_id = payload.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidStateError("Missing user identifier in state token.")

        if payload.get("connection") != self._connection_id:
            raise InvalidStateError(
                f"State was issued for connection {payload.get('connection')!r}."
            )

        issued_at_raw = payload.get("issued_at")
        if not isinstance(issued_at_raw, str):
            raise InvalidStateError("Missing issued_at in state token.")
        try:
            issued_at = datetime.fromisoformat(issued_at_raw)
        except ValueError as exc:
            raise InvalidStateError("Invalid issued_at in state token.") from exc
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=timezone.utc)

        if datetime.now(timezone.utc) - issued_at > self._ttl:
            raise InvalidStateError("OAuth state token has expired.")

        return user_id

    def get_user_id(self, token: str) -> str:
        """Return the embedded user id. Call ``validate_state`` first."""
        user_id = self.decode(token).get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidStateError("Missing user identifier in state token.")
        return user_id


__all__ = ["ConnectionStateEncoder"]
