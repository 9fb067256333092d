"""
Xbox Live OAuth utilities.

Xbox Live has no identity endpoint that accepts a Microsoft account access
token directly. After the authorization code exchange the token is presented
to the user authentication service for a user token, which is in turn
presented to the XSTS service to obtain the gamer claims.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

import httpx
from pydantic import ValidationError

from app.core.config import XboxSettings
from app.core.errors import (
    ConnectionConfigurationError,
    GeneralProviderError,
    InvalidCredentialError,
    TokenExchangeError,
)
from app.models.connection import ExternalIdentity, ProviderTokenResponse

logger = logging.getLogger(__name__)


class XboxOAuthClient:
    """Build Xbox authorization URLs and run the three-step identity exchange."""

    AUTH_BASE_URL = "https://login.live.com/oauth20_authorize.srf"
    TOKEN_URL = "https://login.live.com/oauth20_token.srf"
    USER_AUTH_URL = "https://user.auth.xboxlive.com/user/authenticate"
    XSTS_AUTH_URL = "https://xsts.auth.xboxlive.com/xsts/authorize"
    SCOPES = ("Xboxlive.signin", "Xboxlive.offline_access")

    _XBL_HEADERS = {
        "x-xbl-contract-version": "3",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

    def __init__(
        self,
        settings: XboxSettings,
        *,
        redirect_uri: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._settings = settings
        self._redirect_uri = redirect_uri
        self._http = http_client
        self._timeout = timeout

    @property
    def redirect_uri(self) -> str:
        return self._redirect_uri

    @property
    def scope(self) -> str:
        return " ".join(self.SCOPES)

    def _credentials(self) -> tuple[str, str]:
        client_id = self._settings.client_id
        client_secret = self._settings.client_secret
        if not client_id or not client_secret:
            raise ConnectionConfigurationError("Xbox client id and secret are required.")
        return client_id, client_secret

    def build_authorization_url(self, state: str) -> str:
        """Construct the Microsoft account consent URL."""
        client_id, _ = self._credentials()
        params = {
            "client_id": client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": self.scope,
            "state": state,
            "approval_prompt": "auto",
        }
        query = urlencode(params, quote_via=quote)
        return f"{self.AUTH_BASE_URL}?{query}"

    async def _post(self, url: str, **kwargs: Any) -> httpx.Response:
        if self._http is not None:
            return await self._http.post(url, **kwargs)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(url, **kwargs)

    async def exchange_authorization_code(self, code: str) -> ProviderTokenResponse:
        """Exchange an authorization code for a Microsoft account access token."""
        client_id, client_secret = self._credentials()
        if not code:
            raise TokenExchangeError("Authorization code is missing.")

        basic = base64.b64encode(f"{client_id}:{client_secret}".encode("utf-8")).decode("ascii")
        payload = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": client_id,
            "redirect_uri": self._redirect_uri,
            "scope": self.scope,
        }

        try:
            response = await self._post(
                self.TOKEN_URL,
                data=payload,
                headers={
                    "Accept": "application/json",
                    "Authorization": f"Basic {basic}",
                },
            )
            if not response.is_success:
                raise TokenExchangeError(
                    f"Token endpoint returned HTTP {response.status_code}: {response.text}"
                )
            token_payload = _json_object(response, TokenExchangeError)
            if token_payload.get("error"):
                raise TokenExchangeError(
                    token_payload.get("error_description") or token_payload["error"]
                )
            if not token_payload.get("access_token"):
                raise TokenExchangeError("Token endpoint response has no access_token.")
            try:
                return ProviderTokenResponse.model_validate(token_payload)
            except ValidationError as exc:
                raise TokenExchangeError(f"Malformed token response: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.error("Error exchanging code for xbox connection: %s", exc)
            raise TokenExchangeError(str(exc)) from exc
        except TokenExchangeError as exc:
            logger.error("Error exchanging code for xbox connection: %s", exc.detail)
            raise

    async def get_user_token(self, access_token: str) -> str:
        """Trade a Microsoft account access token for an Xbox Live user token."""
        body = {
            "RelyingParty": "http://auth.xboxlive.com",
            "TokenType": "JWT",
            "Properties": {
                "AuthMethod": "RPS",
                "SiteName": "user.auth.xboxlive.com",
                "RpsTicket": f"d={access_token}",
            },
        }

        try:
            response = await self._post(self.USER_AUTH_URL, json=body, headers=self._XBL_HEADERS)
            if not response.is_success:
                raise InvalidCredentialError(
                    f"User authentication returned HTTP {response.status_code}: {response.text}"
                )
            payload = _json_object(response, InvalidCredentialError)
            if payload.get("error"):
                raise InvalidCredentialError(
                    payload.get("error_description") or payload["error"]
                )
            token = payload.get("Token")
            if not isinstance(token, str) or not token:
                raise InvalidCredentialError("User authentication response has no Token.")
            return token
        except httpx.HTTPError as exc:
            logger.error("Error getting user token for xbox connection: %s", exc)
            raise InvalidCredentialError(str(exc)) from exc
        except InvalidCredentialError as exc:
            logger.error("Error getting user token for xbox connection: %s", exc.detail)
            raise

    async def get_user(self, user_token: str) -> ExternalIdentity:
        """Authorize the user token against XSTS and return the gamer identity."""
        body = {
            "RelyingParty": "http://xboxlive.com",
            "TokenType": "JWT",
            "Properties": {
                "UserTokens": [user_token],
                "SandboxId": "RETAIL",
            },
        }

        try:
            response = await self._post(self.XSTS_AUTH_URL, json=body, headers=self._XBL_HEADERS)
            if not response.is_success:
                raise GeneralProviderError(
                    f"XSTS authorization returned HTTP {response.status_code}: {response.text}"
                )
            payload = _json_object(response, GeneralProviderError)
            if payload.get("error"):
                raise GeneralProviderError(
                    payload.get("error_description") or payload["error"]
                )
            display_claims = payload.get("DisplayClaims")
            claims = display_claims.get("xui") if isinstance(display_claims, dict) else None
            if not isinstance(claims, list) or not claims or not isinstance(claims[0], dict):
                raise GeneralProviderError("XSTS response has no xui claims.")
            first = claims[0]
            if not first.get("xid"):
                raise GeneralProviderError("XSTS claims have no xid.")
            try:
                return ExternalIdentity(
                    external_id=str(first["xid"]),
                    display_name=first.get("gtg"),
                    raw_claims=first,
                )
            except ValidationError as exc:
                raise GeneralProviderError(f"Malformed XSTS claims: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.error("Error fetching user for xbox connection: %s", exc)
            raise GeneralProviderError(str(exc)) from exc
        except GeneralProviderError as exc:
            logger.error("Error fetching user for xbox connection: %s", exc.detail)
            raise


def _json_object(response: httpx.Response, error_cls: type[Exception]) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise error_cls("Response body is not valid JSON.") from exc
    if not isinstance(payload, dict):
        raise error_cls("Response body is not a JSON object.")
    return payload


__all__ = ["XboxOAuthClient"]
