"""
FastAPI routes for linking external accounts.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from app.core.errors import (
    ConnectionConfigurationError,
    ConnectionFlowError,
    UnknownConnectionError,
)
from app.dependencies import (
    SettingsDependency,
    get_connection_registry,
    get_connection_store,
)
from app.schemas import (
    AuthorizationUrlResponse,
    ConnectionCallbackPayload,
    ConnectionCallbackResponse,
    ConnectionView,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _http_error(exc: ConnectionFlowError) -> HTTPException:
    """Translate a flow error into a response that carries no upstream detail."""
    if isinstance(exc, UnknownConnectionError):
        status_code = HTTPStatus.NOT_FOUND
    elif isinstance(exc, ConnectionConfigurationError):
        status_code = HTTPStatus.SERVICE_UNAVAILABLE
    else:
        status_code = HTTPStatus.BAD_REQUEST
    return HTTPException(status_code=status_code, detail=exc.to_dict())


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "").lower()


async def _complete_callback(
    connection_id: str, payload: ConnectionCallbackPayload, registry: Any
) -> ConnectionCallbackResponse:
    try:
        connection = registry.get(connection_id)
        record = await connection.handle_callback(payload)
    except ConnectionFlowError as exc:
        logger.info("Callback for %s connection rejected: %s", connection_id, exc.code)
        raise _http_error(exc) from exc

    if record is None:
        return ConnectionCallbackResponse(status="already_connected")
    return ConnectionCallbackResponse(
        status="connected", connection=ConnectionView.from_record(record)
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/connections", status_code=HTTPStatus.OK)
async def list_available_connections(
    registry: Annotated[Any, Depends(get_connection_registry)],
) -> dict:
    """List the connectors users can currently link."""
    return {"connections": registry.enabled_ids()}


@router.get("/connections/{connection_id}/authorize", status_code=HTTPStatus.OK)
async def authorize_connection(
    connection_id: str,
    request: Request,
    registry: Annotated[Any, Depends(get_connection_registry)],
    user_id: str = Query(..., description="User identifier initiating the link."),
    redirect: bool = Query(
        default=False,
        description="When true, respond with a redirect to the provider consent screen.",
    ),
) -> Any:
    """Return (or redirect to) the provider consent URL for a user."""
    try:
        connection = registry.get(connection_id)
        url = connection.get_authorization_url(user_id)
    except ConnectionFlowError as exc:
        raise _http_error(exc) from exc

    if redirect or _wants_html(request):
        return RedirectResponse(url=url, status_code=HTTPStatus.TEMPORARY_REDIRECT)
    return AuthorizationUrlResponse(url=url)


@router.post("/connections/{connection_id}/callback")
async def handle_connection_callback(
    connection_id: str,
    payload: ConnectionCallbackPayload,
    response: Response,
    registry: Annotated[Any, Depends(get_connection_registry)],
) -> ConnectionCallbackResponse:
    """Complete the provider exchange and record the link."""
    result = await _complete_callback(connection_id, payload, registry)
    if result.status == "connected":
        response.status_code = HTTPStatus.CREATED
    return result


@router.get("/connections/{connection_id}/callback")
async def handle_connection_callback_get(
    connection_id: str,
    request: Request,
    registry: Annotated[Any, Depends(get_connection_registry)],
    settings: SettingsDependency,
    state: str = Query(..., description="OAuth state token."),
    code: Optional[str] = Query(None, description="Authorization code from the provider."),
    friend_sync: bool = Query(False),
    redirect: bool = Query(
        default=False,
        description="When true, redirect browser clients instead of returning JSON.",
    ),
) -> Response:
    """Browser-facing variant of the callback used as the OAuth redirect URI."""
    payload = ConnectionCallbackPayload(state=state, code=code, friend_sync=friend_sync)
    result = await _complete_callback(connection_id, payload, registry)

    redirect_target = settings.frontend_base_url
    if redirect_target and (redirect or _wants_html(request)):
        return RedirectResponse(
            url=str(redirect_target), status_code=HTTPStatus.TEMPORARY_REDIRECT
        )

    status_code = HTTPStatus.CREATED if result.status == "connected" else HTTPStatus.OK
    return JSONResponse(content=result.model_dump(mode="json"), status_code=status_code)


@router.get("/users/{user_id}/connections", status_code=HTTPStatus.OK)
async def list_user_connections(
    user_id: str,
    store: Annotated[Any, Depends(get_connection_store)],
) -> list[ConnectionView]:
    """Return a user's linked accounts without provider tokens."""
    return [ConnectionView.from_record(record) for record in store.list_connections(user_id=user_id)]
