"""
FastAPI router for the Chevereto integration.

Endpoints:
- GET /chevereto/settings: Read the caller's connection settings
- PUT /chevereto/settings: Validate and save connection settings
- POST /chevereto/test: Probe a domain/API key without uploading anything
- POST /chevereto/upload: Relay a multipart image upload to Chevereto

Authentication:
- All endpoints require a valid bearer access token (401 otherwise)
- Users can only read and use their own settings
"""
import asyncio
from contextlib import suppress
from typing import Annotated, Awaitable, Optional, TypeVar

import httpx
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from app.api.dependencies import get_config_service, get_current_user_id, get_request_id
from app.core.exceptions import IntegrationUploadError
from app.core.http_client import get_http_client
from app.core.logging_config import log_file_upload, log_info
from app.integrations.schemas import (
    ConnectionSettings,
    ConnectionTestRequest,
    ConnectionTestResponse,
    SaveSettingsResponse,
    UploadResponse,
)
from app.integrations.service import (
    check_connection,
    load_settings,
    relay_upload,
    save_settings,
)
from app.services.config_service import ConfigService

router = APIRouter(prefix="/chevereto", tags=["integrations"])

T = TypeVar("T")

DISCONNECT_POLL_SECONDS = 0.5
CLIENT_CLOSED_REQUEST = 499


async def _cancel_on_disconnect(request: Request, work: Awaitable[T]) -> T:
    """
    Await ``work`` but cancel it as soon as the inbound client goes away, so an
    abandoned request does not keep an outbound connection busy.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
                log_info("Client disconnected; cancelled outbound Chevereto request", path=request.url.path)
                raise HTTPException(status_code=CLIENT_CLOSED_REQUEST, detail="Client closed request")
    finally:
        if not task.done():
            task.cancel()


@router.get(
    "/settings",
    response_model=ConnectionSettings,
    status_code=status.HTTP_200_OK,
    responses={
        401: {"description": "Not authenticated"},
    }
)
async def get_settings(
    user_id: Annotated[str, Depends(get_current_user_id)],
    config: Annotated[ConfigService, Depends(get_config_service)],
) -> ConnectionSettings:
    """
    Get the caller's Chevereto settings.

    Returns defaults (disabled, empty fields) if nothing has been saved yet.
    """
    return load_settings(config, user_id)


@router.put(
    "/settings",
    response_model=SaveSettingsResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"description": "Domain and API key missing while enabling, or malformed body"},
        401: {"description": "Not authenticated"},
        500: {"description": "Failed to save settings"},
    }
)
async def update_settings(
    payload: ConnectionSettings,
    user_id: Annotated[str, Depends(get_current_user_id)],
    config: Annotated[ConfigService, Depends(get_config_service)],
    request_id: Annotated[str, Depends(get_request_id)],
) -> SaveSettingsResponse:
    """
    Save the caller's Chevereto settings.

    The domain is trimmed and stripped of trailing slashes before storage.
    """
    save_settings(config, user_id, payload)
    log_info("Chevereto settings updated", request_id=request_id, user_id=user_id)
    return SaveSettingsResponse(success=True)


@router.post(
    "/test",
    response_model=ConnectionTestResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"description": "Domain or API key missing"},
        401: {"description": "Not authenticated"},
    }
)
async def probe_connection(
    payload: ConnectionTestRequest,
    request: Request,
    user_id: Annotated[str, Depends(get_current_user_id)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    request_id: Annotated[str, Depends(get_request_id)],
) -> ConnectionTestResponse:
    """
    Test connectivity to a Chevereto server.

    Responds 200 for every probe outcome; ``success`` tells whether the server
    is reachable with the given key.
    """
    result = await _cancel_on_disconnect(
        request, check_connection(client, payload.domain, payload.api_key)
    )
    log_info(
        "Chevereto connection test",
        request_id=request_id,
        user_id=user_id,
        result=result.status.value,
    )
    return result.to_response()


@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"description": "Integration disabled or unconfigured, no file, or upload rejected"},
        401: {"description": "Not authenticated"},
    }
)
async def upload(
    request: Request,
    user_id: Annotated[str, Depends(get_current_user_id)],
    config: Annotated[ConfigService, Depends(get_config_service)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    request_id: Annotated[str, Depends(get_request_id)],
    source: Annotated[Optional[UploadFile], File()] = None,
) -> UploadResponse:
    """
    Relay an image to the caller's Chevereto server.

    Expects a multipart form with the file in ``source``. The API key never
    leaves the backend.
    """
    filename = source.filename if source is not None else None
    outcome = await _cancel_on_disconnect(
        request,
        relay_upload(
            config,
            client,
            user_id,
            source.file if source is not None else None,
            filename,
        ),
    )
    log_file_upload(filename or "<none>", outcome.success, request_id=request_id, user_id=user_id)

    if not outcome.success:
        raise IntegrationUploadError(outcome.message)
    return UploadResponse(url=outcome.url)
