"""Device tracking endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from sqlmodel.ext.asyncio.session import AsyncSession

from beacon.common.code import ErrCode, ErrCodeError, handle_auth_error
from beacon.core.device import DeviceSessionBinder, RequestMeta
from beacon.infra.database import get_session
from beacon.middleware.auth import AuthContext, get_current_session
from beacon.models.sessions import DeviceSessionRead

logger = logging.getLogger(__name__)

router = APIRouter(tags=["devices"])


# --- Response / Request models -----------------------------------------------


class TrackDeviceRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    device_info: dict[str, Any] | None = None
    fingerprint: str | None = Field(default=None, max_length=128)


class TrackDeviceResponse(BaseModel):
    success: bool
    tracked: bool


class DeviceListResponse(BaseModel):
    devices: list[DeviceSessionRead]
    total: int


async def get_track_device_request(
    request: Request,
    auth: AuthContext = Depends(get_current_session),
) -> TrackDeviceRequest:
    """Parse the optional body only once the caller is authenticated."""
    raw = await request.body()
    if not raw.strip():
        return TrackDeviceRequest()
    try:
        return TrackDeviceRequest.model_validate_json(raw)
    except ValidationError as e:
        messages = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise handle_auth_error(ErrCode.INVALID_REQUEST.with_messages("Invalid request", *messages))


# --- Endpoints ----------------------------------------------------------------


@router.post(
    "/track-device",
    response_model=TrackDeviceResponse,
    openapi_extra={
        "requestBody": {
            "required": False,
            "content": {"application/json": {"schema": TrackDeviceRequest.model_json_schema(by_alias=True)}},
        }
    },
)
async def track_device(
    request: Request,
    auth: AuthContext = Depends(get_current_session),
    body: TrackDeviceRequest = Depends(get_track_device_request),
    db: AsyncSession = Depends(get_session),
) -> TrackDeviceResponse:
    """Record the caller's current user agent and IP on their session."""
    try:
        binder = DeviceSessionBinder(db)
        await binder.track(
            auth,
            RequestMeta.from_headers(request.headers),
            fingerprint=body.fingerprint,
            device_info=body.device_info,
        )
        await db.commit()
        return TrackDeviceResponse(success=True, tracked=True)
    except ErrCodeError as e:
        raise handle_auth_error(e)
    except Exception as e:
        logger.error(f"Failed to track device for user {auth.user_id}: {e}")
        raise handle_auth_error(ErrCode.STORE_UNAVAILABLE.with_messages("Failed to track device"))


@router.get("/devices", response_model=DeviceListResponse)
async def list_devices(
    auth: AuthContext = Depends(get_current_session),
    db: AsyncSession = Depends(get_session),
) -> DeviceListResponse:
    """List the caller's active sessions with the device recorded on each."""
    try:
        devices = await DeviceSessionBinder(db).list_devices(auth)
        return DeviceListResponse(devices=devices, total=len(devices))
    except Exception as e:
        logger.error(f"Failed to list devices for user {auth.user_id}: {e}")
        raise handle_auth_error(ErrCode.STORE_UNAVAILABLE.with_messages("Failed to list devices"))
