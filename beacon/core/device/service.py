"""Device-session binding: record which device is behind an authenticated session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession

from beacon.common.code import ErrCode
from beacon.core.device.fingerprint import generate_fingerprint
from beacon.core.device.network import RequestMeta
from beacon.middleware.auth import AuthContext
from beacon.models.sessions import DeviceSessionRead
from beacon.repos.session import SessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TrackResult:
    updated: int
    fingerprint: str
    user_agent: str
    ip_address: str


class DeviceSessionBinder:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.sessions = SessionRepository(db)

    async def track(
        self,
        auth: AuthContext | None,
        meta: RequestMeta,
        fingerprint: str | None = None,
        device_info: dict[str, Any] | None = None,
    ) -> TrackResult:
        """Store the request's user agent and IP on the caller's current session.

        Repeating the call with the same inputs leaves the row unchanged apart
        from ``updated_at``.  Does NOT commit.
        """
        if auth is None or not auth.user_id or not auth.session_token:
            raise ErrCode.AUTHENTICATION_REQUIRED.with_messages("Unauthorized")

        # RequestMeta.build truncates, but callers may construct RequestMeta directly
        meta = RequestMeta.build(meta.user_agent, meta.ip_address, meta.language)
        effective_fingerprint = fingerprint or generate_fingerprint(meta.signals())

        updated = await self.sessions.update_device_metadata(
            user_id=auth.user_id,
            token=auth.session_token,
            user_agent=meta.user_agent,
            ip_address=meta.ip_address,
        )
        logger.info(
            "Tracked device for user %s (fingerprint=%s, ip=%s, client_fp=%s, device_info_keys=%s, rows=%d)",
            auth.user_id,
            effective_fingerprint,
            meta.ip_address,
            fingerprint is not None,
            sorted(device_info) if device_info else [],
            updated,
        )
        return TrackResult(
            updated=updated,
            fingerprint=effective_fingerprint,
            user_agent=meta.user_agent,
            ip_address=meta.ip_address,
        )

    async def list_devices(self, auth: AuthContext) -> list[DeviceSessionRead]:
        """The caller's active sessions with the device metadata recorded on them."""
        sessions = await self.sessions.list_active_by_user(auth.user_id)
        return [
            DeviceSessionRead(
                id=s.id,
                user_agent=s.user_agent,
                ip_address=s.ip_address,
                created_at=s.created_at,
                updated_at=s.updated_at,
                expires_at=s.expires_at,
                current=s.token == auth.session_token,
            )
            for s in sessions
        ]
