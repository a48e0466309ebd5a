import logging
from datetime import datetime, timezone

from sqlalchemy import update
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from beacon.models.sessions import Session

logger = logging.getLogger(__name__)


class SessionRepository:
    """Read access to auth-owned sessions plus the device-metadata update.

    Never creates or deletes rows.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_active_by_token(self, token: str) -> Session | None:
        now = datetime.now(timezone.utc)
        stmt = select(Session).where(col(Session.token) == token, col(Session.expires_at) > now)
        result = await self.db.exec(stmt)
        return result.first()

    async def list_active_by_user(self, user_id: str) -> list[Session]:
        now = datetime.now(timezone.utc)
        stmt = (
            select(Session)
            .where(col(Session.user_id) == user_id, col(Session.expires_at) > now)
            .order_by(col(Session.updated_at).desc())
        )
        result = await self.db.exec(stmt)
        return list(result.all())

    async def update_device_metadata(self, user_id: str, token: str, user_agent: str, ip_address: str) -> int:
        """Record the latest user agent / IP on the session matching BOTH user and token.

        Single UPDATE statement, no read-before-write.  Values must already be
        truncated to the column limits.  A copy of the row already loaded in
        this unit of work is refreshed afterwards.  Does NOT commit.
        """
        now = datetime.now(timezone.utc)
        stmt = (
            update(Session)
            .where(
                col(Session.user_id) == user_id,
                col(Session.token) == token,
                col(Session.expires_at) > now,
            )
            .values(user_agent=user_agent, ip_address=ip_address, updated_at=now)
            # SQLite loads naive datetimes, so the WHERE clause cannot be evaluated in Python
            .execution_options(synchronize_session=False)
        )
        result = await self.db.exec(stmt)  # type: ignore[call-overload]
        await self.db.flush()
        updated = result.rowcount

        if updated:
            loaded = [obj for obj in self.db.identity_map.values() if isinstance(obj, Session) and obj.token == token]
            for session in loaded:
                await self.db.refresh(session)
        return updated
