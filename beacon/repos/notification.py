import logging
from uuid import UUID

from sqlalchemy import update
from sqlmodel import col, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from beacon.models.notification import Notification, NotificationPayload

logger = logging.getLogger(__name__)


def _unread():
    return col(Notification.is_read) == False  # noqa: E712


class NotificationRepository:
    """Persistence for per-user notifications.

    Every read-state update filters on ``is_read == False`` so a row can only
    ever move from unread to read.  Methods do NOT commit.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, user_id: str, payload: NotificationPayload) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=payload.type,
            title=payload.title,
            body=payload.body,
            url=payload.url,
            tag=payload.tag,
            data=dict(payload.data),
        )
        self.db.add(notification)
        await self.db.flush()
        await self.db.refresh(notification)
        return notification

    async def list_by_user(self, user_id: str, limit: int = 50, unread_only: bool = False) -> list[Notification]:
        stmt = select(Notification).where(col(Notification.user_id) == user_id)
        if unread_only:
            stmt = stmt.where(_unread())
        stmt = stmt.order_by(col(Notification.created_at).desc()).limit(limit)
        result = await self.db.exec(stmt)
        return list(result.all())

    async def count_unread(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(Notification).where(
            col(Notification.user_id) == user_id,
            _unread(),
        )
        result = await self.db.exec(stmt)
        return int(result.one())

    async def mark_read(self, user_id: str, notification_id: UUID) -> bool:
        stmt = (
            update(Notification)
            .where(
                col(Notification.id) == notification_id,
                col(Notification.user_id) == user_id,
                _unread(),
            )
            .values(is_read=True)
        )
        result = await self.db.exec(stmt)  # type: ignore[call-overload]
        await self.db.flush()
        return result.rowcount > 0

    async def mark_all_read(self, user_id: str) -> int:
        stmt = (
            update(Notification)
            .where(col(Notification.user_id) == user_id, _unread())
            .values(is_read=True)
        )
        result = await self.db.exec(stmt)  # type: ignore[call-overload]
        await self.db.flush()
        logger.debug("Marked %d notifications read for user %s", result.rowcount, user_id)
        return result.rowcount
