"""Repository for Web Push subscriptions."""

import logging
from collections.abc import Sequence

from sqlalchemy import delete
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from beacon.models.push_subscription import PushSubscription

logger = logging.getLogger(__name__)


class PushSubscriptionRepository:
    """CRUD operations for PushSubscription."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_user_id(self, user_id: str) -> list[PushSubscription]:
        stmt = select(PushSubscription).where(col(PushSubscription.user_id) == user_id)
        result = await self.db.exec(stmt)
        return list(result.all())

    async def upsert(self, sub: PushSubscription) -> PushSubscription:
        """Insert or update by endpoint (unique).

        A browser that re-subscribes under another account moves the endpoint
        to the new user.
        """
        stmt = select(PushSubscription).where(col(PushSubscription.endpoint) == sub.endpoint)
        result = await self.db.exec(stmt)
        existing = result.first()

        if existing:
            existing.user_id = sub.user_id
            existing.keys_p256dh = sub.keys_p256dh
            existing.keys_auth = sub.keys_auth
            existing.user_agent = sub.user_agent
            self.db.add(existing)
            await self.db.flush()
            await self.db.refresh(existing)
            return existing

        self.db.add(sub)
        await self.db.flush()
        await self.db.refresh(sub)
        return sub

    async def delete_for_user(self, user_id: str, endpoint: str) -> bool:
        """Remove one of the user's own subscriptions."""
        stmt = delete(PushSubscription).where(
            col(PushSubscription.user_id) == user_id,
            col(PushSubscription.endpoint) == endpoint,
        )
        result = await self.db.exec(stmt)  # type: ignore[call-overload]
        await self.db.flush()
        return result.rowcount > 0

    async def delete_by_endpoints(self, user_id: str, endpoints: Sequence[str]) -> int:
        """Batch-delete the user's subscriptions the push service reported as gone.

        Scoped to *user_id* so an endpoint re-registered by another account in
        the meantime survives.
        """
        if not endpoints:
            return 0
        stmt = delete(PushSubscription).where(
            col(PushSubscription.user_id) == user_id,
            col(PushSubscription.endpoint).in_(list(endpoints)),
        )
        result = await self.db.exec(stmt)  # type: ignore[call-overload]
        await self.db.flush()
        logger.info("Pruned %d expired push subscriptions", result.rowcount)
        return result.rowcount
