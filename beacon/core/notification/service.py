"""Notification service: dispatch (store + push fan-out) and read state."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID

from sqlmodel.ext.asyncio.session import AsyncSession

from beacon.common.code import ErrCode, ErrCodeError
from beacon.configs import configs
from beacon.core.notification.dispatcher import DeliveryResult, PushDispatcher
from beacon.core.notification.events import build_push_message
from beacon.models.notification import Notification, NotificationPayload
from beacon.repos.notification import NotificationRepository
from beacon.repos.push_subscription import PushSubscriptionRepository

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    notification: Notification
    results: list[DeliveryResult] = field(default_factory=list)
    pruned: int = 0

    @property
    def delivered(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.ok)


@dataclass
class BulkDispatchReport:
    reports: list[DispatchReport] = field(default_factory=list)
    failed_user_ids: list[str] = field(default_factory=list)

    @property
    def successful(self) -> int:
        return len(self.reports)

    @property
    def failed(self) -> int:
        return len(self.failed_user_ids)

    @property
    def delivered(self) -> int:
        return sum(r.delivered for r in self.reports)


def _require_user(user_id: str | None) -> str:
    if not user_id:
        raise ErrCode.AUTHENTICATION_REQUIRED.with_messages("Unauthorized")
    return user_id


class NotificationService:
    """Store-and-push notifications plus per-user read state.

    ``dispatch`` commits the notification before any delivery attempt, so the
    record survives whatever happens on the transport side.  The read-state
    methods do NOT commit.
    """

    def __init__(self, db: AsyncSession, dispatcher: PushDispatcher | None = None) -> None:
        self.db = db
        self.notifications = NotificationRepository(db)
        self.subscriptions = PushSubscriptionRepository(db)
        self.dispatcher = dispatcher or PushDispatcher()

    # --- Dispatch ---------------------------------------------------------------

    async def dispatch(self, user_id: str, payload: NotificationPayload) -> DispatchReport:
        """Persist one notification for *user_id* and push it to all their endpoints.

        Raises only if the notification cannot be written.  Transport failures
        are logged and reported in the returned :class:`DispatchReport`.
        """
        user_id = _require_user(user_id)

        notification = await self.notifications.create(user_id, payload)
        subscriptions = await self.subscriptions.get_by_user_id(user_id)
        await self.db.commit()
        # Detached, so a later rollback on this session cannot expire the returned record
        self.db.expunge(notification)
        report = DispatchReport(notification=notification)

        if not subscriptions:
            logger.debug("No push subscriptions for user %s, notification %s stored only", user_id, notification.id)
            return report
        if not configs.Push.enabled:
            logger.warning("VAPID keys not configured, notification %s stored without push", notification.id)
            return report

        message = build_push_message(notification, payload)
        report.results = await self.dispatcher.deliver(subscriptions, message)
        logger.info(
            "Notification %s → user %s: %d delivered, %d failed",
            notification.id,
            user_id,
            report.delivered,
            report.failed,
        )

        gone = [r.endpoint for r in report.results if r.gone]
        if gone and configs.Push.PruneExpired:
            try:
                report.pruned = await self.subscriptions.delete_by_endpoints(user_id, gone)
                await self.db.commit()
            except Exception:
                # Pruning is housekeeping; the notification is already stored
                logger.exception("Failed to prune %d expired push subscriptions", len(gone))
                await self.db.rollback()
        return report

    async def dispatch_many(self, user_ids: Sequence[str], payload: NotificationPayload) -> BulkDispatchReport:
        """Dispatch the same payload to several users, one stored notification each.

        Users are handled one after another on this session.  A user whose
        notification cannot be stored is logged and counted as failed; the
        others still get theirs.  Duplicate ids are dispatched once.
        """
        bulk = BulkDispatchReport()
        for user_id in dict.fromkeys(user_ids):
            try:
                bulk.reports.append(await self.dispatch(user_id, payload))
            except ErrCodeError as e:
                logger.warning("Skipping bulk notification recipient %r: %s", user_id, e)
                bulk.failed_user_ids.append(user_id)
            except Exception:
                logger.exception("Failed to store notification for user %s", user_id)
                await self.db.rollback()
                bulk.failed_user_ids.append(user_id)

        logger.info(
            "Bulk notification: %d stored, %d failed, %d pushes delivered",
            bulk.successful,
            bulk.failed,
            bulk.delivered,
        )
        return bulk

    # --- Read state -------------------------------------------------------------

    async def mark_read(self, user_id: str, notification_id: UUID) -> bool:
        """Mark one of the user's notifications read.

        Returns False (not an error) when it is already read, missing, or
        owned by someone else.
        """
        user_id = _require_user(user_id)
        return await self.notifications.mark_read(user_id, notification_id)

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of the user read in one statement."""
        user_id = _require_user(user_id)
        updated = await self.notifications.mark_all_read(user_id)
        logger.info("Marked %d notifications read for user %s", updated, user_id)
        return updated

    # --- Queries ----------------------------------------------------------------

    async def list_for_user(self, user_id: str, limit: int = 50, unread_only: bool = False) -> list[Notification]:
        user_id = _require_user(user_id)
        return await self.notifications.list_by_user(user_id, limit=limit, unread_only=unread_only)

    async def unread_count(self, user_id: str) -> int:
        user_id = _require_user(user_id)
        return await self.notifications.count_unread(user_id)
