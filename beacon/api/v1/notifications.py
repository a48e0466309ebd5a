"""Notification REST API endpoints."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlmodel.ext.asyncio.session import AsyncSession

from beacon.common.code import ErrCode, ErrCodeError, handle_auth_error
from beacon.configs import configs
from beacon.core.notification import NotificationEventType, NotificationService, PushDispatcher
from beacon.infra.database import get_session
from beacon.middleware.auth import get_current_user
from beacon.models.notification import NotificationPayload, NotificationRead
from beacon.models.push_subscription import PushSubscription
from beacon.repos.push_subscription import PushSubscriptionRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


def get_push_dispatcher() -> PushDispatcher:
    return PushDispatcher()


# --- Response / Request models -----------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PushConfigResponse(_CamelModel):
    enabled: bool
    vapid_public_key: str


class PushSubscriptionRequest(_CamelModel):
    endpoint: str = Field(min_length=1)
    keys: dict[str, str] = {}  # {p256dh: "...", auth: "..."}
    user_agent: str = ""


class PushSubscriptionResponse(BaseModel):
    success: bool


class NotificationListResponse(BaseModel):
    notifications: list[NotificationRead]
    total: int


class NotificationCreateRequest(_CamelModel):
    type: str | None = Field(default=None, max_length=64)
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(default="", max_length=4000)
    url: str | None = None
    tag: str | None = None
    data: dict[str, Any] = {}


class NotificationUpdateRequest(_CamelModel):
    is_read: bool


class MarkReadResponse(_CamelModel):
    success: bool
    updated: bool


class MarkAllReadResponse(_CamelModel):
    success: bool
    updated_count: int


class TestNotificationResponse(BaseModel):
    success: bool
    message: str


def _test_payload() -> NotificationPayload:
    return NotificationPayload(
        title="Test Notification",
        body="This is a test notification from your LMS!",
        url="/dashboard",
        tag="test-notification",
        type=NotificationEventType.TEST,
        data={"type": "test", "timestamp": datetime.now(timezone.utc).isoformat()},
    )


# --- Push subscriptions -------------------------------------------------------


@router.get("/push/config", response_model=PushConfigResponse)
async def get_push_config() -> PushConfigResponse:
    """Public endpoint: whether Web Push is enabled and the VAPID public key to subscribe with."""
    return PushConfigResponse(enabled=configs.Push.enabled, vapid_public_key=configs.Push.VapidPublicKey)


@router.post("/push-subscription", response_model=PushSubscriptionResponse)
async def register_push_subscription(
    body: PushSubscriptionRequest,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> PushSubscriptionResponse:
    """Register a Web Push subscription for the authenticated user."""
    p256dh = body.keys.get("p256dh", "")
    auth_secret = body.keys.get("auth", "")
    if not p256dh or not auth_secret:
        raise handle_auth_error(
            ErrCode.PUSH_SUBSCRIPTION_INVALID.with_messages("keys.p256dh and keys.auth are required")
        )

    repo = PushSubscriptionRepository(db)
    sub = PushSubscription(
        user_id=user_id,
        endpoint=body.endpoint,
        keys_p256dh=p256dh,
        keys_auth=auth_secret,
        user_agent=body.user_agent,
    )
    await repo.upsert(sub)
    await db.commit()
    return PushSubscriptionResponse(success=True)


@router.delete("/push-subscription", response_model=PushSubscriptionResponse)
async def remove_push_subscription(
    body: PushSubscriptionRequest,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> PushSubscriptionResponse:
    """Remove one of the authenticated user's Web Push subscriptions."""
    repo = PushSubscriptionRepository(db)
    ok = await repo.delete_for_user(user_id, body.endpoint)
    await db.commit()
    return PushSubscriptionResponse(success=ok)


# --- Notifications ------------------------------------------------------------


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    limit: int = Query(default=50, ge=1, le=200),
    unread: bool = Query(default=False),
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> NotificationListResponse:
    try:
        notifications = await NotificationService(db).list_for_user(user_id, limit=limit, unread_only=unread)
        items = [NotificationRead.model_validate(n) for n in notifications]
        return NotificationListResponse(notifications=items, total=len(items))
    except ErrCodeError as e:
        raise handle_auth_error(e)
    except Exception as e:
        logger.error(f"Failed to fetch notifications for user {user_id}: {e}")
        raise handle_auth_error(ErrCode.STORE_UNAVAILABLE.with_messages("Failed to fetch notifications"))


@router.post("", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
async def create_notification(
    body: NotificationCreateRequest,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    dispatcher: PushDispatcher = Depends(get_push_dispatcher),
) -> NotificationRead:
    """Create a notification for the caller and push it to their devices."""
    payload = NotificationPayload(
        title=body.title,
        body=body.message,
        url=body.url,
        tag=body.tag,
        type=body.type,
        data=body.data,
    )
    try:
        report = await NotificationService(db, dispatcher=dispatcher).dispatch(user_id, payload)
        return NotificationRead.model_validate(report.notification)
    except ErrCodeError as e:
        raise handle_auth_error(e)
    except Exception as e:
        logger.error(f"Failed to create notification for user {user_id}: {e}")
        raise handle_auth_error(ErrCode.STORE_UNAVAILABLE.with_messages("Failed to create notification"))


@router.post("/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MarkAllReadResponse:
    try:
        updated = await NotificationService(db).mark_all_read(user_id)
        await db.commit()
        return MarkAllReadResponse(success=True, updated_count=updated)
    except ErrCodeError as e:
        raise handle_auth_error(e)
    except Exception as e:
        logger.error(f"Failed to mark all notifications read for user {user_id}: {e}")
        raise handle_auth_error(ErrCode.STORE_UNAVAILABLE.with_messages("Failed to mark notifications as read"))


@router.post("/test", response_model=TestNotificationResponse)
async def send_test_notification(
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    dispatcher: PushDispatcher = Depends(get_push_dispatcher),
) -> TestNotificationResponse:
    """Dispatch a fixed demo notification to the caller."""
    try:
        report = await NotificationService(db, dispatcher=dispatcher).dispatch(user_id, _test_payload())
        logger.info(
            "Test notification %s for user %s: %d delivered, %d failed",
            report.notification.id,
            user_id,
            report.delivered,
            report.failed,
        )
        return TestNotificationResponse(success=True, message="Test notification sent successfully")
    except ErrCodeError as e:
        raise handle_auth_error(e)
    except Exception as e:
        logger.error(f"Failed to send test notification to user {user_id}: {e}")
        raise handle_auth_error(ErrCode.STORE_UNAVAILABLE.with_messages("Failed to send test notification"))


@router.patch("/{notification_id}", response_model=MarkReadResponse)
async def update_notification(
    notification_id: UUID,
    body: NotificationUpdateRequest,
    user_id: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MarkReadResponse:
    """Mark one notification read.  Read state is one-way, so ``isRead: false`` is rejected."""
    if not body.is_read:
        raise handle_auth_error(
            ErrCode.READ_STATE_IRREVERSIBLE.with_messages("Notifications cannot be marked unread")
        )
    try:
        updated = await NotificationService(db).mark_read(user_id, notification_id)
        await db.commit()
        return MarkReadResponse(success=True, updated=updated)
    except ErrCodeError as e:
        raise handle_auth_error(e)
    except Exception as e:
        logger.error(f"Failed to mark notification {notification_id} read for user {user_id}: {e}")
        raise handle_auth_error(ErrCode.STORE_UNAVAILABLE.with_messages("Failed to update notification"))
