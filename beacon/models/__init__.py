from .notification import Notification, NotificationPayload, NotificationRead
from .push_subscription import PushSubscription
from .sessions import DeviceSessionRead, Session

__all__ = [
    "DeviceSessionRead",
    "Notification",
    "NotificationPayload",
    "NotificationRead",
    "PushSubscription",
    "Session",
]
