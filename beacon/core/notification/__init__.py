from .dispatcher import DeliveryResult, PushDispatcher, PushTransport
from .events import NotificationEventType, build_push_message, strip_markdown
from .service import BulkDispatchReport, DispatchReport, NotificationService
from .vapid import PushDeliveryError, ensure_vapid_keys, send_push

__all__ = [
    "BulkDispatchReport",
    "DeliveryResult",
    "DispatchReport",
    "NotificationEventType",
    "NotificationService",
    "PushDeliveryError",
    "PushDispatcher",
    "PushTransport",
    "build_push_message",
    "ensure_vapid_keys",
    "send_push",
    "strip_markdown",
]
