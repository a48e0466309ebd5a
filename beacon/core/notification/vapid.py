"""VAPID key validation and Web Push sending via pywebpush."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from pywebpush import WebPushException, webpush

from beacon.configs import configs

logger = logging.getLogger(__name__)

# Push services answer these when a subscription no longer exists
GONE_STATUS_CODES = frozenset({404, 410})


class PushDeliveryError(Exception):
    """Delivery to one endpoint failed.  Never escapes a dispatch."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def ensure_vapid_keys() -> bool:
    """Return True when a VAPID key pair is configured.

    Without one, notifications are still persisted but nothing is pushed.
    """
    push = configs.Push

    if push.enabled:
        logger.info("VAPID keys ready (public=%s…)", push.VapidPublicKey[:20])
        return True

    logger.warning("VAPID keys not configured, Web Push disabled")
    return False


def _send_blocking(subscription_info: dict[str, Any], payload: dict[str, Any]) -> None:
    push = configs.Push
    try:
        webpush(
            subscription_info=subscription_info,
            data=json.dumps(payload),
            vapid_private_key=push.VapidPrivateKey,
            # pywebpush adds "aud"/"exp" to this dict, so build a fresh one per call
            vapid_claims={"sub": f"mailto:{push.VapidContactEmail}"},
            ttl=push.Ttl,
            timeout=push.TimeoutSeconds,
        )
    except WebPushException as e:
        response = getattr(e, "response", None)
        status_code = getattr(response, "status_code", None)
        raise PushDeliveryError(str(e), status_code=status_code) from e


async def send_push(subscription_info: dict[str, Any], payload: dict[str, Any]) -> None:
    """Send a single Web Push message.

    *subscription_info* must contain ``endpoint``, ``keys.p256dh``, ``keys.auth``.
    pywebpush is blocking, so the request runs in a worker thread.  Raises
    :class:`PushDeliveryError` on any transport failure.
    """
    if not configs.Push.enabled:
        raise PushDeliveryError("VAPID keys not configured")
    try:
        await asyncio.to_thread(_send_blocking, subscription_info, payload)
    except PushDeliveryError:
        raise
    except Exception as e:
        raise PushDeliveryError(f"{type(e).__name__}: {e}") from e
