"""Fan a push message out to every endpoint of a user.

Each endpoint gets its own task, bounded by a semaphore and an enclosing
deadline.  A task records its own :class:`DeliveryResult` and never raises,
so one failing endpoint cannot cancel or abort its siblings.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from beacon.configs import configs
from beacon.core.notification.vapid import GONE_STATUS_CODES, PushDeliveryError, send_push
from beacon.models.push_subscription import PushSubscription

logger = logging.getLogger(__name__)

PushTransport = Callable[[dict[str, Any], dict[str, Any]], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    endpoint: str
    ok: bool
    status_code: int | None = None
    error: str | None = None

    @property
    def gone(self) -> bool:
        return not self.ok and self.status_code in GONE_STATUS_CODES


class PushDispatcher:
    def __init__(
        self,
        transport: PushTransport | None = None,
        max_concurrency: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self.transport: PushTransport = transport or send_push
        self.max_concurrency = max_concurrency or configs.Push.MaxConcurrency
        self.timeout = timeout if timeout is not None else configs.Push.TimeoutSeconds

    async def deliver(self, subscriptions: Sequence[PushSubscription], message: dict[str, Any]) -> list[DeliveryResult]:
        if not subscriptions:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _deliver_one(endpoint: str, info: dict[str, Any]) -> DeliveryResult:
            async with semaphore:
                try:
                    await asyncio.wait_for(self.transport(info, message), timeout=self.timeout)
                except PushDeliveryError as e:
                    logger.warning("Web push failed for %s (status=%s): %s", endpoint[:60], e.status_code, e)
                    return DeliveryResult(endpoint=endpoint, ok=False, status_code=e.status_code, error=str(e))
                except TimeoutError:
                    logger.warning("Web push timed out after %.1fs for %s", self.timeout, endpoint[:60])
                    return DeliveryResult(endpoint=endpoint, ok=False, error="timeout")
                except Exception as e:
                    logger.exception("Unexpected error sending web push to %s", endpoint[:60])
                    return DeliveryResult(endpoint=endpoint, ok=False, error=f"{type(e).__name__}: {e}")
                return DeliveryResult(endpoint=endpoint, ok=True)

        # Snapshot plain values so the tasks never touch ORM state
        targets = [(sub.endpoint, sub.subscription_info()) for sub in subscriptions]
        results = await asyncio.gather(*(_deliver_one(endpoint, info) for endpoint, info in targets))
        return list(results)
