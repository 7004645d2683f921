"""
Ledger notifications.

Transitions are committed first and announced afterwards. Each notification
is sent at most once, as a background task; a failed delivery is logged and
never rolls back the transition it describes.

Notifiers:
- LoggingNotifier: writes the notification to the log (default)
- WebhookNotifier: POSTs JSON to a configured URL (payout instructions,
  rejection notices, handled by the surrounding system)
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol, Set

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerNotification:
    """One ledger transition to announce."""
    event: str                      # WITHDRAWAL_REQUESTED, WITHDRAWAL_COMPLETED, ...
    seller_id: uuid.UUID
    entity_id: uuid.UUID
    amount: Decimal
    status: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    details: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": str(uuid.uuid5(self.entity_id, self.event)),
            "event": self.event,
            "seller_id": str(self.seller_id),
            "entity_id": str(self.entity_id),
            "amount": str(self.amount),
            "status": self.status,
            "occurred_at": self.occurred_at.isoformat(),
            "details": self.details,
        }


class Notifier(Protocol):
    async def notify(self, notification: LedgerNotification) -> None:
        ...


class LoggingNotifier:
    """Default notifier: log only."""

    async def notify(self, notification: LedgerNotification) -> None:
        logger.info(
            f"Notification {notification.event}: seller={notification.seller_id} "
            f"entity={notification.entity_id} amount={notification.amount} status={notification.status}"
        )


class WebhookNotifier:
    """POST notifications as JSON to an external endpoint."""

    def __init__(self, url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self.timeout = timeout
        self._client = client

    async def notify(self, notification: LedgerNotification) -> None:
        payload = notification.to_payload()
        if self._client is not None:
            response = await self._client.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()


class NotificationDispatcher:
    """Fire-and-forget delivery with failure logging."""

    def __init__(self, notifier: Optional[Notifier] = None):
        self.notifier = notifier or LoggingNotifier()
        self._tasks: Set[asyncio.Task] = set()
        self.failures: int = 0

    def dispatch(self, notification: LedgerNotification) -> asyncio.Task:
        """Schedule delivery on the running loop and return the task."""
        task = asyncio.create_task(self._deliver(notification))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _deliver(self, notification: LedgerNotification) -> None:
        try:
            await self.notifier.notify(notification)
        except Exception as e:
            self.failures += 1
            logger.warning(
                f"Notification {notification.event} for {notification.entity_id} failed: {e}"
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every in-flight notification (shutdown, tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


def build_notifier(webhook_url: Optional[str], timeout: float = 10.0) -> Notifier:
    if webhook_url:
        return WebhookNotifier(webhook_url, timeout=timeout)
    return LoggingNotifier()
