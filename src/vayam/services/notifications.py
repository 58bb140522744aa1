"""Best-effort notification delivery through an external email relay.

Messages are handed to the relay as JSON over HTTP. Rendering and actual
mail transport are the relay's job. When notifications are disabled the
messages are only logged.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import httpx

from vayam.core.settings import settings

logger = logging.getLogger(__name__)


class NotificationError(RuntimeError):
    """Raised when a notification could not be handed to the relay."""


@dataclass(frozen=True)
class Notification:
    """A single message addressed to one recipient."""

    role: str
    to: str | None
    subject: str
    body: str


@dataclass(frozen=True)
class DeliveryOutcome:
    """What happened to one notification of a fan-out."""

    role: str
    to: str | None
    delivered: bool
    error: str | None = None


class Notifier(Protocol):
    """Anything that can deliver a Notification."""

    async def send(self, notification: Notification) -> None:
        """Deliver `notification` or raise NotificationError."""


class LoggingNotifier:
    """Notifier used when no relay is configured; records messages in the log."""

    async def send(self, notification: Notification) -> None:
        if not notification.to:
            raise NotificationError(f"No address for {notification.role}")
        logger.info(
            "Notification (not relayed) role=%s to=%s subject=%s",
            notification.role,
            notification.to,
            notification.subject,
        )


class RelayNotifier:
    """Posts notifications to the configured relay endpoint."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout if timeout is not None else settings.notification_timeout_seconds
        self._transport = transport

    async def send(self, notification: Notification) -> None:
        if not notification.to:
            raise NotificationError(f"No address for {notification.role}")
        payload = {
            "to": notification.to,
            "subject": notification.subject,
            "body": notification.body,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationError(f"Relay rejected notification: {exc}") from exc


def get_notifier() -> Notifier:
    """Return the notifier matching the current configuration."""
    if settings.notifications_active and settings.notification_relay_url:
        return RelayNotifier(settings.notification_relay_url)
    return LoggingNotifier()


async def fan_out(notifier: Notifier, notifications: Sequence[Notification]) -> list[DeliveryOutcome]:
    """Send every notification concurrently and report each outcome.

    Failures are logged and reported, never raised.
    """
    results = await asyncio.gather(
        *(notifier.send(n) for n in notifications),
        return_exceptions=True,
    )
    outcomes = []
    for notification, result in zip(notifications, results, strict=True):
        if isinstance(result, BaseException):
            logger.warning(
                "Notification to %s (%s) failed: %s",
                notification.to,
                notification.role,
                result,
            )
            outcomes.append(
                DeliveryOutcome(
                    role=notification.role,
                    to=notification.to,
                    delivered=False,
                    error=str(result),
                )
            )
        else:
            outcomes.append(
                DeliveryOutcome(role=notification.role, to=notification.to, delivered=True)
            )
    return outcomes
