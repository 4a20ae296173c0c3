"""Notifier port and its implementations.

``LocalNotifier`` calls the dispatcher in-process. ``HttpNotifier`` calls
the ``POST /send-email`` endpoint with the session's bearer credential.
Both raise ``NotifyFailure`` on any failure; callers decide whether that
is fatal.
"""

from typing import Protocol

import httpx
import structlog
from protean.exceptions import ValidationError as DomainValidationError

from notifications.channel.email_port import DeliveryStatus
from notifications.dispatch import DEFAULT_RECIPIENT, NotificationDispatcher, NotificationReceipt
from ordering.order.order import NotificationType
from shared.errors import NotifyFailure, StorefrontError, describe

logger = structlog.get_logger(__name__)


class Notifier(Protocol):
    async def send_notification(
        self,
        order_id: str,
        notification_type: NotificationType | str,
        access_token: str | None = None,
    ) -> NotificationReceipt: ...


class LocalNotifier:
    def __init__(self, dispatcher: NotificationDispatcher):
        self.dispatcher = dispatcher

    async def send_notification(
        self,
        order_id: str,
        notification_type: NotificationType | str,
        access_token: str | None = None,
    ) -> NotificationReceipt:
        try:
            return await self.dispatcher.send(order_id, notification_type)
        except NotifyFailure:
            raise
        except StorefrontError as exc:
            raise NotifyFailure(exc.messages) from exc


class HttpNotifier:
    """Notifier that posts to a remote ``/send-email`` endpoint."""

    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout
        self.transport = transport

    async def send_notification(
        self,
        order_id: str,
        notification_type: NotificationType | str,
        access_token: str | None = None,
    ) -> NotificationReceipt:
        token = access_token or self.access_token
        if not token:
            raise NotifyFailure("Missing bearer credential for notifier")

        type_label = NotificationType.label(notification_type)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    "/send-email",
                    json={"orderId": order_id, "type": type_label},
                    headers={"Authorization": f"Bearer {token}"},
                )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.error("Notifier request failed", order_id=order_id, notification_type=type_label, error=str(exc))
            raise NotifyFailure(f"Notifier request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if response.status_code != 200 or not payload.get("success"):
            error = payload.get("error") or payload.get("detail") or f"Notifier returned {response.status_code}"
            logger.error(
                "Notifier rejected request",
                order_id=order_id,
                notification_type=type_label,
                status_code=response.status_code,
                error=error,
            )
            raise NotifyFailure(str(error))

        try:
            return NotificationReceipt(
                success=True,
                message=str(payload.get("message") or ""),
                subject=str(payload.get("emailSubject") or ""),
                body=str(payload.get("emailContent") or ""),
                recipient=str(payload.get("recipient") or DEFAULT_RECIPIENT),
                delivery_status=DeliveryStatus.SENT.value,
            )
        except DomainValidationError as exc:
            logger.error("Notifier response unreadable", order_id=order_id, error=str(exc.messages))
            raise NotifyFailure(f"Notifier response unreadable: {describe(exc.messages)}") from exc
