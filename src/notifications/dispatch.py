"""Notification dispatch: render an order email and hand it to the email channel.

The dispatcher loads the order and its owner's profile, renders the
template registered for the notification type (unregistered types get the
generic order update), sends it through the email channel and records
``last_notification_sent`` on the order. The record is written whether or
not the channel accepted the message; it is the durable evidence that a
notification was attempted.
"""

import structlog
from protean.fields import Boolean, String, Text

from notifications.channel import get_email_channel
from notifications.channel.email_port import DeliveryStatus, EmailPort
from notifications.domain import notifications
from notifications.templates import get_template
from ordering.order.order import NotificationType
from ordering.order.store import OrderStore
from shared.config import get_settings
from shared.errors import NotFound, NotifyFailure, ValidationError

logger = structlog.get_logger(__name__)

DEFAULT_RECIPIENT = "customer"


@notifications.value_object
class NotificationReceipt:
    """What the channel accepted for one order email."""

    success = Boolean(default=True)
    message = Text(sanitize=False)
    subject = String(sanitize=False)
    body = Text(sanitize=False)
    recipient = String(default=DEFAULT_RECIPIENT)
    delivery_status = String(required=True, max_length=20)
    message_id = String(max_length=100)


class NotificationDispatcher:
    def __init__(self, store: OrderStore, email: EmailPort | None = None):
        self.store = store
        self._email = email

    @property
    def email(self) -> EmailPort:
        return self._email or get_email_channel()

    async def send(self, order_id: str | None, notification_type: NotificationType | str) -> NotificationReceipt:
        if not order_id:
            raise ValidationError({"order_id": ["Order ID is required"]})

        type_label = NotificationType.label(notification_type)

        order = await self.store.get_order(order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found")

        profile = await self.store.get_profile(order.user_id) if order.user_id else None
        recipient = profile.email if profile is not None and profile.email else DEFAULT_RECIPIENT

        template_cls = get_template(type_label)
        rendered = template_cls.render(
            {
                "order_id": order.id,
                "total_amount": order.total_amount,
                "currency": get_settings().CURRENCY,
                "created_at": order.created_at,
                "delivery_address": order.delivery_address,
            }
        )

        result = self.email.send(to=recipient, subject=rendered["subject"], body=rendered["body"])
        await self.store.mark_notification_sent(order.id, type_label)

        if result.get("status") != DeliveryStatus.SENT.value:
            error = result.get("error", "Unknown dispatch error")
            logger.error(
                "Notification dispatch failed",
                order_id=order.id,
                notification_type=type_label,
                error=error,
            )
            raise NotifyFailure(error)

        logger.info(
            "Notification sent",
            order_id=order.id,
            notification_type=type_label,
            template=template_cls.__name__,
            recipient=recipient,
        )
        return NotificationReceipt(
            success=True,
            message=f"{type_label} email sent for order {order.id}",
            subject=rendered["subject"],
            body=rendered["body"],
            recipient=recipient,
            delivery_status=result["status"],
            message_id=result.get("message_id"),
        )
