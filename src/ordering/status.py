"""Order status transitions and their side effects.

By default any admin may move an order to any of the five statuses; only
strict mode enforces the transition graph kept on the ``Order`` aggregate.
Every transition requests a notification of the same type. A notification
failure is logged and reported on the result; the transition itself stands.
"""

from dataclasses import dataclass

import structlog

from notifications.dispatch import NotificationReceipt
from notifications.notifier import Notifier
from ordering.order.order import NotificationType, Order, OrderStatus
from ordering.order.store import OrderStore
from ordering.session import Session
from shared.config import get_settings
from shared.errors import NotifyFailure, ValidationError

logger = structlog.get_logger(__name__)


def parse_status(value: OrderStatus | str) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError({"status": [f"Unknown order status: {value}"]}) from None


def parse_notification_type(value: NotificationType | str) -> NotificationType:
    if isinstance(value, NotificationType):
        return value
    try:
        return NotificationType(value)
    except ValueError:
        raise ValidationError({"type": [f"Unknown notification type: {value}"]}) from None


@dataclass(frozen=True)
class TransitionResult:
    order: Order
    notification: NotificationReceipt | None = None
    notification_error: str | None = None

    @property
    def notified(self) -> bool:
        return self.notification is not None


class OrderStatusMachine:
    def __init__(self, store: OrderStore, notifier: Notifier, strict: bool | None = None):
        self.store = store
        self.notifier = notifier
        self.strict = get_settings().STRICT_STATUS_TRANSITIONS if strict is None else strict

    async def transition(self, session: Session, order_id: str, new_status: OrderStatus | str) -> TransitionResult:
        session.require_admin()
        target = parse_status(new_status)

        order = await self.store.update_order_status(order_id, target, strict=self.strict)
        logger.info("Order status updated", order_id=order_id, status=target.value, by=session.user_id)

        try:
            receipt = await self.notifier.send_notification(
                order_id,
                NotificationType(target.value),
                access_token=session.access_token,
            )
        except NotifyFailure as exc:
            logger.error(
                "Status notification failed",
                order_id=order_id,
                notification_type=target.value,
                error=str(exc),
            )
            return TransitionResult(order=order, notification_error=str(exc))

        return TransitionResult(order=order, notification=receipt)

    async def send_notification(
        self,
        session: Session,
        order_id: str,
        notification_type: NotificationType | str,
    ) -> NotificationReceipt:
        """Explicit admin request to (re)send an order email; failures are raised."""
        session.require_admin()
        notification_type = parse_notification_type(notification_type)

        receipt = await self.notifier.send_notification(
            order_id,
            notification_type,
            access_token=session.access_token,
        )
        logger.info("Notification sent on request", order_id=order_id, notification_type=notification_type.value)
        return receipt
