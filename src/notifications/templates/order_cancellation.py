"""Order cancellation template: sent when an order is cancelled."""

from ordering.order.order import NotificationType


class OrderCancellationTemplate:
    notification_type = NotificationType.CANCELLED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return {
            "subject": f"Order Cancelled #{order_id}",
            "body": (
                f"Your order #{order_id} has been cancelled. "
                "If you didn't request this, please contact us."
            ),
        }
