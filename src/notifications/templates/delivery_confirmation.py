"""Delivery confirmation template: sent when an order is delivered."""

from ordering.order.order import NotificationType


class DeliveryConfirmationTemplate:
    notification_type = NotificationType.DELIVERED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return {
            "subject": f"Order Delivered #{order_id}",
            "body": f"Your order #{order_id} has been delivered. Enjoy!",
        }
