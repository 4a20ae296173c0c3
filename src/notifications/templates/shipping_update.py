"""Shipping update template: sent when an order moves to shipped."""

from ordering.order.order import NotificationType


class ShippingUpdateTemplate:
    notification_type = NotificationType.SHIPPED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return {
            "subject": f"Order Shipped #{order_id}",
            "body": f"Good news! Your order #{order_id} has been shipped and is on its way.",
        }
