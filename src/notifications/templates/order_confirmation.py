"""Order confirmation template: sent once, right after checkout."""

from ordering.order.order import NotificationType
from shared.formatting import format_address, format_date, format_price


class OrderConfirmationTemplate:
    notification_type = NotificationType.CONFIRMATION.value

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        body = f"Thank you for your order! Your order #{order_id} has been received and is being processed."
        if context.get("created_at") is not None:
            body += f"\n\nPlaced on: {format_date(context['created_at'])}"
        if context.get("total_amount") is not None:
            body += f"\n\nOrder Total: {format_price(context['total_amount'], context.get('currency', 'KWD'))}"
        if context.get("delivery_address") is not None:
            body += f"\n\nDelivering to: {format_address(context['delivery_address'])}"
        return {
            "subject": f"Order Confirmed #{order_id}",
            "body": body,
        }
