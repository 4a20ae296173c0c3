"""Generic order update template, used for any type without its own template."""


class OrderUpdateTemplate:
    notification_type = None

    @staticmethod
    def render(context: dict) -> dict:
        order_id = context.get("order_id", "N/A")
        return {
            "subject": f"Order Update #{order_id}",
            "body": f"Your order #{order_id} has been updated.",
        }
