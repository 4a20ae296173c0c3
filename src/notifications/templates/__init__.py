"""Template registry: maps a notification type to its template class.

Each template renders ``{"subject", "body"}`` from a context dict and
declares the notification type it serves. Types without a dedicated
template (``processing`` among them) fall back to the generic order update
template.
"""

from notifications.templates.delivery_confirmation import DeliveryConfirmationTemplate
from notifications.templates.order_cancellation import OrderCancellationTemplate
from notifications.templates.order_confirmation import OrderConfirmationTemplate
from notifications.templates.order_update import OrderUpdateTemplate
from notifications.templates.shipping_update import ShippingUpdateTemplate

TEMPLATES: tuple[type, ...] = (
    OrderConfirmationTemplate,
    ShippingUpdateTemplate,
    DeliveryConfirmationTemplate,
    OrderCancellationTemplate,
)

TEMPLATE_REGISTRY: dict[str, type] = {template.notification_type: template for template in TEMPLATES}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    return TEMPLATE_REGISTRY.get(notification_type, OrderUpdateTemplate)
