from typing import NamedTuple

from ordering.order.order import OrderStatus


class StatusStyle(NamedTuple):
    badge: str
    icon: str


STATUS_STYLES: dict[str, StatusStyle] = {
    OrderStatus.PENDING.value: StatusStyle("bg-yellow-100 text-yellow-800", "clock"),
    OrderStatus.PROCESSING.value: StatusStyle("bg-blue-100 text-blue-800", "loader"),
    OrderStatus.SHIPPED.value: StatusStyle("bg-purple-100 text-purple-800", "package"),
    OrderStatus.DELIVERED.value: StatusStyle("bg-green-100 text-green-800", "shopping-bag"),
    OrderStatus.CANCELLED.value: StatusStyle("bg-red-100 text-red-800", "alert-circle"),
}

DEFAULT_STYLE = StatusStyle("bg-gray-100 text-gray-800", "clock")


def status_style(status: OrderStatus | str | None) -> StatusStyle:
    """Badge classes and icon name for a status; unknown values get the neutral style."""
    if isinstance(status, OrderStatus):
        status = status.value
    if not isinstance(status, str):
        return DEFAULT_STYLE
    return STATUS_STYLES.get(status.lower(), DEFAULT_STYLE)
