"""Order aggregate: the contract for what the customer agreed to pay.

An order is created once at checkout from an immutable snapshot of the
cart lines and is afterwards only touched by status transitions and the
notification-sent marker. ``total_amount`` is fixed at creation and must
equal the sum of the line totals; it is never recomputed.

State Machine:
    pending → processing → shipped → delivered
    pending/processing → cancelled

Notification types are the statuses plus ``confirmation``, which is only
sent at checkout.

``OrderNumber`` hands out the store-assigned sequence that keeps orders
created in the same instant in insertion order. ``Profile`` and
``UserRole`` are the customer records the store joins against.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal as D
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError as DomainValidationError
from protean.fields import Auto, DateTime, Decimal, Identifier, Integer, List, String, Text, ValueObject

from ordering.cart.items import CartLineItem
from ordering.domain import ordering
from shared.errors import IllegalTransition, ValidationError
from shared.formatting import format_amount, parse_amount, quantize_amount

ADMIN_ROLE = "admin"

# NUMERIC(15, 3)
MAX_ORDER_TOTAL = D("999999999999.999")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class NotificationType(Enum):
    CONFIRMATION = "confirmation"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def label(cls, notification_type: "NotificationType | str") -> str:
        """Wire value of a type; unrecognized strings pass through unchanged."""
        if isinstance(notification_type, cls):
            return notification_type.value
        return str(notification_type)


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def can_transition(current: OrderStatus | None, target: OrderStatus) -> bool:
    if current is None:
        return False
    return target in _VALID_TRANSITIONS.get(current, set())


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class DeliveryAddress:
    """Where the order goes, as captured at checkout time."""

    first_name = String(max_length=100, sanitize=False)
    last_name = String(max_length=100, sanitize=False)
    address1 = String(max_length=255, sanitize=False)
    address2 = String(max_length=255, sanitize=False)
    city = String(max_length=100, sanitize=False)
    province = String(max_length=100, sanitize=False)
    country = String(max_length=100, sanitize=False)
    zip = String(max_length=20)
    phone = String(max_length=30)


@ordering.value_object(part_of="Order")
class OrderLine:
    """Denormalized copy of one cart line, decoupled from the live catalog."""

    title = String(required=True, max_length=255, sanitize=False)
    quantity = Integer(required=True, min_value=1)
    price = String(required=True, max_length=50)
    container = String(max_length=100, sanitize=False)
    toppings = String(max_length=500, sanitize=False)
    total = String(required=True, max_length=50)

    @classmethod
    def from_cart_line(cls, item: CartLineItem) -> "OrderLine":
        customizations = item.customizations
        return cls(
            title=item.title or "Unknown product",
            quantity=item.quantity,
            price=item.price or "0",
            container=customizations.container_name if customizations is not None else None,
            toppings=customizations.topping_display if customizations is not None else None,
            total=format_amount(item.line_total),
        )

    @property
    def line_amount(self) -> D:
        return parse_amount(self.price) * self.quantity


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    """A placed order.

    ``status`` is kept as the raw stored string so that a record carrying a
    value outside the known vocabulary can still be read and displayed.
    """

    user_id = Identifier()
    items = List(content_type=ValueObject(OrderLine))
    total_amount = Decimal(required=True, precision=15, scale=3)
    status = String(max_length=20, default=OrderStatus.PENDING.value)
    delivery_address = ValueObject(DeliveryAddress)
    special_instructions = Text(default="", sanitize=False)
    payment_method = String(max_length=50)
    sequence = Integer()
    created_at = DateTime()
    updated_at = DateTime()
    last_notification_sent = String(max_length=20)

    @invariant.post
    def total_must_match_lines(self):
        expected = sum((line.line_amount for line in self.items or []), D("0"))
        if quantize_amount(expected) != quantize_amount(self.total_amount):
            raise ValidationError(
                {"total_amount": [f"Order total {self.total_amount} does not match line totals {expected}"]}
            )

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        user_id: str,
        items: list[OrderLine],
        total_amount: D,
        delivery_address: DeliveryAddress | None = None,
        special_instructions: str = "",
        payment_method: str | None = None,
    ) -> "Order":
        if not items:
            raise ValidationError({"items": ["An order needs at least one line"]})
        if abs(total_amount) > MAX_ORDER_TOTAL:
            raise ValidationError({"total_amount": [f"Order total exceeds the maximum of {MAX_ORDER_TOTAL}"]})

        now = datetime.now(UTC)
        try:
            return cls(
                user_id=user_id,
                items=items,
                total_amount=quantize_amount(total_amount),
                status=OrderStatus.PENDING.value,
                delivery_address=delivery_address,
                special_instructions=special_instructions or "",
                payment_method=payment_method,
                created_at=now,
                updated_at=now,
            )
        except ValidationError:
            raise
        except DomainValidationError as exc:
            raise ValidationError.from_domain(exc) from exc

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    @property
    def known_status(self) -> OrderStatus | None:
        try:
            return OrderStatus(self.status)
        except ValueError:
            return None

    def is_owned_by(self, user_id: str | None) -> bool:
        return user_id is not None and self.user_id == user_id

    def change_status(self, target: OrderStatus, strict: bool = False) -> None:
        """Move to ``target``; in strict mode only along the transition graph."""
        if strict:
            self._assert_can_transition(target)
        self.status = target.value
        self.updated_at = datetime.now(UTC)

    def record_notification(self, notification_type: "NotificationType | str") -> None:
        self.last_notification_sent = NotificationType.label(notification_type)
        self.updated_at = datetime.now(UTC)

    def _assert_can_transition(self, target: OrderStatus) -> None:
        if not can_transition(self.known_status, target):
            raise IllegalTransition({"status": [f"Cannot transition from {self.status} to {target.value}"]})


@ordering.aggregate
class OrderNumber:
    """Store-assigned, strictly increasing number for each inserted order."""

    number = Auto(identifier=True, increment=True)
    order_id = Identifier(required=True)


@ordering.aggregate
class Profile:
    """Display profile of a customer, keyed by user id."""

    id = Identifier(identifier=True)
    first_name = String(max_length=100, sanitize=False)
    last_name = String(max_length=100, sanitize=False)
    email = String(max_length=255)


@ordering.aggregate
class UserRole:
    user_id = Identifier(required=True)
    role = String(required=True, max_length=20)


@dataclass(frozen=True)
class OrderWithOwner:
    """Order joined with the owner's display profile (admin listing)."""

    order: Order
    owner: Profile | None = None

    @property
    def id(self) -> str:
        return self.order.id
