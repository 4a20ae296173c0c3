"""Checkout orchestration: turns the current cart into an order.

Flow:
    1. Empty cart → fail without touching the Order Store
    2. Compute total_amount and snapshot the cart lines
    3. Signed-in session → insert the order (status pending)
    4a. Insert succeeded → Committed; schedule the confirmation email
    4b. Anonymous, or insert failed → LocalOnly with the client fallback id

Checkout is not transactional across its two durable effects: the order
insert and the confirmation notification are independent, and a failed
notification never rolls the order back. A failed insert is not surfaced
as a checkout failure either; the caller can tell the two apart through
the tagged ``outcome``.
"""

import asyncio
import random
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal

import structlog
from protean.exceptions import ValidationError as DomainValidationError

from notifications.notifier import Notifier
from ordering.cart.cart import CartStore
from ordering.cart.items import CartLineItem
from ordering.cart.pricing import calculate_subtotal
from ordering.order.order import DeliveryAddress, NotificationType, Order, OrderLine
from ordering.order.store import OrderStore
from ordering.session import Session
from shared.errors import StoreFailure, StorefrontError, describe

logger = structlog.get_logger(__name__)

EMPTY_CART_ERROR = "Cannot create checkout with empty cart"
SUCCESS_MESSAGE = "Order processed successfully"
CHECKOUT_FAILED_ERROR = "Checkout failed, please try again"


@dataclass(frozen=True)
class CheckoutOptions:
    email: str | None = None
    address: DeliveryAddress | None = None
    payment_method: str | None = None
    special_instructions: str = ""


@dataclass(frozen=True)
class Committed:
    """The order was persisted by the Order Store."""

    order_id: str
    kind: Literal["committed"] = "committed"


@dataclass(frozen=True)
class LocalOnly:
    """Checkout completed for the user, but no durable order exists."""

    order_id: str
    reason: str
    kind: Literal["local_only"] = "local_only"


@dataclass(frozen=True)
class CheckoutResult:
    success: bool
    order_id: str | None = None
    total_amount: Decimal | None = None
    order_summary: list[OrderLine] = field(default_factory=list)
    message: str | None = None
    error: str | None = None
    outcome: Committed | LocalOnly | None = None

    @property
    def persisted(self) -> bool:
        return isinstance(self.outcome, Committed)


def fallback_order_id() -> str:
    """Client-generated id used when the order is not persisted."""
    return f"ORD-{int(time.time() * 1000)}-{random.randint(0, 999)}"


class CheckoutOrchestrator:
    def __init__(self, store: OrderStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier
        self._pending: set[asyncio.Task] = set()

    async def checkout(
        self,
        session: Session,
        cart: CartStore | Iterable[CartLineItem],
        options: CheckoutOptions | None = None,
    ) -> CheckoutResult:
        options = options or CheckoutOptions()
        items = list(cart.items) if isinstance(cart, CartStore) else list(cart)

        if not items:
            logger.warning("Checkout attempted with empty cart", user_id=session.user_id)
            return CheckoutResult(success=False, error=EMPTY_CART_ERROR)

        try:
            total_amount = calculate_subtotal(items)
            snapshot = [OrderLine.from_cart_line(item) for item in items]
            outcome = await self._persist(session, snapshot, total_amount, options)
        except (StorefrontError, DomainValidationError) as exc:
            error = describe(exc.messages)
            logger.warning("Checkout rejected", user_id=session.user_id, error=error)
            return CheckoutResult(success=False, error=error)
        except Exception:
            logger.exception("Checkout failed", user_id=session.user_id)
            return CheckoutResult(success=False, error=CHECKOUT_FAILED_ERROR)

        if isinstance(outcome, Committed):
            self._schedule_confirmation(outcome.order_id, session)

        logger.info(
            "Checkout completed",
            order_id=outcome.order_id,
            outcome=outcome.kind,
            total_amount=str(total_amount),
            contact_email=options.email,
        )
        return CheckoutResult(
            success=True,
            order_id=outcome.order_id,
            total_amount=total_amount,
            order_summary=snapshot,
            message=SUCCESS_MESSAGE,
            outcome=outcome,
        )

    async def _persist(
        self,
        session: Session,
        snapshot: list[OrderLine],
        total_amount: Decimal,
        options: CheckoutOptions,
    ) -> Committed | LocalOnly:
        local_id = fallback_order_id()
        if not session.is_authenticated:
            return LocalOnly(order_id=local_id, reason="No signed-in user; order not persisted")

        order = Order.create(
            user_id=session.user_id,
            items=snapshot,
            total_amount=total_amount,
            delivery_address=options.address,
            special_instructions=options.special_instructions,
            payment_method=options.payment_method,
        )
        try:
            order_id = await self.store.insert_order(order)
        except StoreFailure as exc:
            logger.error("Error saving order to database", user_id=session.user_id, error=str(exc))
            return LocalOnly(order_id=local_id, reason=str(exc))

        return Committed(order_id=order_id)

    # -------------------------------------------------------------------
    # Fire-and-forget confirmation
    # -------------------------------------------------------------------
    def _schedule_confirmation(self, order_id: str, session: Session) -> None:
        task = asyncio.create_task(self._send_confirmation(order_id, session.access_token))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send_confirmation(self, order_id: str, access_token: str | None) -> None:
        try:
            await self.notifier.send_notification(order_id, NotificationType.CONFIRMATION, access_token=access_token)
        except Exception as exc:
            logger.error("Error sending confirmation email", order_id=order_id, error=str(exc))

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for outstanding confirmation emails to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
