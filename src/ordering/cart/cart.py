"""Shopping cart held by one browsing context.

``CartStore`` owns the line items of a single context (a tab). Every
mutation replaces the whole persisted snapshot, then synchronously notifies
the store's own subscribers. Other contexts attached to the same storage
backend receive a ``StorageEvent`` for the cart key and reload the full
snapshot from storage.

Concurrent edits in two contexts are not reconciled: whichever context
saves last overwrites the record, and the other context adopts that
snapshot on its next reload.

Persistence is best-effort. A storage failure is logged and the in-memory
cart keeps working.
"""

from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

import structlog
from protean.exceptions import ValidationError

from ordering.cart.items import CartLineItem, dump_cart, load_cart
from ordering.cart.pricing import CartSummary, calculate_subtotal, summarize
from ordering.cart.storage import CartStorage, StorageEvent
from shared.config import get_settings
from shared.feedback import Feedback, LoggingFeedback

logger = structlog.get_logger(__name__)

CartListener = Callable[[tuple[CartLineItem, ...]], None]


class CartStore:
    def __init__(
        self,
        storage: CartStorage,
        key: str | None = None,
        feedback: Feedback | None = None,
    ):
        self.storage = storage
        self.key = key or get_settings().CART_STORAGE_KEY
        self.feedback = feedback or LoggingFeedback()
        self._items: list[CartLineItem] = []
        self._subscribers: list[CartListener] = []
        self._detach = storage.subscribe(self._on_storage_event)

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return tuple(self._items)

    # -------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------
    def load(self) -> tuple[CartLineItem, ...]:
        """Read the persisted cart. A corrupt record is discarded; never raises."""
        try:
            raw = self.storage.get(self.key)
        except OSError as exc:
            logger.error("Error loading cart from storage", key=self.key, error=str(exc))
            raw = None

        try:
            items = load_cart(raw) if raw else []
        except ValidationError as exc:
            logger.error("Discarding corrupt cart record", key=self.key, error=str(exc))
            items = []
            try:
                self.storage.remove(self.key, source=self)
            except OSError as remove_exc:
                logger.error("Error removing corrupt cart record", key=self.key, error=str(remove_exc))

        self._items = items
        self._notify()
        return self.items

    def _on_storage_event(self, event: StorageEvent) -> None:
        if event.key != self.key or event.source is self:
            return
        self._reload()

    def _reload(self) -> None:
        try:
            raw = self.storage.get(self.key)
            items = load_cart(raw) if raw else []
        except (OSError, ValidationError) as exc:
            logger.error("Error parsing updated cart", key=self.key, error=str(exc))
            return

        self._items = items
        self._notify()

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add(self, item: CartLineItem | Mapping[str, Any]) -> bool:
        """Add a line, merging into an existing line with the same variant."""
        if not isinstance(item, CartLineItem):
            try:
                item = CartLineItem.from_record(dict(item))
            except ValidationError as exc:
                logger.error("Cannot add item without variantId", item=item, error=str(exc))
                self.feedback.error("Could not add item to cart - missing information")
                return False

        items = list(self._items)
        index = next((i for i, line in enumerate(items) if line.variant_id == item.variant_id), None)
        if index is not None:
            items[index] = items[index].with_quantity(items[index].quantity + item.quantity)
        else:
            items.append(item)

        self._commit(items)
        self.feedback.success(f"{item.title or 'Product'} added to cart")
        return True

    def update_quantity(self, variant_id: str, new_quantity: int) -> None:
        if new_quantity <= 0:
            self.remove(variant_id)
            return

        items = [
            line.with_quantity(new_quantity) if line.variant_id == variant_id else line for line in self._items
        ]
        self._commit(items)

    def remove(self, variant_id: str) -> None:
        self._commit([line for line in self._items if line.variant_id != variant_id])
        self.feedback.success("Item removed from cart")

    def clear(self) -> None:
        self._items = []
        try:
            self.storage.remove(self.key, source=self)
        except OSError as exc:
            logger.error("Error removing cart from storage", key=self.key, error=str(exc))
        self._notify()
        self.feedback.success("Cart cleared")

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    def subtotal(self) -> Decimal:
        return calculate_subtotal(self._items)

    def count(self) -> int:
        return sum(line.quantity for line in self._items)

    def summary(self) -> CartSummary:
        return summarize(self._items)

    # -------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------
    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a listener called with the new items after every change."""
        self._subscribers.append(listener)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop following changes made by other contexts."""
        self._detach()
        self._subscribers.clear()

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _commit(self, items: list[CartLineItem]) -> None:
        self._items = items
        try:
            self.storage.set(self.key, dump_cart(items), source=self)
        except OSError as exc:
            logger.error("Error saving cart to storage", key=self.key, error=str(exc))
        self._notify()

    def _notify(self) -> None:
        snapshot = self.items
        for listener in list(self._subscribers):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Cart listener failed", key=self.key)
