"""Process-wide wiring of stores, notifier and services from settings.

Singletons are created lazily on first use. ``reset_providers`` drops
them so tests can re-wire with different settings.
"""

import structlog

from notifications.dispatch import NotificationDispatcher
from notifications.notifier import HttpNotifier, LocalNotifier, Notifier
from ordering.access import OrderAccess
from ordering.cart.cart import CartStore
from ordering.cart.storage import CartStorage, FileStorage, MemoryStorage
from ordering.checkout.orchestrator import CheckoutOrchestrator
from ordering.domain import ordering
from ordering.order.repository import RepositoryOrderStore
from ordering.order.store import OrderStore
from ordering.status import OrderStatusMachine
from ordering.utils.db import configure_database, setup_db
from shared.config import get_settings
from shared.feedback import Feedback

logger = structlog.get_logger(__name__)

_instances: dict[str, object] = {}


def get_order_store() -> OrderStore:
    """Connect the ordering domain to ``ORDER_STORE_URL`` (memory when unset)."""
    if "order_store" not in _instances:
        url = get_settings().ORDER_STORE_URL
        configure_database(ordering, url)
        setup_db(ordering)
        store = RepositoryOrderStore(ordering)
        logger.info("Order store connected", provider=store.provider)
        _instances["order_store"] = store
    return _instances["order_store"]


def get_dispatcher() -> NotificationDispatcher:
    if "dispatcher" not in _instances:
        _instances["dispatcher"] = NotificationDispatcher(get_order_store())
    return _instances["dispatcher"]


def get_notifier() -> Notifier:
    if "notifier" not in _instances:
        settings = get_settings()
        if settings.NOTIFIER_URL:
            _instances["notifier"] = HttpNotifier(settings.NOTIFIER_URL, timeout=settings.NOTIFIER_TIMEOUT_SECS)
        else:
            _instances["notifier"] = LocalNotifier(get_dispatcher())
    return _instances["notifier"]


def get_cart_storage() -> CartStorage:
    if "cart_storage" not in _instances:
        directory = get_settings().CART_STORAGE_DIR
        _instances["cart_storage"] = FileStorage(directory) if directory else MemoryStorage()
    return _instances["cart_storage"]


def open_cart(feedback: Feedback | None = None) -> CartStore:
    """Attach a new context to the shared cart storage and load its snapshot."""
    cart = CartStore(get_cart_storage(), feedback=feedback)
    cart.load()
    return cart


def get_checkout() -> CheckoutOrchestrator:
    if "checkout" not in _instances:
        _instances["checkout"] = CheckoutOrchestrator(get_order_store(), get_notifier())
    return _instances["checkout"]


def get_order_access() -> OrderAccess:
    return OrderAccess(get_order_store())


def get_status_machine() -> OrderStatusMachine:
    return OrderStatusMachine(get_order_store(), get_notifier())


def reset_providers():
    """Drop all singletons (useful for testing)."""
    _instances.clear()
    get_settings.cache_clear()
