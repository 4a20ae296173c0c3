import pytest

from notifications.dispatch import NotificationDispatcher
from notifications.notifier import LocalNotifier
from ordering.cart.cart import CartStore
from ordering.cart.items import CartLineItem
from ordering.order.order import Order, OrderLine


def _make_item(variant_id="var-vanilla", quantity=1, price="2.500", title="Vanilla Scoop", **extra) -> CartLineItem:
    return CartLineItem(variant_id=variant_id, quantity=quantity, price=price, title=title, **extra)


def _make_order(user_id="user-1", price="2.500", quantity=2, **overrides) -> Order:
    line = OrderLine.from_cart_line(_make_item(price=price, quantity=quantity))
    defaults = {
        "user_id": user_id,
        "items": [line],
        "total_amount": line.line_amount,
    }
    defaults.update(overrides)
    return Order.create(**defaults)


@pytest.fixture
def make_item():
    return _make_item


@pytest.fixture
def make_order():
    return _make_order


@pytest.fixture
def cart(storage, feedback):
    cart = CartStore(storage, feedback=feedback)
    cart.load()
    yield cart
    cart.close()


@pytest.fixture
def dispatcher(store, email):
    return NotificationDispatcher(store, email=email)


@pytest.fixture
def notifier(dispatcher):
    return LocalNotifier(dispatcher)
