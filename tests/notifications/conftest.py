from decimal import Decimal

import pytest

from notifications.dispatch import NotificationDispatcher
from ordering.order.order import Order, OrderLine


def _make_order(user_id="user-1", total="7.500") -> Order:
    line = OrderLine(title="Pistachio Cup", quantity=1, price=total, total=total)
    return Order.create(user_id=user_id, items=[line], total_amount=Decimal(total))


@pytest.fixture
def make_order():
    return _make_order


@pytest.fixture
def dispatcher(store, email):
    return NotificationDispatcher(store, email=email)


@pytest.fixture
async def order_id(store):
    store.add_profile("user-1", first_name="Sara", last_name="Ali", email="sara@example.com")
    return await store.insert_order(_make_order())
