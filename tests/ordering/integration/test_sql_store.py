"""Integration tests for the Order Store on a file-backed SQLite database."""

import asyncio
from decimal import Decimal

import pytest
from freezegun import freeze_time

from notifications.dispatch import NotificationReceipt
from ordering.checkout.orchestrator import CheckoutOrchestrator, Committed
from ordering.domain import ordering
from ordering.order.order import DeliveryAddress, NotificationType, OrderStatus
from ordering.order.repository import RepositoryOrderStore
from ordering.utils.db import configure_database, drop_db, setup_db
from shared.errors import IllegalTransition, NotFound, StoreFailure


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'orders.db'}"


@pytest.fixture
def sql_store(database_url):
    configure_database(ordering, database_url)
    setup_db(ordering)

    yield RepositoryOrderStore(ordering)

    drop_db(ordering)
    configure_database(ordering, None)


class SilentNotifier:
    def __init__(self):
        self.calls = []

    async def send_notification(self, order_id, notification_type, access_token=None):
        self.calls.append(order_id)
        return NotificationReceipt(message="sent", delivery_status="sent")


class TestSqlOrderStore:
    async def test_provider(self, sql_store):
        assert sql_store.provider == "sqlite"

    async def test_insert_and_get(self, sql_store, make_order):
        address = DeliveryAddress(first_name="Sara", city="Salmiya", country="Kuwait")
        order_id = await sql_store.insert_order(
            make_order(price="2.500", quantity=2, delivery_address=address, payment_method="cash")
        )

        order = await sql_store.get_order(order_id)

        assert order.user_id == "user-1"
        assert order.status == "pending"
        assert order.total_amount == Decimal("5.000")
        assert order.items[0].title == "Vanilla Scoop"
        assert order.items[0].total == "5.000"
        assert order.delivery_address == address
        assert order.payment_method == "cash"
        assert order.special_instructions == ""
        assert order.sequence is not None

    async def test_get_missing(self, sql_store):
        assert await sql_store.get_order("nope") is None

    async def test_sequence_increases(self, sql_store, make_order):
        ids = [await sql_store.insert_order(make_order()) for _ in range(3)]
        sequences = [(await sql_store.get_order(order_id)).sequence for order_id in ids]
        assert sequences == sorted(sequences)
        assert len(set(sequences)) == 3

    async def test_list_by_user_newest_first(self, sql_store, make_order):
        with freeze_time("2026-02-01 09:00:00"):
            older = await sql_store.insert_order(make_order(user_id="user-1"))
        with freeze_time("2026-02-02 09:00:00"):
            newer = await sql_store.insert_order(make_order(user_id="user-1"))
            await sql_store.insert_order(make_order(user_id="user-2"))

        orders = await sql_store.list_orders_by_user("user-1")

        assert [order.id for order in orders] == [newer, older]

    async def test_ties_keep_insertion_order(self, sql_store, make_order):
        with freeze_time("2026-02-01 09:00:00"):
            ids = [await sql_store.insert_order(make_order()) for _ in range(3)]
        orders = await sql_store.list_orders_by_user("user-1")
        assert [order.id for order in orders] == ids

    async def test_list_all_joins_profile(self, sql_store, make_order):
        sql_store.add_profile("user-1", first_name="Sara", last_name="Ali", email="sara@example.com")
        with freeze_time("2026-02-01 09:00:00"):
            with_profile = await sql_store.insert_order(make_order(user_id="user-1"))
        with freeze_time("2026-02-02 09:00:00"):
            without_profile = await sql_store.insert_order(make_order(user_id="user-3"))

        orders = await sql_store.list_all_orders()

        assert [order.id for order in orders] == [without_profile, with_profile]
        assert orders[0].owner is None
        assert orders[1].owner.last_name == "Ali"

    async def test_update_status(self, sql_store, make_order):
        with freeze_time("2026-02-01 09:00:00"):
            order_id = await sql_store.insert_order(make_order())
        with freeze_time("2026-02-01 10:00:00"):
            order = await sql_store.update_order_status(order_id, OrderStatus.PROCESSING)

        assert order.status == "processing"
        stored = await sql_store.get_order(order_id)
        assert stored.status == "processing"
        assert stored.updated_at > stored.created_at

    async def test_strict_update_rejects_illegal_transition(self, sql_store, make_order):
        order_id = await sql_store.insert_order(make_order())
        with pytest.raises(IllegalTransition):
            await sql_store.update_order_status(order_id, OrderStatus.DELIVERED, strict=True)
        assert (await sql_store.get_order(order_id)).status == "pending"

    async def test_update_missing(self, sql_store):
        with pytest.raises(NotFound):
            await sql_store.update_order_status("nope", OrderStatus.SHIPPED)

    async def test_mark_notification_sent(self, sql_store, make_order):
        order_id = await sql_store.insert_order(make_order())
        await sql_store.mark_notification_sent(order_id, NotificationType.CONFIRMATION)
        assert (await sql_store.get_order(order_id)).last_notification_sent == "confirmation"

    async def test_roles(self, sql_store):
        sql_store.grant_role("admin-1", "admin")
        sql_store.grant_role("admin-1", "admin")
        assert await sql_store.has_role("admin-1", "admin")
        assert not await sql_store.has_role("user-1", "admin")

    async def test_profiles(self, sql_store):
        sql_store.add_profile("user-1", email="old@example.com")
        sql_store.add_profile("user-1", email="new@example.com")
        assert (await sql_store.get_profile("user-1")).email == "new@example.com"
        assert await sql_store.get_profile("user-9") is None

    async def test_file_database_survives_reconnect(self, sql_store, make_order):
        order_id = await sql_store.insert_order(make_order())

        ordering.providers._initialize()

        assert (await sql_store.get_order(order_id)).id == order_id


class TestMissingSchema:
    @pytest.fixture
    def bare_store(self, database_url):
        configure_database(ordering, database_url)
        yield RepositoryOrderStore(ordering)
        configure_database(ordering, None)

    async def test_database_errors_become_store_failure(self, bare_store, make_order):
        with pytest.raises(StoreFailure, match="insert_order failed"):
            await bare_store.insert_order(make_order())
        with pytest.raises(StoreFailure, match="has_role failed"):
            await bare_store.has_role("user-1", "admin")


class TestConcurrentCheckout:
    async def test_parallel_checkouts_each_commit_once(self, sql_store, customer_session, make_item):
        notifier = SilentNotifier()
        checkout = CheckoutOrchestrator(sql_store, notifier)
        carts = [[make_item(variant_id=f"var-{n}", price="1.250", quantity=n + 1)] for n in range(20)]

        results = await asyncio.gather(*(checkout.checkout(customer_session, items) for items in carts))
        await checkout.drain()

        assert all(result.success for result in results)
        assert all(isinstance(result.outcome, Committed) for result in results)
        assert len({result.order_id for result in results}) == 20

        orders = await sql_store.list_orders_by_user("user-1")
        assert len(orders) == 20
        assert len({order.sequence for order in orders}) == 20
        assert sorted(notifier.calls) == sorted(result.order_id for result in results)
