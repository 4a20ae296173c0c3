"""Tests for admin status transitions and explicit notification requests."""

import pytest

from ordering.order.order import NotificationType, OrderStatus
from ordering.status import OrderStatusMachine
from shared.errors import (
    Forbidden,
    IllegalTransition,
    NotFound,
    NotifyFailure,
    StoreFailure,
    Unauthenticated,
    ValidationError,
)


@pytest.fixture
def machine(store, notifier):
    return OrderStatusMachine(store, notifier)


@pytest.fixture
def strict_machine(store, notifier):
    return OrderStatusMachine(store, notifier, strict=True)


@pytest.fixture
async def order_id(store, make_order):
    store.add_profile("user-1", first_name="Sara", email="sara@example.com")
    return await store.insert_order(make_order(user_id="user-1"))


class TestTransition:
    async def test_admin_moves_order_and_notifies(self, machine, store, email, admin_session, order_id):
        result = await machine.transition(admin_session, order_id, "processing")

        assert result.order.status == "processing"
        assert (await store.get_order(order_id)).status == "processing"
        assert result.notified
        assert result.notification.message == f"processing email sent for order {order_id}"
        assert email.sent_emails[-1]["to"] == "sara@example.com"
        assert (await store.get_order(order_id)).last_notification_sent == "processing"

    async def test_status_round_trip(self, machine, store, admin_session, order_id):
        await machine.transition(admin_session, order_id, "shipped")
        order = await store.get_order(order_id)
        assert order.status == "shipped"
        assert order.last_notification_sent == "shipped"

    async def test_updated_at_moves_forward(self, machine, store, admin_session, order_id):
        before = (await store.get_order(order_id)).updated_at
        result = await machine.transition(admin_session, order_id, OrderStatus.SHIPPED)
        assert result.order.updated_at >= before
        assert result.order.created_at == (await store.get_order(order_id)).created_at

    async def test_permissive_by_default(self, machine, admin_session, order_id):
        await machine.transition(admin_session, order_id, "delivered")
        result = await machine.transition(admin_session, order_id, "pending")
        assert result.order.status == "pending"

    async def test_customer_is_forbidden(self, machine, store, customer_session, order_id):
        with pytest.raises(Forbidden):
            await machine.transition(customer_session, order_id, "shipped")
        assert (await store.get_order(order_id)).status == "pending"

    async def test_anonymous_is_unauthenticated(self, machine, anonymous_session, order_id):
        with pytest.raises(Unauthenticated):
            await machine.transition(anonymous_session, order_id, "shipped")

    async def test_unknown_status(self, machine, store, admin_session, order_id):
        with pytest.raises(ValidationError):
            await machine.transition(admin_session, order_id, "lost")
        assert (await store.get_order(order_id)).status == "pending"

    async def test_missing_order(self, machine, admin_session):
        with pytest.raises(NotFound):
            await machine.transition(admin_session, "ord-missing", "shipped")

    async def test_store_failure_propagates(self, machine, break_store, admin_session, order_id):
        break_store("update_order_status")
        with pytest.raises(StoreFailure):
            await machine.transition(admin_session, order_id, "shipped")

    async def test_notification_failure_is_reported_not_raised(self, machine, store, email, admin_session, order_id):
        email.configure(should_succeed=False, failure_reason="SMTP timeout")
        result = await machine.transition(admin_session, order_id, "cancelled")
        assert result.order.status == "cancelled"
        assert (await store.get_order(order_id)).status == "cancelled"
        assert not result.notified
        assert result.notification_error == "SMTP timeout"


class TestStrictMode:
    async def test_follows_graph(self, strict_machine, admin_session, order_id):
        await strict_machine.transition(admin_session, order_id, "processing")
        await strict_machine.transition(admin_session, order_id, "shipped")
        result = await strict_machine.transition(admin_session, order_id, "delivered")
        assert result.order.status == "delivered"

    async def test_rejects_skipping(self, strict_machine, store, admin_session, order_id):
        with pytest.raises(IllegalTransition):
            await strict_machine.transition(admin_session, order_id, "shipped")
        assert (await store.get_order(order_id)).status == "pending"

    async def test_terminal_state(self, strict_machine, admin_session, order_id):
        await strict_machine.transition(admin_session, order_id, "cancelled")
        with pytest.raises(IllegalTransition):
            await strict_machine.transition(admin_session, order_id, "processing")

    async def test_missing_order(self, strict_machine, admin_session):
        with pytest.raises(NotFound):
            await strict_machine.transition(admin_session, "ord-missing", "processing")

    async def test_enabled_from_settings(self, store, notifier, monkeypatch):
        from shared.config import get_settings

        monkeypatch.setenv("STRICT_STATUS_TRANSITIONS", "1")
        get_settings.cache_clear()
        assert OrderStatusMachine(store, notifier).strict is True


class TestSendNotification:
    async def test_admin_resends_confirmation(self, machine, store, email, admin_session, order_id):
        receipt = await machine.send_notification(admin_session, order_id, "confirmation")
        assert receipt.subject == f"Order Confirmed #{order_id}"
        assert receipt.recipient == "sara@example.com"
        assert (await store.get_order(order_id)).last_notification_sent == NotificationType.CONFIRMATION.value

    async def test_failure_is_raised(self, machine, email, admin_session, order_id):
        email.configure(should_succeed=False)
        with pytest.raises(NotifyFailure):
            await machine.send_notification(admin_session, order_id, NotificationType.SHIPPED)

    async def test_missing_order_is_notify_failure(self, machine, admin_session):
        with pytest.raises(NotifyFailure):
            await machine.send_notification(admin_session, "ord-missing", "shipped")

    async def test_requires_admin(self, machine, customer_session, order_id):
        with pytest.raises(Forbidden):
            await machine.send_notification(customer_session, order_id, "shipped")

    async def test_unknown_type(self, machine, admin_session, order_id):
        with pytest.raises(ValidationError):
            await machine.send_notification(admin_session, order_id, "welcome")
