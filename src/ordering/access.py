"""Permission-checked order reads.

Owners see their own orders; admins see everything. The session is
resolved before these calls, so no role lookup happens here.
"""

import structlog

from ordering.order.order import Order, OrderWithOwner
from ordering.order.store import OrderStore
from ordering.session import Session
from shared.errors import Forbidden, NotFound

logger = structlog.get_logger(__name__)


class OrderAccess:
    def __init__(self, store: OrderStore):
        self.store = store

    async def get_by_id(self, session: Session, order_id: str) -> Order:
        user_id = session.require_user()

        order = await self.store.get_order(order_id)
        if order is None and session.is_admin:
            raise NotFound(f"Order {order_id} not found")

        # A missing order looks the same as someone else's to non-admins
        if order is None or not (order.is_owned_by(user_id) or session.is_admin):
            logger.warning("Order access denied", order_id=order_id, user_id=user_id)
            raise Forbidden("You do not have permission to view this order")

        return order

    async def list_mine(self, session: Session) -> list[Order]:
        """The caller's orders, newest first."""
        user_id = session.require_user()
        return await self.store.list_orders_by_user(user_id)

    async def list_all(self, session: Session) -> list[OrderWithOwner]:
        """Every order with its owner's profile, newest first. Admin only."""
        session.require_admin()
        return await self.store.list_all_orders()
