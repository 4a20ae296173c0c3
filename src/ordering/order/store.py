"""Order Store port.

Durable CRUD for orders plus role and profile lookups. Every operation is a
coroutine and may raise ``StoreFailure``. Listings are returned newest
first by ``created_at``; orders created in the same instant keep their
insertion order.
"""

from typing import Protocol

from ordering.order.order import NotificationType, Order, OrderStatus, OrderWithOwner, Profile


class OrderStore(Protocol):
    async def insert_order(self, order: Order) -> str:
        """Persist a new order and return its id."""
        ...

    async def get_order(self, order_id: str) -> Order | None: ...

    async def list_orders_by_user(self, user_id: str) -> list[Order]: ...

    async def list_all_orders(self) -> list[OrderWithOwner]: ...

    async def update_order_status(self, order_id: str, status: OrderStatus, strict: bool = False) -> Order:
        """Set the status and bump ``updated_at``; raises ``NotFound`` if absent.

        In strict mode a move off the transition graph raises ``IllegalTransition``.
        """
        ...

    async def mark_notification_sent(self, order_id: str, notification_type: NotificationType | str) -> Order:
        """Record ``last_notification_sent`` and bump ``updated_at``."""
        ...

    async def has_role(self, user_id: str, role: str) -> bool: ...

    async def get_profile(self, user_id: str) -> Profile | None: ...
