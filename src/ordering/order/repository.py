"""Order Store backed by the ordering domain's repositories.

The configured database provider decides where orders live: the memory
provider for local runs and tests, SQLite or PostgreSQL through the
SQLAlchemy provider otherwise (see ``ordering.utils.db``).

Repository work is blocking, so every store operation runs in a worker
thread with its own domain context. Persistence errors surface as
``StoreFailure``.
"""

import asyncio

import structlog
from protean import UnitOfWork
from protean.domain import Domain
from protean.exceptions import DatabaseError, ExpectedVersionError, TransactionError
from sqlalchemy.exc import SQLAlchemyError

from ordering.domain import ordering
from ordering.order.order import (
    NotificationType,
    Order,
    OrderNumber,
    OrderStatus,
    OrderWithOwner,
    Profile,
    UserRole,
)
from shared.errors import NotFound, StoreFailure

logger = structlog.get_logger(__name__)

# Newest first; orders created in the same instant keep insertion order
NEWEST_FIRST = ["-created_at", "sequence"]

PERSISTENCE_ERRORS = (TransactionError, ExpectedVersionError, DatabaseError, SQLAlchemyError)


@ordering.repository(part_of=Order)
class OrderRepository:
    def for_user(self, user_id: str) -> list[Order]:
        return self._dao.query.filter(user_id=user_id).order_by(NEWEST_FIRST).limit(None).all().items

    def newest_first(self) -> list[Order]:
        return self._dao.query.order_by(NEWEST_FIRST).limit(None).all().items


@ordering.repository(part_of=UserRole)
class UserRoleRepository:
    def has_role(self, user_id: str, role: str) -> bool:
        return bool(self._dao.query.filter(user_id=user_id, role=role).all().items)


class RepositoryOrderStore:
    def __init__(self, domain: Domain = ordering):
        self.domain = domain

    @property
    def provider(self) -> str:
        return self.domain.providers["default"].conn_info["provider"]

    async def _run(self, operation: str, fn, *args):
        try:
            return await asyncio.to_thread(self._in_context, fn, *args)
        except PERSISTENCE_ERRORS as exc:
            logger.error("Order store operation failed", operation=operation, error=str(exc))
            raise StoreFailure(f"{operation} failed: {exc}") from exc

    def _in_context(self, fn, *args):
        with self.domain.domain_context():
            return fn(*args)

    # -------------------------------------------------------------------
    # Seeding helpers
    # -------------------------------------------------------------------
    def add_profile(self, user_id: str, first_name=None, last_name=None, email=None) -> Profile:
        return self._in_context(self._add_profile, user_id, first_name, last_name, email)

    def _add_profile(self, user_id, first_name, last_name, email) -> Profile:
        repo = self.domain.repository_for(Profile)
        profile = repo.get_or_none(user_id)
        if profile is None:
            profile = Profile(id=user_id, first_name=first_name, last_name=last_name, email=email)
        else:
            profile.first_name = first_name
            profile.last_name = last_name
            profile.email = email
        repo.add(profile)
        return profile

    def grant_role(self, user_id: str, role: str) -> None:
        self._in_context(self._grant_role, user_id, role)

    def _grant_role(self, user_id: str, role: str) -> None:
        if not self._has_role(user_id, role):
            self.domain.repository_for(UserRole).add(UserRole(user_id=user_id, role=role))

    # -------------------------------------------------------------------
    # OrderStore
    # -------------------------------------------------------------------
    async def insert_order(self, order: Order) -> str:
        return await self._run("insert_order", self._insert_order, order)

    def _insert_order(self, order: Order) -> str:
        with UnitOfWork():
            number = self.domain.repository_for(OrderNumber).add(OrderNumber(order_id=order.id))
            order.sequence = number.number
            self.domain.repository_for(Order).add(order)

        logger.debug("Order inserted", order_id=order.id, user_id=order.user_id, sequence=order.sequence)
        return order.id

    async def get_order(self, order_id: str) -> Order | None:
        return await self._run("get_order", self._get_order, order_id)

    def _get_order(self, order_id: str) -> Order | None:
        return self.domain.repository_for(Order).get_or_none(order_id)

    async def list_orders_by_user(self, user_id: str) -> list[Order]:
        return await self._run("list_orders_by_user", self._list_orders_by_user, user_id)

    def _list_orders_by_user(self, user_id: str) -> list[Order]:
        return self.domain.repository_for(Order).for_user(user_id)

    async def list_all_orders(self) -> list[OrderWithOwner]:
        return await self._run("list_all_orders", self._list_all_orders)

    def _list_all_orders(self) -> list[OrderWithOwner]:
        orders = self.domain.repository_for(Order).newest_first()
        profiles = self.domain.repository_for(Profile)
        owners: dict[str, Profile | None] = {}
        for order in orders:
            if order.user_id and order.user_id not in owners:
                owners[order.user_id] = profiles.get_or_none(order.user_id)
        return [OrderWithOwner(order=order, owner=owners.get(order.user_id)) for order in orders]

    async def update_order_status(self, order_id: str, status: OrderStatus, strict: bool = False) -> Order:
        return await self._run(
            "update_order_status",
            self._update,
            order_id,
            lambda order: order.change_status(status, strict=strict),
        )

    async def mark_notification_sent(self, order_id: str, notification_type: NotificationType | str) -> Order:
        return await self._run(
            "mark_notification_sent",
            self._update,
            order_id,
            lambda order: order.record_notification(notification_type),
        )

    def _update(self, order_id: str, change) -> Order:
        repo = self.domain.repository_for(Order)
        order = repo.get_or_none(order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found")
        change(order)
        repo.add(order)
        return order

    async def has_role(self, user_id: str, role: str) -> bool:
        return await self._run("has_role", self._has_role, user_id, role)

    def _has_role(self, user_id: str, role: str) -> bool:
        return self.domain.repository_for(UserRole).has_role(user_id, role)

    async def get_profile(self, user_id: str) -> Profile | None:
        return await self._run("get_profile", self._get_profile, user_id)

    def _get_profile(self, user_id: str) -> Profile | None:
        return self.domain.repository_for(Profile).get_or_none(user_id)
