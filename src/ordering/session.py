"""The acting identity for one browsing session.

A session is resolved once and passed explicitly to every operation that
needs it. Admin-ness is a capability fixed at resolution time: the role
lookup happens exactly once, in ``resolve_session``.
"""

import structlog
from pydantic import BaseModel, ConfigDict

from ordering.order.order import ADMIN_ROLE
from ordering.order.store import OrderStore
from shared.errors import Forbidden, StoreFailure, Unauthenticated

logger = structlog.get_logger(__name__)


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str | None = None
    role: str | None = None
    access_token: str | None = None
    email: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self.role == ADMIN_ROLE

    def require_user(self) -> str:
        if not self.is_authenticated:
            raise Unauthenticated("Authentication required")
        return self.user_id

    def require_admin(self) -> str:
        user_id = self.require_user()
        if not self.is_admin:
            raise Forbidden("Admin role required")
        return user_id


ANONYMOUS = Session()


async def resolve_session(
    store: OrderStore,
    user_id: str | None,
    access_token: str | None = None,
    email: str | None = None,
) -> Session:
    """Build a session, asking the store once whether the user is an admin.

    A failing role lookup is logged and the session is treated as non-admin.
    """
    if not user_id:
        return Session(access_token=access_token, email=email)

    try:
        is_admin = await store.has_role(user_id, ADMIN_ROLE)
    except StoreFailure as exc:
        logger.warning("Role lookup failed, treating user as non-admin", user_id=user_id, error=str(exc))
        is_admin = False

    return Session(
        user_id=user_id,
        role=ADMIN_ROLE if is_admin else None,
        access_token=access_token,
        email=email,
    )
