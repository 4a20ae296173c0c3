"""Ordering bounded context: cart, checkout and the order lifecycle.

Carts live client-side and are modelled as value objects. Orders, the
order-number sequence, customer profiles and roles are aggregates kept by
the Order Store.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
