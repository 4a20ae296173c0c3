"""Notifications bounded context: order emails rendered and handed to a channel."""

import structlog
from protean.domain import Domain

notifications = Domain(name="notifications")

logger = structlog.get_logger(__name__)
