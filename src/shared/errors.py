"""Error taxonomy shared by the ordering and notifications packages.

The kinds build on the domain framework's exceptions so that a caller
catching ``protean.exceptions.ValidationError`` or ``ObjectNotFoundError``
also catches ours. Every error carries a ``messages`` dict keyed by the
offending field (or a general key such as ``"order"``), the same shape the
framework raises: ``{"cart": ["Cannot checkout an empty cart"]}``.
"""

from protean.exceptions import (
    InvalidOperationError,
    ObjectNotFoundError,
    ProteanExceptionWithMessage,
    SendError,
)
from protean.exceptions import ValidationError as DomainValidationError


class StorefrontError(ProteanExceptionWithMessage):
    """Base class for all storefront errors."""

    default_key = "error"

    def __init__(self, messages: dict[str, list[str]] | list[str] | str | None = None, **kwargs):
        if messages is None:
            messages = {}
        elif isinstance(messages, str):
            messages = {self.default_key: [messages]}
        elif isinstance(messages, list):
            messages = {self.default_key: list(messages)}
        super().__init__(dict(messages), **kwargs)

    def __str__(self) -> str:
        return describe(self.messages) or self.__class__.__name__

    def __reduce__(self):
        return (self.__class__, (self.messages,))


def describe(messages: dict[str, list[str]] | list[str] | str) -> str:
    """Flatten framework-style messages into one readable line."""
    if isinstance(messages, str):
        return messages
    if isinstance(messages, dict):
        messages = [msg for msgs in messages.values() for msg in (msgs if isinstance(msgs, list) else [msgs])]
    return "; ".join(str(msg) for msg in messages)


class ValidationError(StorefrontError, DomainValidationError):
    """Input rejected before any side effect took place."""

    @classmethod
    def from_domain(cls, exc: DomainValidationError) -> "ValidationError":
        """Re-raise a framework field error with readable ``str()`` output."""
        return cls(exc.messages)


class IllegalTransition(ValidationError):
    default_key = "status"


class Unauthenticated(StorefrontError, InvalidOperationError):
    default_key = "session"


class Forbidden(StorefrontError, InvalidOperationError):
    default_key = "session"


class NotFound(StorefrontError, ObjectNotFoundError):
    default_key = "order"


class StoreFailure(StorefrontError):
    """The Order Store could not complete a request."""

    default_key = "store"


class NotifyFailure(StorefrontError, SendError):
    """A notification request could not be delivered to the Notifier."""

    default_key = "notification"
