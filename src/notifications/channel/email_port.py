"""Email channel port."""

from abc import ABC, abstractmethod
from enum import Enum


class DeliveryStatus(Enum):
    SENT = "sent"
    FAILED = "failed"


class EmailPort(ABC):
    """Abstract interface for email dispatch adapters."""

    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> dict:
        """Hand one message to the email provider.

        Returns:
            dict with keys: message_id, status (a ``DeliveryStatus`` value), error (optional)
        """
        ...
