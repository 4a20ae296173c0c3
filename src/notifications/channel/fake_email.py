"""Stub email adapter: records and logs messages instead of delivering them."""

from uuid import uuid4

import structlog

from notifications.channel.email_port import DeliveryStatus, EmailPort

logger = structlog.get_logger(__name__)


class FakeEmailAdapter(EmailPort):
    def __init__(self):
        self.sent_emails: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Email delivery failed"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, to: str, subject: str, body: str) -> dict:
        if not self.should_succeed:
            logger.warning("Email delivery failed", to=to, subject=subject, error=self.failure_reason)
            return {
                "message_id": None,
                "status": DeliveryStatus.FAILED.value,
                "error": self.failure_reason,
            }

        message_id = f"email-{uuid4().hex[:12]}"
        self.sent_emails.append({"message_id": message_id, "to": to, "subject": subject, "body": body})
        logger.info("Email recorded", message_id=message_id, to=to, subject=subject)
        return {"message_id": message_id, "status": DeliveryStatus.SENT.value}

    def reset(self):
        """Clear sent emails (useful between tests)."""
        self.sent_emails.clear()
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"
