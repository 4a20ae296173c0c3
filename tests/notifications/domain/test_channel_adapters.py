"""Tests for the email channel adapter and registry."""

from notifications.channel import get_email_channel, reset_channels
from notifications.channel.email_port import DeliveryStatus, EmailPort
from notifications.channel.fake_email import FakeEmailAdapter


class TestFakeEmailAdapter:
    def test_send_records_message(self):
        adapter = FakeEmailAdapter()
        result = adapter.send(to="sara@example.com", subject="Hi", body="Hello")
        assert result["status"] == DeliveryStatus.SENT.value
        assert result["message_id"].startswith("email-")
        assert adapter.sent_emails == [
            {"message_id": result["message_id"], "to": "sara@example.com", "subject": "Hi", "body": "Hello"}
        ]

    def test_configured_failure(self):
        adapter = FakeEmailAdapter()
        adapter.configure(should_succeed=False, failure_reason="Mailbox full")
        result = adapter.send(to="x@example.com", subject="s", body="b")
        assert result == {"message_id": None, "status": "failed", "error": "Mailbox full"}
        assert adapter.sent_emails == []

    def test_reset(self):
        adapter = FakeEmailAdapter()
        adapter.configure(should_succeed=False)
        adapter.send(to="x", subject="s", body="b")
        adapter.reset()
        assert adapter.should_succeed is True
        assert adapter.sent_emails == []


class TestChannelRegistry:
    def test_singleton(self):
        assert get_email_channel() is get_email_channel()
        assert isinstance(get_email_channel(), EmailPort)

    def test_reset_channels(self):
        first = get_email_channel()
        reset_channels()
        assert get_email_channel() is not first
