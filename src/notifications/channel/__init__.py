"""Email channel access.

There is a single process-wide email adapter. It is the recording stub
until a real provider adapter is wired in.
"""

from notifications.channel.email_port import EmailPort

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    global _email_channel
    if _email_channel is None:
        from notifications.channel.fake_email import FakeEmailAdapter

        _email_channel = FakeEmailAdapter()
    return _email_channel


def reset_channels():
    """Drop the channel singleton (useful for testing)."""
    global _email_channel
    _email_channel = None
