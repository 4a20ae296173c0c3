from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture

from notifications.channel import reset_channels
from notifications.channel.fake_email import FakeEmailAdapter
from notifications.domain import notifications
from ordering.cart.storage import MemoryStorage
from ordering.domain import ordering
from ordering.order.order import ADMIN_ROLE
from ordering.order.repository import RepositoryOrderStore
from ordering.providers import reset_providers
from ordering.session import Session
from shared.config import get_settings
from shared.errors import StoreFailure
from shared.feedback import RecordingFeedback


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def ordering_bed():
    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session")
def notifications_bed():
    bed = DomainFixture(notifications)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed, notifications_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(monkeypatch):
    """Isolate settings and process-wide singletons for every test."""
    for name in ("ORDER_STORE_URL", "CART_STORAGE_DIR", "NOTIFIER_URL", "STRICT_STATUS_TRANSITIONS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "test")
    reset_providers()
    reset_channels()

    yield

    reset_providers()
    reset_channels()
    get_settings.cache_clear()


@pytest.fixture
def store():
    return RepositoryOrderStore(ordering)


@pytest.fixture
def break_store(store, monkeypatch):
    """Make the named store operations raise ``StoreFailure``."""

    def _break(*operations: str, message: str = "Simulated store failure"):
        async def _fail(*args, **kwargs):
            raise StoreFailure(message)

        for operation in operations:
            monkeypatch.setattr(store, operation, _fail)

    return _break


@pytest.fixture
def email():
    return FakeEmailAdapter()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def feedback():
    return RecordingFeedback()


@pytest.fixture
def customer_session():
    return Session(user_id="user-1", access_token="token-user-1", email="sara@example.com")


@pytest.fixture
def other_customer_session():
    return Session(user_id="user-2", access_token="token-user-2")


@pytest.fixture
def admin_session():
    return Session(user_id="admin-1", role=ADMIN_ROLE, access_token="token-admin-1")


@pytest.fixture
def anonymous_session():
    return Session()
