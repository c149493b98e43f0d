import pytest
from protean.integrations.pytest import DomainFixture
from subscriptions.shared.clock import FixedClock, reset_clock, set_clock


@pytest.fixture(scope="session")
def subscriptions_bed():
    from subscriptions.domain import subscriptions

    bed = DomainFixture(subscriptions)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(subscriptions_bed):
    with subscriptions_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def _reset_data(_ctx):
    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()


@pytest.fixture()
def clock():
    """Pin "today" to 2024-01-05 for the duration of a test."""
    fixed = set_clock(FixedClock("2024-01-05"))
    yield fixed
    reset_clock()
