import pytest

from autotrader.config import TraderConfig
from autotrader.engine import AutoTrader
from autotrader.signals import FixedLot

from fakes import FakeRedis, RecordingSender


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def trader(sender):
    """Plain threshold trader: no lot boosting to reason about."""
    return AutoTrader(sender, TraderConfig(strategy="fixed"), FixedLot())
