import pytest

from frames import FakeClock


@pytest.fixture
def clock():
    return FakeClock()
