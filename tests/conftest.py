import datetime

import pytest

from worktimer.config import Settings, set_settings
from worktimer.data.database import EntryStore, create_database
from worktimer.services.timer_service import TimerService

T0 = datetime.datetime(2024, 1, 15, 9, 0, 0, 250000)


class FakeClock:
    """Callable clock that only moves when told to"""

    def __init__(self, start=T0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + datetime.timedelta(**kwargs)
        return self.now

    def set(self, value):
        self.now = value
        return value


@pytest.fixture(autouse=True)
def reset_settings():
    set_settings(None)
    yield
    set_settings(None)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'worktimer.db'}"


@pytest.fixture
def store(database_url):
    entry_store = EntryStore(create_database(database_url))
    entry_store.connect()
    yield entry_store
    entry_store.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(store, clock):
    return TimerService(store, clock=clock)


@pytest.fixture
def settings(database_url):
    return Settings(database_url=database_url, log_level="DEBUG")
