from datetime import datetime, timedelta

import pytest
from PySide6.QtCore import QCoreApplication

from fluidshape.controller.collections import InMemoryProfileCollection
from fluidshape.controller.session import SyncSession
from fluidshape.model.history import ProfileHistoryCache


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class FakeClock:
    """Returns a fixed time that advances one minute per call."""

    def __init__(self, start: datetime = datetime(2026, 10, 19, 14, 5)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def collection():
    return InMemoryProfileCollection()


@pytest.fixture
def history(collection, clock):
    return ProfileHistoryCache(collection, clock=clock)


@pytest.fixture
def connected_history(history):
    history.set_identity("user-1")
    return history


@pytest.fixture
def session():
    return SyncSession()
