"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from eyesoul.backend.app import create_app  # noqa: E402
from eyesoul.backend.app.services.registry import CollectionRegistry  # noqa: E402
from eyesoul.backend.app.services.storage import InMemoryStorage  # noqa: E402
from eyesoul.backend.config import load_configuration  # noqa: E402


class FakeTimer:
    """Timer stand-in that only fires when a test says so."""

    def __init__(self, delay: float, callback) -> None:
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()


class FakeTimerFactory:
    """Collects every timer a debouncer creates."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[FakeTimer]:
        return [timer for timer in self.timers if timer.started and not timer.cancelled]

    def fire_all(self) -> None:
        for timer in list(self.active):
            timer.fire()


@pytest.fixture()
def timers() -> FakeTimerFactory:
    return FakeTimerFactory()


@pytest.fixture()
def storage() -> InMemoryStorage:
    """Shared backend for the application's client collections."""

    return InMemoryStorage()


@pytest.fixture()
def registry(storage: InMemoryStorage) -> CollectionRegistry:
    """Registry writing through synchronously so tests can inspect storage."""

    return CollectionRegistry(storage, load_configuration(), persist_delay=0)


@pytest.fixture()
def app(registry: CollectionRegistry) -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app(registry=registry)
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()
