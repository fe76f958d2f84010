"""Shared fixtures for the watch bridge test suite."""

from unittest.mock import Mock

import pytest
from fswatch_bridge.config import BridgeConfig
from fswatch_bridge.core import IChannel


class FakeObserver:
    """Stands in for a watchdog observer; tests fire events through its handler."""

    def __init__(self):
        self.handler = None
        self.path = None
        self.recursive = None
        self.event_filter = None
        self.started = False
        self.stopped = False
        self.joined = False

    def schedule(self, handler, path, *, recursive=False, event_filter=None):
        self.handler = handler
        self.path = path
        self.recursive = recursive
        self.event_filter = event_filter

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def join(self, timeout=None):
        self.joined = True

    def is_alive(self):
        return self.started and not self.joined


@pytest.fixture
def observers():
    """Observers created through observer_factory, in creation order."""
    return []


@pytest.fixture
def observer_factory(observers):
    """Factory producing FakeObserver instances."""

    def factory():
        observer = FakeObserver()
        observers.append(observer)
        return observer

    return factory


@pytest.fixture
def bridge_config():
    """Configuration with defaults, isolated from the environment."""
    return BridgeConfig(_env_file=None)


@pytest.fixture
def make_channel():
    """Build a mock channel with the given open options."""

    def factory(**options):
        channel = Mock(spec=IChannel)
        channel.get_option.side_effect = options.get
        return channel

    return factory
