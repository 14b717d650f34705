import threading
import time

import pytest

from sitemeta.config import Settings
from sitemeta.exceptions import StrategyFailure
from sitemeta.services.meta_cache import MetaCache
from sitemeta.services.metadata_fetcher import WebsiteParser


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeStrategy:
    """Stands in for BackendStrategy/DirectStrategy and records its calls."""

    def __init__(self, name, result=None, error=None, delay=0.0, exc=None):
        self.name = name
        self.result = result
        self.error = error
        self.delay = delay
        self.exc = exc
        self.calls = []
        self.known_args = []
        self._lock = threading.Lock()

    def fetch(self, url, timeout_ms, known=None):
        with self._lock:
            self.calls.append(url)
            self.known_args.append(known)
        delay = self.delay(url) if callable(self.delay) else self.delay
        if delay:
            time.sleep(delay)
        if self.exc is not None:
            raise self.exc
        if self.error is not None:
            raise StrategyFailure(self.name, self.error)
        return self.result(url) if callable(self.result) else self.result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_parser(clock):
    def factory(backend=None, direct=None, **settings_overrides):
        settings_overrides.setdefault("backend_url", "http://backend.test/api/parse-website")
        return WebsiteParser(
            cache=MetaCache(clock=clock),
            backend=backend or FakeStrategy("api", error="backend down"),
            direct=direct or FakeStrategy("client", error="site down"),
            settings=Settings(_env_file=None, **settings_overrides),
        )

    return factory
