"""
SocialForge Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── fast_config: InvocationConfig with small delays and timeout
    ├── recorded_sleeps / fake_sleep: sleep stand-in that records delays
    ├── observer: RecordingObserver capturing invocation events
    ├── invoker: ResilientInvoker wired to fake_sleep and observer
    └── test_settings: Settings with a fake API key
"""

import os

# Override settings for testing BEFORE any socialforge imports
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import List  # noqa: E402

import pytest  # noqa: E402

from socialforge.config import InvocationConfig, Settings  # noqa: E402
from socialforge.observability import InvocationObserver  # noqa: E402
from socialforge.services.resilience import ResilientInvoker  # noqa: E402


class RecordingObserver(InvocationObserver):
    """Keeps every event as a (name, payload) tuple."""

    def __init__(self):
        self.events = []

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def on_request(self, service, *, user_id, request_id, prompt):
        self.events.append(("request", {"service": service, "user_id": user_id,
                                        "request_id": request_id, "prompt": prompt}))

    def on_retry(self, service, record, *, user_id, request_id):
        self.events.append(("retry", {"service": service, "record": record,
                                      "user_id": user_id, "request_id": request_id}))

    def on_success(self, service, duration, attempts, *, user_id, request_id):
        self.events.append(("success", {"service": service, "duration": duration,
                                        "attempts": attempts, "request_id": request_id}))

    def on_error(self, service, error, attempts, *, user_id, request_id):
        self.events.append(("error", {"service": service, "error": error,
                                      "attempts": attempts, "request_id": request_id}))


class FailingThenSucceeding:
    """
    Async operation that raises the given errors in order, then returns ``result``.

    ``calls`` counts invocations.
    """

    def __init__(self, errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


def status_error(message: str, status: int) -> Exception:
    """An Exception carrying a numeric ``status`` attribute, like SDK errors do."""
    error = Exception(message)
    error.status = status
    return error


@pytest.fixture
def fast_config():
    return InvocationConfig(attempts=3, base_delay=0.1, max_delay=10.0, multiplier=2.0, timeout=1.0)


@pytest.fixture
def recorded_sleeps():
    return []


@pytest.fixture
def fake_sleep(recorded_sleeps):
    async def _sleep(delay):
        recorded_sleeps.append(delay)
    return _sleep


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def invoker(fast_config, observer, fake_sleep):
    return ResilientInvoker(fast_config, observer=observer, sleep=fake_sleep)


@pytest.fixture
def test_settings():
    return Settings(gemini_api_key="test-key-not-real", media_simulated_latency=0.0)
