"""
Shared test fixtures
====================

Configuration is read from the environment when alitheia_logger.config is
first imported, so test defaults are set here before anything imports it.
"""

import json
import os
import threading

os.environ.setdefault("RETRY_BASE_DELAY", "0")

import pytest

from alitheia_logger.transport import (
    ObjectResolver,
    RemoteLoggerClient,
    set_remote_logger,
)
from alitheia_logger.utils import CacheManager, RetryConfig


LOGGER_URL = "http://logger.example:8080"
NAMING_URL = "http://naming.example:2809"


class FakeResponse:
    """Minimal stand-in for requests.Response"""

    def __init__(self, status_code=200, json_data=None, text=None):
        self.status_code = status_code
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ""
        self.text = text


class FakeSession:
    """
    Records requests and replays scripted responses in order
    An exception in the script is raised instead of returned; an empty script answers 200
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []
        self.closed = False
        self._lock = threading.Lock()

    def _next(self, method, url, **kwargs):
        with self._lock:
            self.calls.append((method, url, kwargs))
            item = self.responses.pop(0) if self.responses else FakeResponse(200)
        if isinstance(item, BaseException):
            raise item
        return item

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)

    def close(self):
        self.closed = True

    def posted_payloads(self):
        return [kwargs["json"] for method, _, kwargs in self.calls if method == "POST"]


@pytest.fixture
def retry_config():
    return RetryConfig(max_attempts=3, base_delay=0, jitter=False)


@pytest.fixture
def quiet_cache():
    cache = CacheManager(max_size=10, default_ttl=60, enable_cleanup_thread=False)
    yield cache
    cache.shutdown()


@pytest.fixture
def make_client(retry_config):
    """Factory for clients talking to a FakeSession with a fixed endpoint"""
    clients = []

    def factory(responses=None, policy="local", **kwargs):
        session = kwargs.pop("session", None) or FakeSession(responses)
        kwargs.setdefault("endpoint", LOGGER_URL)
        client = RemoteLoggerClient(
            session=session,
            retry_config=kwargs.pop("retry_config", retry_config),
            policy=policy,
            **kwargs
        )
        clients.append(client)
        return client, session

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def make_resolver(quiet_cache):
    def factory(responses=None):
        session = FakeSession(responses)
        return ObjectResolver(naming_url=NAMING_URL, cache=quiet_cache, session=session), session
    return factory


@pytest.fixture(autouse=True)
def forget_shared_client():
    yield
    set_remote_logger(None)
