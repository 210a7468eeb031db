"""
Object Resolver Tests
=====================

Naming service lookups, caching of references and lookup failures.

Usage:
    pytest test_resolver.py
"""

import pytest
import requests

from conftest import FakeResponse, NAMING_URL
from alitheia_logger.transport import ObjectReference
from alitheia_logger.utils import EndpointResolutionError


REGISTERED = {"name": "Logger", "url": "http://logger.example:8080/", "type_id": "IDL:alitheia/Logger:1.0"}


def test_resolve_returns_reference(make_resolver):
    resolver, session = make_resolver([FakeResponse(200, REGISTERED)])

    reference = resolver.resolve("Logger")

    assert reference == ObjectReference(
        name="Logger", url="http://logger.example:8080", type_id="IDL:alitheia/Logger:1.0"
    )
    assert reference.endpoint("log") == "http://logger.example:8080/log"
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", f"{NAMING_URL}/objects/Logger")
    assert kwargs["timeout"] == resolver.timeout


def test_name_defaults_to_requested_one(make_resolver):
    resolver, _ = make_resolver([FakeResponse(200, {"url": "https://secure.example"})])
    reference = resolver.resolve("Logger")
    assert reference.name == "Logger"
    assert reference.type_id is None


def test_object_names_are_url_quoted(make_resolver):
    resolver, session = make_resolver([FakeResponse(200, REGISTERED)])
    resolver.resolve("alitheia/Logger")
    assert session.calls[0][1] == f"{NAMING_URL}/objects/alitheia%2FLogger"


def test_second_resolve_is_served_from_cache(make_resolver):
    resolver, session = make_resolver([FakeResponse(200, REGISTERED)])

    first = resolver.resolve("Logger")
    second = resolver.resolve("Logger")

    assert first is second
    assert len(session.calls) == 1


def test_invalidate_forces_new_lookup(make_resolver):
    resolver, session = make_resolver([
        FakeResponse(200, REGISTERED),
        FakeResponse(200, {"url": "http://moved.example:8080"}),
    ])
    resolver.resolve("Logger")

    assert resolver.invalidate("Logger") is True
    assert resolver.invalidate("Logger") is False
    assert resolver.resolve("Logger").url == "http://moved.example:8080"
    assert len(session.calls) == 2


def test_unregistered_object(make_resolver):
    resolver, _ = make_resolver([FakeResponse(404)])
    with pytest.raises(EndpointResolutionError, match="not registered"):
        resolver.resolve("Logger")


def test_naming_service_error(make_resolver):
    resolver, _ = make_resolver([FakeResponse(500, text="internal error")])
    with pytest.raises(EndpointResolutionError, match="HTTP 500"):
        resolver.resolve("Logger")


def test_naming_service_unreachable(make_resolver):
    failure = requests.exceptions.ConnectionError("no route to host")
    resolver, _ = make_resolver([failure])

    with pytest.raises(EndpointResolutionError) as excinfo:
        resolver.resolve("Logger")

    assert excinfo.value.cause is failure


@pytest.mark.parametrize("reply", [
    FakeResponse(200, text="not json"),
    FakeResponse(200, ["Logger"]),
    FakeResponse(200, {"name": "Logger"}),
    FakeResponse(200, {"url": "corbaloc::host:2809/Logger"}),
])
def test_malformed_replies_are_rejected(make_resolver, reply):
    resolver, _ = make_resolver([reply])
    with pytest.raises(EndpointResolutionError):
        resolver.resolve("Logger")


def test_failed_lookups_are_not_cached(make_resolver):
    resolver, session = make_resolver([FakeResponse(503), FakeResponse(200, REGISTERED)])

    with pytest.raises(EndpointResolutionError):
        resolver.resolve("Logger")
    assert resolver.resolve("Logger").url == "http://logger.example:8080"
    assert len(session.calls) == 2


@pytest.mark.parametrize("name", ["", None])
def test_invalid_object_name(make_resolver, name):
    resolver, session = make_resolver()
    with pytest.raises(EndpointResolutionError):
        resolver.resolve(name)
    assert session.calls == []


def test_close_leaves_supplied_resources_alone(make_resolver, quiet_cache):
    resolver, session = make_resolver()
    resolver.close()
    assert not session.closed
    quiet_cache.set("still", "usable")
    assert quiet_cache.get("still") == "usable"
