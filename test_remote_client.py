"""
Remote Client Tests
===================

Transport behaviour of RemoteLoggerClient against a scripted HTTP session:
wire format, retries, endpoint lookup, health checks and statistics.

Usage:
    pytest test_remote_client.py
"""

import pytest
import requests

from conftest import FakeResponse, FakeSession, LOGGER_URL, NAMING_URL
from alitheia_logger.transport import (
    LogLevel,
    ObjectResolver,
    get_remote_logger,
    reset_remote_logger,
    set_remote_logger,
)
from alitheia_logger.utils import DeliveryError, EndpointResolutionError


def test_record_is_posted_as_json(make_client):
    client, session = make_client()

    result = client.info("sqooss.database", "pool ready")

    assert result.delivered
    assert result.outcome == "sent"
    assert result.attempts == 1

    method, url, kwargs = session.calls[0]
    assert method == "POST"
    assert url == f"{LOGGER_URL}/log"
    assert kwargs["timeout"] == client.timeout

    payload = kwargs["json"]
    assert payload["logger"] == "sqooss.database"
    assert payload["level"] == "info"
    assert payload["message"] == "pool ready"
    assert payload["source"] == client.source
    assert payload["timestamp"].endswith("+00:00")


@pytest.mark.parametrize("method,level", [
    ("debug", "debug"), ("info", "info"), ("warn", "warn"), ("error", "error"),
])
def test_convenience_methods_map_to_levels(make_client, method, level):
    client, session = make_client()
    getattr(client, method)("sqooss", "msg")
    assert session.posted_payloads()[0]["level"] == level


def test_server_error_is_retried(make_client):
    client, session = make_client([FakeResponse(503), FakeResponse(200)])

    result = client.error("sqooss", "boom")

    assert result.delivered
    assert result.attempts == 2
    assert len(session.calls) == 2


@pytest.mark.parametrize("failure", [
    requests.exceptions.ConnectionError("connection refused"),
    requests.exceptions.Timeout("read timed out"),
])
def test_transport_failures_are_retried(make_client, failure):
    client, session = make_client([failure, FakeResponse(200)])

    result = client.info("sqooss", "hello")

    assert result.delivered
    assert result.attempts == 2


def test_rate_limit_is_retried(make_client):
    client, _ = make_client([FakeResponse(429), FakeResponse(429), FakeResponse(201)])
    assert client.info("sqooss", "hello").attempts == 3


def test_client_errors_are_not_retried(make_client):
    client, session = make_client([FakeResponse(400)], policy="drop")

    result = client.info("sqooss", "hello")

    assert not result.delivered
    assert result.outcome == "dropped"
    assert result.attempts == 1
    assert len(session.calls) == 1
    assert "HTTP 400" in result.error


def test_gives_up_after_max_attempts(make_client):
    client, session = make_client([FakeResponse(503)] * 5, policy="drop")

    result = client.info("sqooss", "hello")

    assert result.attempts == 3
    assert len(session.calls) == 3


def test_endpoint_is_resolved_through_naming_service(make_client, quiet_cache):
    session = FakeSession([
        FakeResponse(200, {"name": "Logger", "url": "http://resolved.example:9000/", "type_id": "IDL:alitheia/Logger:1.0"}),
        FakeResponse(200),
    ])
    resolver = ObjectResolver(naming_url=NAMING_URL, cache=quiet_cache, session=session)
    client, _ = make_client(session=session, endpoint=None, resolver=resolver)

    assert client.reference is None
    assert client.info("sqooss", "hello").delivered

    assert session.calls[0][:2] == ("GET", f"{NAMING_URL}/objects/Logger")
    assert session.calls[1][:2] == ("POST", "http://resolved.example:9000/log")
    assert client.reference.url == "http://resolved.example:9000"
    assert client.reference.type_id == "IDL:alitheia/Logger:1.0"


def test_reference_is_looked_up_again_after_connection_failure(make_client, quiet_cache):
    session = FakeSession([
        FakeResponse(200, {"url": "http://old.example:9000"}),
        requests.exceptions.ConnectionError("host down"),
        FakeResponse(200, {"url": "http://new.example:9000"}),
        FakeResponse(200),
    ])
    resolver = ObjectResolver(naming_url=NAMING_URL, cache=quiet_cache, session=session)
    client, _ = make_client(session=session, endpoint=None, resolver=resolver)

    result = client.warn("sqooss", "moved")

    assert result.delivered
    assert result.attempts == 2
    assert session.calls[3][:2] == ("POST", "http://new.example:9000/log")
    assert client.reference.url == "http://new.example:9000"


def test_unregistered_logger_object_is_not_retried(make_client, quiet_cache):
    session = FakeSession([FakeResponse(404)])
    resolver = ObjectResolver(naming_url=NAMING_URL, cache=quiet_cache, session=session)
    client, _ = make_client(session=session, endpoint=None, resolver=resolver, policy="raise")

    with pytest.raises(DeliveryError) as excinfo:
        client.info("sqooss", "hello")

    assert isinstance(excinfo.value.cause, EndpointResolutionError)
    assert excinfo.value.attempts == 1
    assert len(session.calls) == 1


def test_ping_reports_health(make_client):
    client, session = make_client([FakeResponse(204)])
    assert client.ping() is True
    assert session.calls[0][:2] == ("GET", f"{LOGGER_URL}/health")


@pytest.mark.parametrize("reply", [FakeResponse(500), requests.exceptions.ConnectionError("down")])
def test_ping_never_raises(make_client, reply):
    client, _ = make_client([reply])
    assert client.ping() is False


def test_messages_are_sanitized_before_sending(make_client):
    client, session = make_client(max_message_length=20)

    client.info("sqooss", "tab\tnull\x00bell\x07")
    client.info("sqooss", "x" * 50)
    client.info("sqooss", 42)

    messages = [payload["message"] for payload in session.posted_payloads()]
    assert messages[0] == "tab\tnullbell"
    assert len(messages[1]) == 20
    assert messages[1].endswith("...[truncated]")
    assert messages[2] == "42"


def test_invalid_channel_is_rejected_locally(make_client):
    client, session = make_client()
    with pytest.raises(ValueError):
        client.info("not a channel", "hello")
    assert session.calls == []


def test_levels_can_be_given_as_strings(make_client):
    client, session = make_client()
    client.log("sqooss", "WARNING", "a")
    client.log("sqooss", "error", "b")
    client.log("sqooss", LogLevel.DEBUG, "c")

    assert [p["level"] for p in session.posted_payloads()] == ["warn", "error", "debug"]
    with pytest.raises(ValueError):
        client.log("sqooss", "fatal", "d")


def test_delivery_stats_count_outcomes(make_client):
    client, _ = make_client([FakeResponse(200), FakeResponse(400)], policy="drop")

    client.info("sqooss", "ok")
    client.info("sqooss", "rejected")
    stats = client.get_delivery_stats()

    assert stats["sent"] == 1
    assert stats["dropped"] == 1
    assert stats["pending"] == 0
    assert stats["timings"]["remote_logger._post"]["call_count"] >= 2
    assert stats["slowest_calls"][0]["function_name"].startswith("remote_logger.")
    assert isinstance(stats["alerts"], list)
    assert stats["errors"]["total_errors"] == 1


def test_closed_client_does_not_send(make_client):
    client, session = make_client()
    client.close()

    result = client.info("sqooss", "late")

    assert result.outcome == "fallback"
    assert session.calls == []
    # The session was supplied by the caller, so it stays open
    assert not session.closed


def test_context_manager_closes_client(make_client):
    client, _ = make_client()
    with client as entered:
        assert entered is client
    assert client.closed


def test_shared_client_is_created_once_and_reset():
    set_remote_logger(None)

    first = get_remote_logger()
    assert get_remote_logger() is first

    reset_remote_logger()
    assert first.closed
    assert get_remote_logger() is not first
    reset_remote_logger()
