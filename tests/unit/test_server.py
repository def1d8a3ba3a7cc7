# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest
from fastapi.testclient import TestClient

from readyproxy.config import HttpSettings, ProxySettings
from readyproxy.errors import ConfigurationError, ErrorCategory
from readyproxy.http import StubHttpClient
from readyproxy.http.models import HttpResponse
from readyproxy.models import ProbeStatus
from readyproxy.runtime import ReadyProxy
from readyproxy.server import create_app
from readyproxy.server.app import readiness_status_code


def _proxy(stub: StubHttpClient, **settings_kwargs) -> ReadyProxy:
    settings = ProxySettings(service_name="Test Manager Self-Check", **settings_kwargs)
    return ReadyProxy(http_client=stub, http_settings=HttpSettings(timeout=1.0), settings=settings)


@pytest.fixture
def stub() -> StubHttpClient:
    stub = StubHttpClient()
    stub.add("http://ok.test/health", HttpResponse(ok=True, status_code=200, text='{"status":"UP"}'))
    stub.add("http://flaky.test/health", HttpResponse(ok=True, status_code=500, text="broken"))
    stub.add(
        "http://slow.test/health",
        HttpResponse(ok=False, error_message="timed out", error_category=ErrorCategory.TIMEOUT),
    )
    return stub


def test_self_check_makes_no_outbound_calls(stub):
    with TestClient(create_app(_proxy(stub))) as client:
        resp = client.get("/dummy")
    assert resp.status_code == 200
    assert resp.json() == {"status": "UP", "service": "Test Manager Self-Check"}
    assert stub.requests == []


def test_verify_readiness_up(stub):
    with TestClient(create_app(_proxy(stub, readiness_url="http://ok.test/health"))) as client:
        resp = client.get("/verify-readiness")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "UP"
    assert body["httpStatusCode"] == 200
    assert body["detail"] == '{"status":"UP"}'


@pytest.mark.parametrize(
    ("url", "status"),
    [
        ("http://flaky.test/health", "DOWN"),
        ("http://slow.test/health", "TIMEOUT"),
        ("http://dead.test/health", "UNREACHABLE"),
    ],
)
def test_verify_readiness_unhealthy_is_503(stub, url, status):
    with TestClient(create_app(_proxy(stub, readiness_url=url))) as client:
        resp = client.get("/verify-readiness")
    assert resp.status_code == 503
    assert resp.json()["status"] == status
    assert resp.json()["url"] == url


def test_verify_readiness_without_configuration(stub):
    with TestClient(create_app(_proxy(stub))) as client:
        resp = client.get("/verify-readiness")
    assert resp.status_code == 503
    assert resp.json()["status"] == "UNREACHABLE"
    assert resp.json()["url"] == "READYPROXY_READINESS_URL"
    assert "httpStatusCode" not in resp.json()


def test_bulk_uses_configured_urls_and_always_returns_200(stub):
    urls = ["http://ok.test/health", "http://flaky.test/health", "http://dead.test/health", "http://ok.test/health"]
    with TestClient(create_app(_proxy(stub, bulk_urls=urls))) as client:
        resp = client.post("/health/bulk")
    assert resp.status_code == 200
    body = resp.json()
    assert [item["url"] for item in body] == urls
    assert [item["status"] for item in body] == ["UP", "DOWN", "UNREACHABLE", "UP"]
    assert body[1]["httpStatusCode"] == 500
    assert "httpStatusCode" not in body[2]
    assert all(item["latencyMs"] >= 0 for item in body)


def test_bulk_all_down_is_still_200(stub):
    with TestClient(create_app(_proxy(stub))) as client:
        resp = client.post("/health/bulk", json={"urls": ["http://dead1.test", "http://dead2.test"]})
    assert resp.status_code == 200
    assert [item["status"] for item in resp.json()] == ["UNREACHABLE", "UNREACHABLE"]


def test_bulk_accepts_plain_url_list(stub):
    with TestClient(create_app(_proxy(stub, bulk_urls=["http://flaky.test/health"]))) as client:
        resp = client.post("/health/bulk", json=["http://ok.test/health"])
    assert resp.status_code == 200
    assert [item["status"] for item in resp.json()] == ["UP"]


def test_bulk_empty_list(stub):
    with TestClient(create_app(_proxy(stub))) as client:
        resp = client.post("/health/bulk", json={"urls": []})
    assert resp.status_code == 200
    assert resp.json() == []


def test_bulk_malformed_url_is_422_and_probes_nothing(stub):
    with TestClient(create_app(_proxy(stub))) as client:
        resp = client.post("/health/bulk", json={"urls": ["http://ok.test/health", "nope"]})
    assert resp.status_code == 422
    assert "nope" in resp.json()["detail"]
    assert stub.requests == []


def test_create_app_rejects_malformed_configuration(stub):
    with pytest.raises(ConfigurationError):
        create_app(_proxy(stub, bulk_urls=["ftp://files.test"]))
    with pytest.raises(ConfigurationError):
        create_app(_proxy(stub, readiness_url="localhost:9001"))


def test_lifespan_closes_http_client(stub):
    with TestClient(create_app(_proxy(stub))):
        assert stub.closed is False
    assert stub.closed is True


def test_readiness_status_code_mapping():
    assert readiness_status_code(ProbeStatus.UP) == 200
    for status in (ProbeStatus.DOWN, ProbeStatus.UNREACHABLE, ProbeStatus.TIMEOUT):
        assert readiness_status_code(status) == 503
