# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
import os
import socket
import subprocess
import sys
import time
from pathlib import Path

import pytest

from readyproxy.cli import main as cli
from readyproxy.cli.main import _format_outcome, build_parser
from readyproxy.config import HttpSettings, ProxySettings
from readyproxy.errors import ConfigurationError
from readyproxy.http import StubHttpClient
from readyproxy.http.models import HttpResponse
from readyproxy.models import ProbeOutcome, ProbeStatus
from readyproxy.runtime import ReadyProxy


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("READYPROXY_BULK_URLS", "READYPROXY_READINESS_URL", "READYPROXY_OVERALL_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def stub(monkeypatch):
    stub = StubHttpClient()
    stub.add("http://ok.test", HttpResponse(ok=True, status_code=200, text="ok"))
    stub.add("http://flaky.test", HttpResponse(ok=True, status_code=500, text="err\nstack"))
    monkeypatch.setattr(cli, "create_default_http_client", lambda settings: stub)
    return stub


def test_build_parser_subcommands():
    parser = build_parser()
    args = parser.parse_args(["check", "http://a.test", "http://b.test", "--json", "--strict", "--timeout", "2"])
    assert args.command == "check"
    assert args.urls == ["http://a.test", "http://b.test"]
    assert args.json is True
    assert args.strict is True
    assert args.timeout == 2.0

    args = parser.parse_args(["verify"])
    assert args.url is None

    args = parser.parse_args(["serve", "--port", "9100"])
    assert args.port == 9100


def test_format_outcome_includes_first_detail_line():
    line = _format_outcome(
        ProbeOutcome(url="http://flaky.test", status=ProbeStatus.DOWN, http_status_code=500, detail="err\nstack", latency_ms=7)
    )
    assert line == "[-] DOWN 500 http://flaky.test (7ms): err"


def test_check_pretty_output_and_exit_code(stub, capsys):
    code = cli.main(["check", "http://ok.test", "http://flaky.test", "http://dead.test"])
    out = capsys.readouterr().out
    assert code == 0
    lines = out.strip().splitlines()
    assert lines[0].startswith("[+] UP 200 http://ok.test")
    assert lines[1].startswith("[-] DOWN 500 http://flaky.test")
    assert lines[2].startswith("[!] UNREACHABLE http://dead.test")
    assert "3 targets: UP=1, DOWN=1, UNREACHABLE=1" in lines[3]


def test_check_json_and_strict(stub, capsys):
    code = cli.main(["check", "http://ok.test", "http://flaky.test", "--json", "--strict"])
    payload = json.loads(capsys.readouterr().out)
    assert code == 1
    assert [item["status"] for item in payload] == ["UP", "DOWN"]
    assert payload[1]["httpStatusCode"] == 500
    assert "latencyMs" in payload[0]


def test_check_uses_configured_bulk_urls(stub, monkeypatch, capsys):
    monkeypatch.setenv("READYPROXY_BULK_URLS", "http://ok.test,http://ok.test")
    code = cli.main(["check", "--json", "--strict"])
    payload = json.loads(capsys.readouterr().out)
    assert code == 0
    assert [item["url"] for item in payload] == ["http://ok.test", "http://ok.test"]
    assert len(stub.requests) == 2


def test_check_with_no_targets(stub, capsys):
    assert cli.main(["check"]) == 0
    assert "No targets" in capsys.readouterr().out


def test_check_malformed_url_is_configuration_error(stub, capsys):
    code = cli.main(["check", "http://ok.test", "ok.test"])
    captured = capsys.readouterr()
    assert code == 2
    assert "configuration error" in captured.err
    assert stub.requests == []


def test_verify_exit_codes(stub, monkeypatch, capsys):
    assert cli.main(["verify", "http://ok.test"]) == 0
    assert capsys.readouterr().out.startswith("[+] UP 200 http://ok.test")

    assert cli.main(["verify", "http://flaky.test", "--json"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "DOWN"
    assert payload["detail"] == "err\nstack"

    monkeypatch.setenv("READYPROXY_READINESS_URL", "http://ok.test")
    assert cli.main(["verify"]) == 0


def test_verify_without_configured_url(stub, capsys):
    assert cli.main(["verify"]) == 1
    assert "No readiness URL configured" in capsys.readouterr().out


def test_invalid_timeout_override(stub, capsys):
    assert cli.main(["check", "http://ok.test", "--timeout", "0"]) == 2
    assert "--timeout" in capsys.readouterr().err


def test_ready_proxy_facade():
    stub = StubHttpClient({"http://ok.test": HttpResponse(ok=True, status_code=200)})
    settings = ProxySettings(bulk_urls=["http://ok.test", "http://gone.test"], readiness_url="http://ok.test", service_name="test-manager")
    with ReadyProxy(http_client=stub, http_settings=HttpSettings(timeout=1.0), settings=settings) as proxy:
        bulk = proxy.check_bulk()
        assert [o.status for o in bulk] == [ProbeStatus.UP, ProbeStatus.UNREACHABLE]
        assert proxy.check_bulk(["http://gone.test"])[0].status == ProbeStatus.UNREACHABLE
        assert proxy.verify_readiness().status == ProbeStatus.UP
        assert proxy.self_check() == {"status": "UP", "service": "test-manager"}
        assert stub.requests[0].timeout == 1.0
        with pytest.raises(ConfigurationError):
            proxy.verify_readiness("nope")
    assert stub.closed is True


def test_ready_proxy_without_readiness_url_names_the_setting():
    with ReadyProxy(http_client=StubHttpClient(), http_settings=HttpSettings(timeout=1.0), settings=ProxySettings()) as proxy:
        outcome = proxy.verify_readiness()
    assert outcome.url == "READYPROXY_READINESS_URL"
    assert outcome.status == ProbeStatus.UNREACHABLE
    assert outcome.detail == "No readiness URL configured"


def test_check_exits_within_overall_timeout_when_target_never_answers():
    # Accepted by the kernel backlog but never read from or answered.
    listener = socket.create_server(("127.0.0.1", 0), backlog=8)
    host, port = listener.getsockname()
    src_dir = Path(__file__).resolve().parents[2] / "src"
    env = {key: value for key, value in os.environ.items() if not key.upper().endswith("_PROXY") and not key.startswith("READYPROXY_")}
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(src_dir), env.get("PYTHONPATH")]))
    command = [
        sys.executable,
        "-m",
        "readyproxy.cli.main",
        "check",
        f"http://{host}:{port}/health",
        "--timeout",
        "6",
        "--overall-timeout",
        "0.3",
        "--json",
    ]
    try:
        started = time.monotonic()
        completed = subprocess.run(command, env=env, capture_output=True, text=True, timeout=20)
        elapsed = time.monotonic() - started
    finally:
        listener.close()

    assert completed.returncode == 0, completed.stderr
    payload = json.loads(completed.stdout)
    assert payload[0]["status"] == "TIMEOUT"
    assert payload[0]["detail"] == "Abandoned after overall timeout of 0.3s"
    assert elapsed < 3.0
