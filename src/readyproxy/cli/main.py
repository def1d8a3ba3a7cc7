# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""readyproxy CLI."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from ..config import HttpSettings, ProxySettings, load_http_settings, load_proxy_settings
from ..errors import ConfigurationError
from ..http import create_default_http_client
from ..log import setup_logging
from ..models import AggregateResult, ProbeOutcome, ProbeStatus
from ..runtime import ReadyProxy
from ..utils.text import truncate_strings

CLI_TEXT_TRUNCATION_BYTES = 4096
EXIT_OK = 0
EXIT_UNHEALTHY = 1
EXIT_CONFIG_ERROR = 2

_STATUS_MARKS: dict[ProbeStatus, str] = {
    ProbeStatus.UP: "+",
    ProbeStatus.DOWN: "-",
    ProbeStatus.UNREACHABLE: "!",
    ProbeStatus.TIMEOUT: "?",
}


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--timeout", type=float, default=None, help="Per-probe timeout in seconds")
    parser.add_argument(
        "--overall-timeout",
        type=float,
        default=None,
        help="Upper bound for the whole aggregation in seconds (<=0 waits for every probe)",
    )
    parser.add_argument("--max-in-flight", type=int, default=None, help="Maximum concurrent probes")
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: READYPROXY_LOG_LEVEL or WARNING)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="readyproxy: concurrent readiness aggregation for downstream services")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Probe many targets and print the aggregate")
    check.add_argument("urls", nargs="*", help="Target URLs (default: READYPROXY_BULK_URLS)")
    check.add_argument("--json", action="store_true", help="Output JSON instead of a human-friendly summary")
    check.add_argument("--strict", action="store_true", help="Exit non-zero when any target is not UP")
    _add_common_arguments(check)

    verify = subparsers.add_parser("verify", help="Probe a single target; exit 0 only when it is UP")
    verify.add_argument("url", nargs="?", default=None, help="Target URL (default: READYPROXY_READINESS_URL)")
    verify.add_argument("--json", action="store_true", help="Output JSON instead of a human-friendly summary")
    _add_common_arguments(verify)

    serve = subparsers.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default=None, help="Bind address (default: READYPROXY_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: READYPROXY_PORT)")
    _add_common_arguments(serve)

    return parser


def _apply_overrides(args: argparse.Namespace, http_settings: HttpSettings, settings: ProxySettings) -> None:
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ConfigurationError("--timeout must be positive")
        http_settings.timeout = args.timeout
    if args.overall_timeout is not None:
        settings.overall_timeout = args.overall_timeout if args.overall_timeout > 0 else None
    if args.max_in_flight is not None:
        if args.max_in_flight <= 0:
            raise ConfigurationError("--max-in-flight must be positive")
        settings.max_in_flight = args.max_in_flight
    if args.ignore_ssl_errors:
        http_settings.verify_ssl = False
    if getattr(args, "host", None):
        settings.host = args.host
    if getattr(args, "port", None):
        settings.port = args.port


def _print_json(data: Any) -> None:
    payload = data.to_list() if hasattr(data, "to_list") else data
    payload = payload.to_dict() if hasattr(payload, "to_dict") else payload
    json.dump(truncate_strings(payload, max_bytes=CLI_TEXT_TRUNCATION_BYTES), sys.stdout, indent=2)
    sys.stdout.write("\n")


def _format_outcome(outcome: ProbeOutcome) -> str:
    mark = _STATUS_MARKS.get(outcome.status, "?")
    code = f" {outcome.http_status_code}" if outcome.http_status_code is not None else ""
    line = f"[{mark}] {outcome.status.value}{code} {outcome.url} ({outcome.latency_ms}ms)"
    if outcome.detail and outcome.status != ProbeStatus.UP:
        first_line = outcome.detail.splitlines()[0] if outcome.detail.strip() else outcome.detail
        line += f": {first_line}"
    return line


def _pretty_print(result: AggregateResult) -> None:
    if not len(result):
        print("[readyproxy] No targets")
        return
    for outcome in result:
        print(_format_outcome(outcome))
    counts = ", ".join(f"{status}={count}" for status, count in result.counts().items() if count)
    print(f"[readyproxy] {len(result)} targets: {counts}")


def _run_serve(proxy: ReadyProxy, log_level: str | None) -> int:
    import uvicorn

    from ..server import create_app

    app = create_app(proxy)
    uvicorn.run(
        app,
        host=proxy.settings.host,
        port=proxy.settings.port,
        log_level=(log_level or "info").lower(),
    )
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    http_settings = load_http_settings()
    settings = load_proxy_settings()
    try:
        _apply_overrides(args, http_settings, settings)
        http_client = create_default_http_client(http_settings)
        with ReadyProxy(http_client=http_client, http_settings=http_settings, settings=settings) as proxy:
            if args.command == "serve":
                return _run_serve(proxy, args.log_level)

            if args.command == "verify":
                outcome = proxy.verify_readiness(args.url)
                if args.json:
                    _print_json(outcome)
                else:
                    print(_format_outcome(outcome))
                return EXIT_OK if outcome.is_up else EXIT_UNHEALTHY

            result = proxy.check_bulk(args.urls or None)
    except ConfigurationError as exc:
        print(f"readyproxy: configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.json:
        _print_json(result)
    else:
        _pretty_print(result)

    if args.strict and not result.all_up:
        return EXIT_UNHEALTHY
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
