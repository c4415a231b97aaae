# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""fleetprobe CLI."""

from __future__ import annotations

import argparse
import sys

from ..config import DEFAULT_CONTENT_TYPE, load_probe_settings
from ..errors import FleetProbeError
from ..http import create_default_http_client
from ..log import setup_logging
from ..models import RequestSpec, normalize_path
from ..report import outcomes_to_json, print_table
from ..runtime import FleetProbe
from .options import load_payload, parse_duration, parse_headers, parse_port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fleetprobe",
        description="Send one HTTP request to every instance of an AWS Auto Scaling Group and report latency",
    )
    parser.add_argument("--asg-name", required=True, help="Name of the Auto Scaling Group")
    parser.add_argument("--region", required=True, help="AWS region")
    parser.add_argument("--path", default="/", help="HTTP path to call on each instance (default: /)")
    parser.add_argument("--port", default="80", help="Port to use for the HTTP request (default: 80)")
    parser.add_argument("--tls", action="store_true", help="Use HTTPS instead of HTTP")
    parser.add_argument(
        "--post",
        metavar="FILE",
        help="File to POST as request body (if set, POST is used instead of GET)",
    )
    parser.add_argument(
        "--request-type",
        default=DEFAULT_CONTENT_TYPE,
        help=f"Content-Type for POST requests (default: {DEFAULT_CONTENT_TYPE})",
    )
    parser.add_argument(
        "--timeout",
        default="3s",
        help="Per-request timeout (default: 3s, examples: 1.5s, 500ms, 2m)",
    )
    parser.add_argument("--headers", default="", help="Comma-separated list of headers (key=value,key2=value2)")
    parser.add_argument("--json", action="store_true", help="Output JSON instead of a table")
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for self-signed instance certificates)",
    )
    return parser


def build_request_spec(args: argparse.Namespace) -> RequestSpec:
    """Validate CLI options and load the POST payload; raises ConfigError."""
    return RequestSpec(
        path=normalize_path(args.path),
        port=parse_port(args.port),
        use_tls=args.tls,
        body=load_payload(args.post) if args.post else None,
        content_type=args.request_type,
        headers=parse_headers(args.headers),
        timeout=parse_duration(args.timeout),
    )


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        spec = build_request_spec(args)

        settings = load_probe_settings()
        settings.timeout = spec.timeout
        if args.ignore_ssl_errors:
            settings.verify_ssl = False

        with FleetProbe(
            region=args.region,
            http_client=create_default_http_client(settings),
            settings=settings,
        ) as probe:
            targets = probe.targets(args.asg_name)
            outcomes = probe.dispatch(targets, spec)
    except FleetProbeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        outcomes_to_json(outcomes)
    else:
        print_table(outcomes)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
