# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Option parsing helpers for the fleetprobe CLI."""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path

from ..errors import ConfigError

logger = logging.getLogger(__name__)

_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_SCALE = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str) -> float:
    """
    Parse a Go-style duration (``500ms``, ``1.5s``, ``1m30s``) into seconds.

    A bare number is taken as seconds. The result must be positive.
    """
    text = (value or "").strip()
    if not text:
        raise ConfigError("timeout must not be empty")

    try:
        seconds = float(text)
    except ValueError:
        pos = 0
        seconds = 0.0
        while pos < len(text):
            match = _DURATION_PART_RE.match(text, pos)
            if not match:
                raise ConfigError(f"invalid duration: {value!r}") from None
            seconds += float(match.group(1)) * _DURATION_SCALE[match.group(2)]
            pos = match.end()

    if not math.isfinite(seconds) or seconds <= 0:
        raise ConfigError(f"timeout must be positive, got {value!r}")
    return seconds


def parse_headers(raw: str | None) -> dict[str, str]:
    """
    Parse ``key=value,key2=value2`` into a header mapping.

    Segments that are not exactly one ``key=value`` pair are dropped with a warning;
    the last occurrence of a repeated key wins.
    """
    headers: dict[str, str] = {}
    if not raw:
        return headers
    for segment in raw.split(","):
        parts = [part.strip() for part in segment.split("=")]
        if len(parts) != 2 or not parts[0]:
            if segment.strip():
                logger.warning("Ignoring malformed header %r (expected key=value)", segment.strip())
            continue
        headers[parts[0]] = parts[1]
    return headers


def parse_port(value: str | int) -> str:
    text = str(value).strip()
    if not text.isdigit() or not 0 < int(text) < 65536:
        raise ConfigError(f"invalid port: {value!r}")
    return text


def load_payload(path: str | Path) -> bytes:
    """Read the POST body once, before any probe is dispatched."""
    payload_path = Path(path)
    if not payload_path.exists():
        raise ConfigError(f"POST file does not exist: {path}")
    try:
        return payload_path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"failed to read POST file {path}: {exc}") from exc


__all__ = ["load_payload", "parse_duration", "parse_headers", "parse_port"]
