# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Render probe outcomes as a fixed-width table or JSON."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import TextIO

from .models import Outcome

COLUMNS = ("Instance ID", "IP", "Launch Time", "State", "Resp Time", "Status")
_ROW_FORMAT = "{:<20} {:<15} {:<25} {:<12} {:<15} {}"

_DURATION_UNITS = (
    (1.0, "s"),
    (1e-3, "ms"),
    (1e-6, "µs"),
    (1e-9, "ns"),
)


def format_latency(seconds: float) -> str:
    """Format a duration the way Go prints one (``0s``, ``850µs``, ``12.345ms``, ``1.5s``)."""
    if seconds <= 0:
        return "0s"
    for scale, unit in _DURATION_UNITS:
        if seconds >= scale or unit == "ns":
            text = f"{seconds / scale:.3f}".rstrip("0").rstrip(".")
            return f"{text}{unit}"
    return "0s"  # pragma: no cover


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "-"
    text = value.isoformat(timespec="seconds")
    if value.tzinfo is not None and value.utcoffset() == timedelta(0):
        text = text[: -len("+00:00")] + "Z"
    return text


def format_row(outcome: Outcome) -> str:
    return _ROW_FORMAT.format(
        outcome.identity,
        outcome.address,
        format_timestamp(outcome.created_at),
        outcome.lifecycle_state,
        format_latency(outcome.latency),
        outcome.status,
    )


def format_table(outcomes: Iterable[Outcome]) -> str:
    lines = [_ROW_FORMAT.format(*COLUMNS)]
    for outcome in sorted(outcomes, key=lambda o: o.identity):
        lines.append(format_row(outcome))
    return "\n".join(lines)


def print_table(outcomes: Iterable[Outcome], stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    out.write("\n" + format_table(outcomes) + "\n")


def outcomes_to_json(outcomes: Iterable[Outcome], stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    payload = [outcome.to_dict() for outcome in sorted(outcomes, key=lambda o: o.identity)]
    json.dump(payload, out, indent=2, sort_keys=True)
    out.write("\n")


__all__ = ["format_latency", "format_row", "format_table", "format_timestamp", "outcomes_to_json", "print_table"]
