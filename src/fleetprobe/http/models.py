# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used by the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import ProbeFailure

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Headers = field(default_factory=dict)
    body: bytes | None = None
    timeout: float | None = None


@dataclass
class HttpResponse:
    """
    Result of one timed exchange.

    `elapsed` covers request issuance through the end of the body drain and is only
    meaningful when `ok` is true.
    """

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    url: str | None = None
    elapsed: float = 0.0
    bytes_read: int = 0
    failure: ProbeFailure | None = None
