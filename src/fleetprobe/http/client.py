# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Seam between the dispatcher and the wire: one timed exchange per fleet member."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from ..config import ProbeSettings, load_probe_settings
from .models import HttpRequest, HttpResponse

if TYPE_CHECKING:
    import httpx


class HttpClient(Protocol):
    """
    Anything the dispatcher can hand a built request to.

    ``request`` is called concurrently from worker threads, one call per fleet member.
    It should report failures through ``HttpResponse.failure`` (stage and category)
    rather than raise. The dispatcher still turns a raised exception into a transport
    failure for that member alone. ``elapsed`` on a successful response becomes the
    member's reported latency.
    """

    def request(self, request: HttpRequest) -> HttpResponse: ...

    def close(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_default_http_client(
    settings: ProbeSettings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> HttpClient:
    """Build the httpx-backed client; ``transport`` overrides the network layer (tests, proxies)."""
    from .httpx_client import HttpxClient

    return HttpxClient(settings or load_probe_settings(), transport=transport)


__all__ = ["HttpClient", "create_default_http_client"]
