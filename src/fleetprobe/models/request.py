# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request configuration shared by every probe in one dispatch call."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ..config import DEFAULT_CONTENT_TYPE, DEFAULT_TIMEOUT
from ..http.models import HttpRequest
from .target import Target


def normalize_path(path: str | None) -> str:
    """Ensure a request path starts with a slash."""
    if not path or not path.startswith("/"):
        return "/" + (path or "")
    return path


def _host_for_url(address: str) -> str:
    # Bare IPv6 literals must be bracketed inside a URL authority.
    if ":" in address and not address.startswith("["):
        return f"[{address}]"
    return address


@dataclass(frozen=True)
class RequestSpec:
    """
    How each fleet member is probed.

    The payload is ``body`` when non-empty, otherwise the contents of ``payload_path``
    (read by ``read_body``, once per dispatch call). The method follows the resolved
    payload: POST when it is non-empty, GET otherwise.
    """

    path: str = "/"
    port: str | int = 80
    use_tls: bool = False
    body: bytes | None = None
    payload_path: str | Path | None = None
    content_type: str = DEFAULT_CONTENT_TYPE
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT

    @property
    def scheme(self) -> str:
        return "https" if self.use_tls else "http"

    @staticmethod
    def method_for(body: bytes | None) -> str:
        return "POST" if body else "GET"

    def url_for(self, target: Target) -> str:
        return f"{self.scheme}://{_host_for_url(target.address)}:{self.port}{self.path}"

    def read_body(self) -> bytes | None:
        """Return the request payload, loading ``payload_path`` if needed (raises OSError)."""
        if self.body:
            return self.body
        if self.payload_path is not None:
            return Path(self.payload_path).read_bytes() or None
        return None

    def build_request(self, target: Target, body: bytes | None = None) -> HttpRequest:
        headers: dict[str, str] = {}
        if body:
            headers["Content-Type"] = self.content_type
        for name, value in self.headers.items():
            # Caller headers replace defaults regardless of case.
            for existing in [key for key in headers if key.lower() == name.lower()]:
                del headers[existing]
            headers[name] = value
        return HttpRequest(
            url=self.url_for(target),
            method=self.method_for(body),
            headers=headers,
            body=body or None,
            timeout=self.timeout,
        )
