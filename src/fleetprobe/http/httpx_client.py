# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import threading
import time

import httpx

from ..config import ProbeSettings, load_probe_settings
from ..errors import FailureKind, ProbeFailure
from .client import HttpClient
from .models import HttpRequest, HttpResponse

BODY_READ_PREFIX = "failed to read response body: "


class _Exchange:
    """One send-and-drain run on its own thread so the caller can enforce a wall-clock cutoff."""

    def __init__(self, client: httpx.Client, request: httpx.Request):
        self.client = client
        self.request = request
        self.done = threading.Event()
        self.headers_received = False
        self.result: HttpResponse | None = None
        self._lock = threading.Lock()
        self._closed = False

    def run(self) -> None:
        try:
            self.result = self._send_and_drain()
        finally:
            self.done.set()
            self.close()

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        # Tears down the socket under a read that is still blocked.
        self.client.close()

    def _send_and_drain(self) -> HttpResponse:
        start = time.perf_counter()
        try:
            response = self.client.send(self.request, stream=True)
        except Exception as exc:  # noqa: BLE001
            return _failed(FailureKind.TRANSPORT, exc)
        self.headers_received = True

        bytes_read = 0
        try:
            for chunk in response.iter_bytes():
                bytes_read += len(chunk)
        except Exception as exc:  # noqa: BLE001
            return _failed(FailureKind.BODY_READ, exc, prefix=BODY_READ_PREFIX)
        finally:
            response.close()

        return HttpResponse(
            ok=True,
            status_code=response.status_code,
            headers=dict(response.headers),
            url=str(response.url),
            elapsed=time.perf_counter() - start,
            bytes_read=bytes_read,
        )


class HttpxClient(HttpClient):
    """
    Synchronous httpx client wrapper.

    Every exchange runs on its own short-lived ``httpx.Client`` so no connection is
    shared between fleet members. httpx only bounds each socket operation, so the
    exchange as a whole (connect, send, headers, body) is additionally cut off once
    ``timeout`` seconds have passed.

    Pass ``transport`` to route exchanges through a custom transport (e.g.
    ``httpx.MockTransport``); it is shared by all exchanges and must tolerate being
    closed after each one.
    """

    def __init__(self, settings: ProbeSettings | None = None, transport: httpx.BaseTransport | None = None):
        self.settings = settings or load_probe_settings()
        self._transport = transport

    def _open_client(self, timeout: float) -> httpx.Client:
        return httpx.Client(
            transport=self._transport,
            follow_redirects=self.settings.allow_redirects,
            timeout=timeout,
            verify=self.settings.verify_ssl,
        )

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = dict(request.headers or {})
        if not any(name.lower() == "user-agent" for name in headers):
            headers["User-Agent"] = self.settings.user_agent

        timeout = request.timeout if request.timeout is not None else self.settings.timeout

        client = self._open_client(timeout)
        try:
            outgoing = client.build_request(
                request.method,
                request.url,
                headers=headers,
                content=request.body,
            )
        except Exception as exc:  # noqa: BLE001
            client.close()
            return _failed(FailureKind.REQUEST_CONSTRUCTION, exc)

        exchange = _Exchange(client, outgoing)
        worker = threading.Thread(target=exchange.run, name="fleetprobe-exchange", daemon=True)
        worker.start()

        if exchange.done.wait(timeout) and exchange.result is not None:
            return exchange.result

        exchange.close()
        if exchange.headers_received:
            exc = httpx.ReadTimeout(f"response body not received within {timeout}s", request=outgoing)
            return _failed(FailureKind.BODY_READ, exc, prefix=BODY_READ_PREFIX)
        exc = httpx.ReadTimeout(f"no response within {timeout}s", request=outgoing)
        return _failed(FailureKind.TRANSPORT, exc)

    def close(self) -> None:
        # Clients are per-exchange; nothing outlives a request.
        return None


def _failed(kind: FailureKind, exc: Exception, *, prefix: str = "") -> HttpResponse:
    return HttpResponse(ok=False, failure=ProbeFailure.from_exception(kind, exc, prefix=prefix))
