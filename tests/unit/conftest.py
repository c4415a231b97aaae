# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import socket
import threading

import pytest

_PROXY_VARS = ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy")


@pytest.fixture
def silent_port(monkeypatch):
    """A local port that accepts connections into the backlog but never answers."""
    for name in _PROXY_VARS:
        monkeypatch.delenv(name, raising=False)
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(16)
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


@pytest.fixture
def trickle_server(monkeypatch):
    """
    Start a one-shot local HTTP server: ``start(head, body, interval)`` returns its port.

    ``head`` is sent as soon as the request arrives, then ``body`` follows one byte every
    ``interval`` seconds until it is exhausted or the test ends.
    """
    for name in _PROXY_VARS:
        monkeypatch.delenv(name, raising=False)
    stop = threading.Event()
    servers = []

    def serve(sock, head, body, interval):
        try:
            conn, _ = sock.accept()
        except OSError:
            return
        with conn:
            try:
                conn.recv(65536)
                if head:
                    conn.sendall(head)
                for i in range(len(body)):
                    if stop.wait(interval):
                        return
                    conn.sendall(body[i : i + 1])
            except OSError:
                return

    def start(head: bytes, body: bytes, interval: float) -> int:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.bind(("127.0.0.1", 0))
        sock.listen(1)
        thread = threading.Thread(target=serve, args=(sock, head, body, interval), daemon=True)
        thread.start()
        servers.append((sock, thread))
        return sock.getsockname()[1]

    try:
        yield start
    finally:
        stop.set()
        for sock, thread in servers:
            sock.close()
            thread.join(timeout=2)
