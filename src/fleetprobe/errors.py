# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from dataclasses import dataclass
from enum import Enum

import httpx


class FleetProbeError(Exception):
    """Base class for fatal, pre-dispatch errors."""


class ConfigError(FleetProbeError):
    """Invalid options or an unreadable request payload."""


class InventoryError(FleetProbeError):
    """Fleet membership could not be resolved."""


class IncompleteResultsError(RuntimeError):
    """The collector did not receive exactly one outcome per target."""


class FailureKind(str, Enum):
    """Stage of a single exchange at which a probe failed."""

    PAYLOAD_READ = "PAYLOAD_READ"
    REQUEST_CONSTRUCTION = "REQUEST_CONSTRUCTION"
    TRANSPORT = "TRANSPORT"
    BODY_READ = "BODY_READ"


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


def _exception_chain(exc: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.

    httpx wraps socket and TLS errors in its own types, so the cause chain is inspected
    before falling back to the httpx class itself.
    """
    if isinstance(exc, (httpx.TimeoutException, TimeoutError, socket.timeout)):
        return ErrorCategory.TIMEOUT

    for item in _exception_chain(exc):
        if isinstance(item, (ssl.SSLError, ssl.CertificateError)):
            return ErrorCategory.SSL_ERROR
        if isinstance(item, (socket.gaierror, socket.herror)):
            return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.RemoteProtocolError, httpx.LocalProtocolError, httpx.DecodingError)):
        return ErrorCategory.PROTOCOL_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.NetworkError, httpx.ProxyError, ConnectionError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


@dataclass(frozen=True)
class ProbeFailure:
    """Classified failure attached to a single outcome."""

    kind: FailureKind
    message: str
    category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR
    error_type: str | None = None

    @classmethod
    def from_exception(cls, kind: FailureKind, exc: BaseException, *, prefix: str = "") -> ProbeFailure:
        text = str(exc) or type(exc).__name__
        return cls(
            kind=kind,
            message=f"{prefix}{text}",
            category=categorize_exception(exc),
            error_type=type(exc).__name__,
        )

    def to_dict(self) -> dict[str, str | None]:
        return {
            "kind": self.kind.value,
            "category": self.category.value,
            "message": self.message,
            "error_type": self.error_type,
        }


__all__ = [
    "ConfigError",
    "ErrorCategory",
    "FailureKind",
    "FleetProbeError",
    "IncompleteResultsError",
    "InventoryError",
    "ProbeFailure",
    "categorize_exception",
]
