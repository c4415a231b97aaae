# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for fleetprobe."""

from ..http.models import Headers, HttpRequest, HttpResponse
from .outcome import STATUS_OK, STATUS_SKIPPED, Outcome
from .request import RequestSpec, normalize_path
from .target import STATE_RUNNING, STATE_UNKNOWN, Target

__all__ = [
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "Outcome",
    "RequestSpec",
    "STATE_RUNNING",
    "STATE_UNKNOWN",
    "STATUS_OK",
    "STATUS_SKIPPED",
    "Target",
    "normalize_path",
]
