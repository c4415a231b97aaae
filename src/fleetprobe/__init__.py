# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
fleetprobe package entrypoint.

This package sends one HTTP(S) request to every running member of an AWS Auto Scaling
Group and reports per-member latency and outcome. HTTP behavior is abstracted behind an
injectable client interface, and domain objects are modeled with typed dataclasses.
"""

from .config import ProbeSettings, load_probe_settings
from .dispatch import Dispatcher, ResultCollector, dispatch
from .errors import ConfigError, ErrorCategory, FailureKind, FleetProbeError, InventoryError, ProbeFailure
from .http import HttpClient, HttpRequest, HttpResponse, HttpxClient, create_default_http_client
from .inventory import AutoScalingInventory
from .log import setup_logging
from .models import Outcome, RequestSpec, Target
from .runtime import FleetProbe
from .version import __version__

__all__ = [
    "AutoScalingInventory",
    "ConfigError",
    "Dispatcher",
    "ErrorCategory",
    "FailureKind",
    "FleetProbe",
    "FleetProbeError",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpxClient",
    "InventoryError",
    "Outcome",
    "ProbeFailure",
    "ProbeSettings",
    "RequestSpec",
    "ResultCollector",
    "Target",
    "create_default_http_client",
    "dispatch",
    "load_probe_settings",
    "setup_logging",
    "__version__",
]
