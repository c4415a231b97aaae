# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for fleetprobe."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"fleetprobe/{__version__}"
DEFAULT_TIMEOUT = 3.0
DEFAULT_CONTENT_TYPE = "application/json"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ProbeSettings:
    """HTTP and fan-out defaults."""

    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    # 0 means one worker per eligible target.
    max_workers: int = 0

    @classmethod
    def from_env(cls) -> "ProbeSettings":
        """Create settings from environment variables (evaluated at call time)."""
        timeout = _float_env("FLEETPROBE_HTTP_TIMEOUT", cls.timeout)
        if timeout <= 0:
            timeout = cls.timeout
        max_workers = _int_env("FLEETPROBE_MAX_WORKERS", cls.max_workers)
        if max_workers < 0:
            max_workers = cls.max_workers
        return cls(
            timeout=timeout,
            user_agent=os.getenv("FLEETPROBE_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("FLEETPROBE_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("FLEETPROBE_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_workers=max_workers,
        )


def load_probe_settings() -> ProbeSettings:
    """Load probe settings from environment with sensible defaults."""
    return ProbeSettings.from_env()
