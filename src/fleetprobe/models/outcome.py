# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Per-target probe outcome."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..errors import ProbeFailure
from .target import STATE_RUNNING, Target

STATUS_OK = "OK"
STATUS_SKIPPED = "Skipped"


@dataclass
class Outcome:
    """
    Result of probing a single target.

    Target fields are copied rather than referenced. ``latency`` is in seconds and stays
    at ``0.0`` for skipped and failed probes.
    """

    identity: str
    address: str
    lifecycle_state: str
    created_at: datetime | None = None
    latency: float = 0.0
    failure: ProbeFailure | None = None
    status_code: int | None = None

    @classmethod
    def for_target(cls, target: Target, **kwargs: Any) -> Outcome:
        return cls(
            identity=target.identity,
            address=target.address,
            lifecycle_state=target.lifecycle_state,
            created_at=target.created_at,
            **kwargs,
        )

    @property
    def skipped(self) -> bool:
        return self.lifecycle_state != STATE_RUNNING

    @property
    def ok(self) -> bool:
        return not self.skipped and self.failure is None

    @property
    def status(self) -> str:
        if self.skipped:
            return STATUS_SKIPPED
        if self.failure is not None:
            return self.failure.message
        return STATUS_OK

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity": self.identity,
            "address": self.address,
            "lifecycle_state": self.lifecycle_state,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "latency": self.latency,
            "status_code": self.status_code,
            "status": self.status,
            "failure": self.failure.to_dict() if self.failure else None,
        }
