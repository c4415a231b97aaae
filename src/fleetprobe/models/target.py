# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fleet member model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

STATE_RUNNING = "running"
STATE_UNKNOWN = "unknown"


@dataclass(frozen=True)
class Target:
    """One fleet member as reported by the inventory."""

    identity: str
    address: str
    lifecycle_state: str = STATE_UNKNOWN
    created_at: datetime | None = None

    @property
    def is_running(self) -> bool:
        return self.lifecycle_state == STATE_RUNNING
