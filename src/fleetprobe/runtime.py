# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level fleetprobe facade: inventory lookup followed by fan-out dispatch."""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import suppress

from .config import ProbeSettings, load_probe_settings
from .dispatch import Dispatcher
from .http.client import HttpClient, create_default_http_client
from .inventory import AutoScalingInventory
from .models import Outcome, RequestSpec, Target


class FleetProbe:
    """
    Convenience wrapper that wires one HTTP client and inventory into a dispatcher.

    The inventory is created lazily so that callers who already hold a target list
    never need AWS credentials.
    """

    def __init__(
        self,
        *,
        region: str | None = None,
        http_client: HttpClient | None = None,
        inventory: AutoScalingInventory | None = None,
        settings: ProbeSettings | None = None,
    ):
        self.settings = settings or load_probe_settings()
        self.region = region
        self.http_client = http_client or create_default_http_client(self.settings)
        self.dispatcher = Dispatcher(self.http_client, self.settings)
        self._inventory = inventory

    @property
    def inventory(self) -> AutoScalingInventory:
        if self._inventory is None:
            self._inventory = AutoScalingInventory(self.region)
        return self._inventory

    def targets(self, group_name: str) -> list[Target]:
        return self.inventory.targets(group_name)

    def dispatch(self, targets: Sequence[Target], spec: RequestSpec) -> list[Outcome]:
        return self.dispatcher.dispatch(targets, spec)

    def probe_group(self, group_name: str, spec: RequestSpec) -> list[Outcome]:
        return self.dispatch(self.targets(group_name), spec)

    def close(self) -> None:
        with suppress(Exception):
            self.dispatcher.close()

    def __enter__(self) -> FleetProbe:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
