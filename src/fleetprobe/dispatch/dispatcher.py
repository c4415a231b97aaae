# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fan-out dispatcher: one concurrent HTTP exchange per running fleet member."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from ..config import ProbeSettings, load_probe_settings
from ..errors import FailureKind, ProbeFailure
from ..http.client import HttpClient, create_default_http_client
from ..models import Outcome, RequestSpec, Target
from .collector import ResultCollector

logger = logging.getLogger(__name__)


class Dispatcher:
    """Probes a target set concurrently and returns exactly one outcome per target."""

    def __init__(self, http_client: HttpClient | None = None, settings: ProbeSettings | None = None):
        self.settings = settings or load_probe_settings()
        self.http_client = http_client or create_default_http_client(self.settings)

    def dispatch(self, targets: Sequence[Target], spec: RequestSpec) -> list[Outcome]:
        collector = ResultCollector(expected=len(targets))

        eligible: list[Target] = []
        for target in targets:
            if target.is_running:
                eligible.append(target)
                continue
            logger.debug("Skipping %s (%s)", target.identity, target.lifecycle_state)
            collector.add(Outcome.for_target(target))

        if eligible:
            self._fan_out(eligible, spec, collector)

        collector.wait()
        outcomes = collector.results()
        logger.info(
            "Probed %d of %d targets: %d ok, %d failed",
            len(eligible),
            len(targets),
            sum(1 for outcome in outcomes if outcome.ok),
            sum(1 for outcome in outcomes if outcome.failure is not None),
        )
        return outcomes

    def _fan_out(self, eligible: list[Target], spec: RequestSpec, collector: ResultCollector) -> None:
        try:
            body = spec.read_body()
        except OSError as exc:
            failure = ProbeFailure.from_exception(FailureKind.PAYLOAD_READ, exc, prefix="failed to read POST payload: ")
            logger.warning("%s", failure.message)
            for target in eligible:
                collector.add(Outcome.for_target(target, failure=failure))
            return

        workers = len(eligible)
        if self.settings.max_workers > 0:
            workers = min(workers, self.settings.max_workers)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fleetprobe") as pool:
            for target in eligible:
                pool.submit(self._probe_into, collector, target, spec, body)

    def _probe_into(self, collector: ResultCollector, target: Target, spec: RequestSpec, body: bytes | None) -> None:
        try:
            outcome = self.probe(target, spec, body)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error probing %s", target.identity)
            outcome = Outcome.for_target(target, failure=ProbeFailure.from_exception(FailureKind.TRANSPORT, exc))
        collector.add(outcome)

    def probe(self, target: Target, spec: RequestSpec, body: bytes | None = None) -> Outcome:
        """Run one timed exchange; ``body`` is the payload already resolved by ``spec.read_body()``."""
        try:
            request = spec.build_request(target, body)
        except Exception as exc:  # noqa: BLE001
            return Outcome.for_target(target, failure=ProbeFailure.from_exception(FailureKind.REQUEST_CONSTRUCTION, exc))

        try:
            response = self.http_client.request(request)
        except Exception as exc:  # noqa: BLE001
            return Outcome.for_target(target, failure=ProbeFailure.from_exception(FailureKind.TRANSPORT, exc))

        if not response.ok:
            failure = response.failure or ProbeFailure(kind=FailureKind.TRANSPORT, message="request failed")
            logger.debug("%s %s failed: %s", request.method, request.url, failure.message)
            return Outcome.for_target(target, failure=failure, status_code=response.status_code)

        return Outcome.for_target(target, latency=response.elapsed, status_code=response.status_code)

    def close(self) -> None:
        if hasattr(self.http_client, "close"):
            self.http_client.close()


def dispatch(
    targets: Sequence[Target],
    spec: RequestSpec,
    *,
    http_client: HttpClient | None = None,
    settings: ProbeSettings | None = None,
) -> list[Outcome]:
    """Convenience wrapper around ``Dispatcher.dispatch``."""
    dispatcher = Dispatcher(http_client=http_client, settings=settings)
    try:
        return dispatcher.dispatch(targets, spec)
    finally:
        dispatcher.close()


__all__ = ["Dispatcher", "dispatch"]
