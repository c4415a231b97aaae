# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Thread-safe sink for outcomes produced by concurrent probes."""

from __future__ import annotations

import threading

from ..errors import IncompleteResultsError
from ..models import Outcome


class ResultCollector:
    """
    Append-only outcome sink with a join barrier.

    Producers call ``add`` from any thread. ``wait`` blocks until ``expected`` outcomes
    have arrived and ``results`` refuses to hand out a partial set.
    """

    def __init__(self, expected: int):
        self.expected = expected
        self._lock = threading.Lock()
        self._outcomes: list[Outcome] = []
        self._complete = threading.Event()
        if expected <= 0:
            self._complete.set()

    def add(self, outcome: Outcome) -> None:
        with self._lock:
            self._outcomes.append(outcome)
            if len(self._outcomes) >= self.expected:
                self._complete.set()

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)

    def wait(self, timeout: float | None = None) -> bool:
        return self._complete.wait(timeout)

    def results(self) -> list[Outcome]:
        with self._lock:
            if len(self._outcomes) != self.expected:
                raise IncompleteResultsError(f"expected {self.expected} outcomes, collected {len(self._outcomes)}")
            return list(self._outcomes)


__all__ = ["ResultCollector"]
