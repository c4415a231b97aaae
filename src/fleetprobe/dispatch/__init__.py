# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fan-out dispatch across a fleet."""

from .collector import ResultCollector
from .dispatcher import Dispatcher, dispatch

__all__ = ["Dispatcher", "ResultCollector", "dispatch"]
