# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fleet membership lookup."""

from .aws import AutoScalingInventory

__all__ = ["AutoScalingInventory"]
