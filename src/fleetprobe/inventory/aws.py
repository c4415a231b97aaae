# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Resolve Auto Scaling Group membership into probe targets."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import InventoryError
from ..models import STATE_UNKNOWN, Target

logger = logging.getLogger(__name__)


class AutoScalingInventory:
    """
    Looks up the instances of an Auto Scaling Group and their EC2 metadata.

    Instances without a private IP address cannot be probed and are left out.
    """

    def __init__(
        self,
        region: str | None = None,
        *,
        session: Any | None = None,
        autoscaling_client: Any | None = None,
        ec2_client: Any | None = None,
    ):
        try:
            if autoscaling_client is None or ec2_client is None:
                session = session or boto3.session.Session(region_name=region)
            self._autoscaling = autoscaling_client or session.client("autoscaling")
            self._ec2 = ec2_client or session.client("ec2")
        except BotoCoreError as exc:
            raise InventoryError(f"failed to create AWS clients: {exc}") from exc

    def instance_ids(self, group_name: str) -> list[str]:
        try:
            resp = self._autoscaling.describe_auto_scaling_groups(AutoScalingGroupNames=[group_name])
        except (BotoCoreError, ClientError) as exc:
            raise InventoryError(f"failed to describe auto scaling group {group_name}: {exc}") from exc

        groups = resp.get("AutoScalingGroups") or []
        if not groups:
            raise InventoryError(f"no auto scaling group found with name {group_name}")
        return [inst["InstanceId"] for inst in groups[0].get("Instances") or [] if inst.get("InstanceId")]

    def describe(self, instance_ids: list[str]) -> list[Target]:
        # An empty InstanceIds filter would describe every instance in the account.
        if not instance_ids:
            return []

        targets: list[Target] = []
        kwargs: dict[str, Any] = {"InstanceIds": instance_ids}
        while True:
            try:
                resp = self._ec2.describe_instances(**kwargs)
            except (BotoCoreError, ClientError) as exc:
                raise InventoryError(f"failed to describe instances: {exc}") from exc

            for reservation in resp.get("Reservations") or []:
                for inst in reservation.get("Instances") or []:
                    target = _target_from_instance(inst)
                    if target is None:
                        logger.debug("Ignoring %s: no private IP address", inst.get("InstanceId"))
                        continue
                    targets.append(target)

            token = resp.get("NextToken")
            if not token:
                return targets
            kwargs["NextToken"] = token

    def targets(self, group_name: str) -> list[Target]:
        ids = self.instance_ids(group_name)
        logger.info("Auto scaling group %s has %d instances", group_name, len(ids))
        return self.describe(ids)


def _target_from_instance(inst: dict[str, Any]) -> Target | None:
    address = inst.get("PrivateIpAddress")
    if not address:
        return None
    state = (inst.get("State") or {}).get("Name") or STATE_UNKNOWN
    return Target(
        identity=str(inst.get("InstanceId") or ""),
        address=str(address),
        lifecycle_state=str(state),
        created_at=inst.get("LaunchTime"),
    )


__all__ = ["AutoScalingInventory"]
