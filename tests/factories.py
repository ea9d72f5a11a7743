# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Manifest builders and a fixed reference time shared by the tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def iso(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def node_manifest(
    name: str,
    ready: bool = True,
    roles: tuple[str, ...] = (),
    age: timedelta = timedelta(hours=1),
    version: str = "v1.25.6",
) -> dict[str, Any]:
    labels = {f"node-role.kubernetes.io/{role}": "" for role in roles}
    labels["kubernetes.io/hostname"] = name
    return {
        "metadata": {"name": name, "labels": labels, "creationTimestamp": iso(NOW - age)},
        "status": {
            "conditions": [
                {"type": "MemoryPressure", "status": "False"},
                {"type": "Ready", "status": "True" if ready else "False"},
            ],
            "nodeInfo": {"kubeletVersion": version},
        },
    }


def pod_manifest(
    name: str,
    namespace: str = "kube-system",
    phase: str = "Running",
    containers: list[dict[str, Any]] | None = None,
    containers_ready: bool = True,
    age: timedelta = timedelta(minutes=5),
) -> dict[str, Any]:
    if containers is None:
        containers = [{"ready": True, "restartCount": 0, "state": {"running": {}}}]
    return {
        "metadata": {"name": name, "namespace": namespace, "creationTimestamp": iso(NOW - age)},
        "status": {
            "phase": phase,
            "conditions": [{"type": "ContainersReady", "status": "True" if containers_ready else "False"}],
            "containerStatuses": containers,
        },
    }

