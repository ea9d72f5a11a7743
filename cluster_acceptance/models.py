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

"""Read-only projections of node and pod manifests, and node-list entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


def parse_timestamp(value: str | None) -> datetime:
    """Parse a Kubernetes RFC 3339 timestamp into an aware datetime.

    Args:
        value: Timestamp such as ``2024-05-01T08:00:00Z``.

    Returns:
        Timezone-aware datetime (UTC when the value carries no offset).

    Raises:
        ValueError: If the value is missing or malformed.
    """
    if not value:
        raise ValueError("missing creationTimestamp")
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _conditions(status: dict[str, Any]) -> tuple[tuple[str, str], ...]:
    return tuple(
        (str(cond.get("type", "")), str(cond.get("status", "")))
        for cond in status.get("conditions") or []
    )


# ============================================================================
# Nodes
# ============================================================================

@dataclass(frozen=True)
class NodeRecord:
    """A node as returned by the orchestration API.

    Attributes:
        name: Node name, unique within the cluster.
        conditions: ``(type, status)`` pairs from ``status.conditions``.
        labels: Node labels.
        created_at: Creation timestamp.
        version: Kubelet version.
    """

    name: str
    conditions: tuple[tuple[str, str], ...]
    labels: dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = ""

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> NodeRecord:
        """Build a record from a ``kubectl get nodes -o json`` item.

        Raises:
            ValueError: If required fields are missing.
        """
        metadata = manifest.get("metadata") or {}
        status = manifest.get("status") or {}
        name = metadata.get("name")
        if not name:
            raise ValueError("node manifest without metadata.name")
        return cls(
            name=name,
            conditions=_conditions(status),
            labels=dict(metadata.get("labels") or {}),
            created_at=parse_timestamp(metadata.get("creationTimestamp")),
            version=(status.get("nodeInfo") or {}).get("kubeletVersion", ""),
        )


# ============================================================================
# Pods
# ============================================================================

@dataclass(frozen=True)
class ContainerRecord:
    """Runtime state of one container of a pod."""

    ready: bool = False
    running: bool = False
    waiting_reason: str | None = None
    restart_count: int = 0

    @classmethod
    def from_status(cls, status: dict[str, Any]) -> ContainerRecord:
        state = status.get("state") or {}
        waiting = state.get("waiting")
        return cls(
            ready=bool(status.get("ready")),
            running=state.get("running") is not None,
            waiting_reason=waiting.get("reason") if waiting is not None else None,
            restart_count=int(status.get("restartCount") or 0),
        )


@dataclass(frozen=True)
class PodRecord:
    """A pod as returned by the orchestration API.

    Attributes:
        namespace: Pod namespace.
        name: Pod name, unique within the namespace.
        phase: Reported pod phase.
        containers: Per-container runtime states.
        conditions: ``(type, status)`` pairs from ``status.conditions``.
        created_at: Creation timestamp.
    """

    namespace: str
    name: str
    phase: str
    containers: tuple[ContainerRecord, ...] = ()
    conditions: tuple[tuple[str, str], ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> PodRecord:
        """Build a record from a ``kubectl get pods -o json`` item.

        Raises:
            ValueError: If required fields are missing.
        """
        metadata = manifest.get("metadata") or {}
        status = manifest.get("status") or {}
        name = metadata.get("name")
        if not name:
            raise ValueError("pod manifest without metadata.name")
        return cls(
            namespace=metadata.get("namespace", "default"),
            name=name,
            phase=status.get("phase", "Unknown"),
            containers=tuple(
                ContainerRecord.from_status(cs) for cs in status.get("containerStatuses") or []
            ),
            conditions=_conditions(status),
            created_at=parse_timestamp(metadata.get("creationTimestamp")),
        )


# ============================================================================
# BKECluster node entries
# ============================================================================

class NodeEntry(BaseModel):
    """One entry of the BKECluster node list."""

    hostname: str = Field(min_length=1)
    ip: str = Field(min_length=1)
    password: str = ""
    port: str = "22"
    role: list[str] = Field(default_factory=lambda: ["node"])
    username: str = "root"

    @classmethod
    def from_spec(cls, entry: dict[str, Any]) -> NodeEntry:
        """Rebuild an entry taken out of a node list, keeping its credentials."""
        role = entry.get("role") or ["node"]
        return cls(
            hostname=str(entry.get("hostname", "")),
            ip=str(entry.get("ip", "")),
            password=str(entry.get("password") or ""),
            port=str(entry.get("port") or "22"),
            role=[role] if isinstance(role, str) else [str(r) for r in role],
            username=str(entry.get("username") or "root"),
        )
