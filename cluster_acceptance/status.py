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

"""Node and pod status classification, age formatting, and table rendering."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from cluster_acceptance.constants import (
    CONDITION_CONTAINERS_READY,
    CONDITION_READY,
    NODE_NOT_READY,
    NODE_READY,
    NODE_TABLE_HEADER,
    POD_CRASH_LOOP,
    POD_RUNNING,
    POD_TABLE_HEADER,
    POD_UNAVAILABLE,
    ROLE_LABEL_PREFIX,
    ROLE_NONE,
)
from cluster_acceptance.models import NodeRecord, PodRecord


# ============================================================================
# Age
# ============================================================================

def format_age(created_at: datetime, now: datetime | None = None) -> str:
    """Format the time elapsed since *created_at* as ``<H>h<M>m``.

    Hours and minutes are truncated. Zero or negative elapsed time gives ``0h0m``.

    Args:
        created_at: Creation timestamp (naive values are taken as UTC).
        now: Reference time, defaults to the current UTC time.

    Returns:
        Elapsed duration label.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    total_minutes = max(int((now - created_at).total_seconds() // 60), 0)
    return f"{total_minutes // 60}h{total_minutes % 60}m"


# ============================================================================
# Nodes
# ============================================================================

@dataclass(frozen=True)
class NodeStatus:
    """Classified view of a node."""

    name: str
    status: str
    roles: tuple[str, ...]
    age: str
    version: str


def node_roles(labels: Iterable[str]) -> tuple[str, ...]:
    """Extract role names from ``node-role.kubernetes.io/<role>`` label keys."""
    roles = tuple(
        sorted(key[len(ROLE_LABEL_PREFIX):] for key in labels if key.startswith(ROLE_LABEL_PREFIX))
    )
    return roles or (ROLE_NONE,)


def classify_node(node: NodeRecord, now: datetime | None = None) -> NodeStatus:
    """Derive status, roles, and age of a node.

    Status is ``Ready`` iff some condition of type Ready has status True,
    wherever it appears in the condition list.
    """
    ready = any(ctype == CONDITION_READY and cstatus == "True" for ctype, cstatus in node.conditions)
    return NodeStatus(
        name=node.name,
        status=NODE_READY if ready else NODE_NOT_READY,
        roles=node_roles(node.labels),
        age=format_age(node.created_at, now),
        version=node.version,
    )


def format_node_line(node: NodeStatus) -> str:
    # Columns are always separated by at least one space.
    return f"{node.name:<9} {node.status:<8} {','.join(node.roles):<13} {node.age:<5} {node.version:<7}"


def render_node_table(nodes: Iterable[NodeRecord], now: datetime | None = None) -> str:
    """Render nodes as a fixed-width table, header first, one line per node."""
    lines = [NODE_TABLE_HEADER]
    lines.extend(format_node_line(classify_node(node, now)) for node in nodes)
    return "\n".join(lines) + "\n"


# ============================================================================
# Pods
# ============================================================================

@dataclass(frozen=True)
class PodStatus:
    """Classified view of a pod."""

    namespace: str
    name: str
    ready: int
    total: int
    status: str
    restarts: int
    age: str


def pod_display_status(pod: PodRecord) -> str:
    """Compute the display status of a pod.

    The rules apply in order, later ones overriding earlier ones:

    1. ``Running`` if any container is in the running state, else the pod phase.
    2. ``CrashLoopBackOff`` if any container waits with that reason.
    3. ``Unavailable`` if the status is still ``Running`` but the pod's
       ContainersReady condition is not True.

    Args:
        pod: Pod record from the current snapshot.

    Returns:
        Display status string.
    """
    if any(c.running for c in pod.containers):
        status = POD_RUNNING
    else:
        status = pod.phase

    if any(c.waiting_reason == POD_CRASH_LOOP for c in pod.containers):
        status = POD_CRASH_LOOP

    containers_ready = any(
        ctype == CONDITION_CONTAINERS_READY and cstatus == "True" for ctype, cstatus in pod.conditions
    )
    if not containers_ready and status == POD_RUNNING:
        status = POD_UNAVAILABLE
    return status


def classify_pod(pod: PodRecord, now: datetime | None = None) -> PodStatus:
    """Derive readiness ratio, display status, restart count, and age of a pod."""
    return PodStatus(
        namespace=pod.namespace,
        name=pod.name,
        ready=sum(1 for c in pod.containers if c.ready),
        total=len(pod.containers),
        status=pod_display_status(pod),
        restarts=max((c.restart_count for c in pod.containers), default=0),
        age=format_age(pod.created_at, now),
    )


def format_pod_line(pod: PodStatus) -> str:
    return (
        f"{pod.namespace:<12} {pod.name:<42} {pod.ready}/{pod.total}   "
        f"{pod.status:<18} {pod.restarts:<10} {pod.age:<8}"
    )


def render_pod_table(pods: Iterable[PodRecord], now: datetime | None = None) -> str:
    """Render pods as a fixed-width table, header first, one line per pod."""
    lines = [POD_TABLE_HEADER]
    lines.extend(format_pod_line(classify_pod(pod, now)) for pod in pods)
    return "\n".join(lines) + "\n"
