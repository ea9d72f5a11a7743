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

"""Text checks over captured output: bootstrap markers, pod health, node presence."""

from __future__ import annotations

from collections.abc import Callable

from cluster_acceptance.constants import (
    BOOTSTRAP_NODE_MARKER,
    BOOTSTRAP_NODE_NOT_READY,
    HEALTHY_POD_STATUSES,
    NODE_READY,
    NODE_TABLE_HEADER,
    POD_TABLE_HEADER,
)

Predicate = Callable[[str], bool]

_HEADERS = (NODE_TABLE_HEADER, POD_TABLE_HEADER)


# ============================================================================
# Bootstrap output
# ============================================================================

def bootstrap_node_lines(text: str) -> list[str]:
    """Return every ``[bke-node]`` line of the bootstrap output."""
    return [line for line in text.splitlines() if BOOTSTRAP_NODE_MARKER in line]


def any_node_not_ready(text: str) -> bool:
    """Whether the bootstrap output reports a node that is not ready.

    The readiness message is only looked for after the second ``]``, i.e.
    past the ``[time][bke-node]`` style prefix.
    """
    for line in bootstrap_node_lines(text):
        parts = line.split("]", 2)
        if len(parts) == 3 and BOOTSTRAP_NODE_NOT_READY in parts[2]:
            return True
    return False


# ============================================================================
# Rendered tables
# ============================================================================

def table_rows(text: str) -> list[str]:
    """Return the non-blank, non-header lines of a rendered snapshot."""
    return [line for line in text.splitlines() if line.strip() and line.strip() not in _HEADERS]


def _rows_after(text: str, header: str) -> list[str]:
    """Return the lines following *header*, up to a blank line or the next table."""
    lines = text.splitlines()
    try:
        start = next(i for i, line in enumerate(lines) if line.strip() == header)
    except StopIteration:
        return []
    rows: list[str] = []
    for line in lines[start + 1:]:
        if not line.strip() or line.strip() in _HEADERS:
            break
        rows.append(line)
    return rows


def not_ready_node_lines(text: str) -> list[str]:
    """Return node table lines whose STATUS column is not Ready."""
    return [
        line for line in _rows_after(text, NODE_TABLE_HEADER)
        if len(line.split()) < 2 or line.split()[1] != NODE_READY
    ]


def unhealthy_pod_lines(text: str) -> list[str]:
    """Return pod table lines whose status is neither Running nor Succeeded.

    Only lines after the pod table header are inspected, up to the first
    blank line or the next table header.
    """
    return [
        line for line in _rows_after(text, POD_TABLE_HEADER)
        if len(line.split()) < 4 or line.split()[3] not in HEALTHY_POD_STATUSES
    ]


def node_listed(text: str, hostname: str) -> bool:
    """Whether a rendered node table has a row whose NAME column is *hostname*."""
    return any(line.split()[0] == hostname for line in table_rows(text))


def node_absent(hostname: str) -> Predicate:
    """Predicate: the snapshot lists nodes, and *hostname* is not among them."""
    def _check(text: str) -> bool:
        return bool(table_rows(text)) and not node_listed(text, hostname)
    return _check


def node_present(hostname: str) -> Predicate:
    """Predicate: the snapshot lists *hostname*."""
    def _check(text: str) -> bool:
        return node_listed(text, hostname)
    return _check
