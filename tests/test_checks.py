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

"""Tests for text checks over captured output."""

from __future__ import annotations

from cluster_acceptance.checks import (
    any_node_not_ready,
    bootstrap_node_lines,
    node_absent,
    node_listed,
    node_present,
    not_ready_node_lines,
    table_rows,
    unhealthy_pod_lines,
)
from cluster_acceptance.constants import NODE_TABLE_HEADER, POD_TABLE_HEADER

BOOTSTRAP_OK = (
    "[2024-05-01 10:00:01][bke-node] master-1 Node is ready\n"
    "[2024-05-01 10:00:02][bke-node] worker-3 Node is ready\n"
    "[2024-05-01 10:00:03][bke-cluster] cluster provisioned\n"
)
NODES = (
    f"{NODE_TABLE_HEADER}\n"
    "master-1  Ready    etcd,master   2h0m  v1.25.6\n"
    "worker-3  NotReady node          2h0m  v1.25.6\n"
)
PODS = (
    f"{POD_TABLE_HEADER}\n"
    "kube-system  coredns-5d78c9869d-abcde                   1/1   Running            0          0h7m\n"
    "kube-system  install-job-xk2p                           0/1   Succeeded          0          0h9m\n"
    "monitoring   prometheus-0                               0/1   CrashLoopBackOff   7          1h2m\n"
    "monitoring   grafana-7d9f                               1/1   Unavailable        0          1h2m\n"
)


class TestBootstrapOutput:
    def test_marker_lines_are_selected(self):
        assert len(bootstrap_node_lines(BOOTSTRAP_OK)) == 2

    def test_all_ready(self):
        assert not any_node_not_ready(BOOTSTRAP_OK)

    def test_not_ready_message_after_prefix(self):
        text = BOOTSTRAP_OK + "[2024-05-01 10:05:00][bke-node] worker-4 Node is not ready\n"
        assert any_node_not_ready(text)

    def test_message_inside_prefix_is_ignored(self):
        assert not any_node_not_ready("[Node is not ready][bke-node] worker-4 joined\n")


class TestTables:
    def test_header_and_blank_lines_are_not_rows(self):
        assert table_rows(f"\n{NODES}\n") == NODES.splitlines()[1:]

    def test_not_ready_node_rows(self):
        assert not_ready_node_lines(BOOTSTRAP_OK + "\n" + NODES) == [NODES.splitlines()[2]]

    def test_unhealthy_pods(self):
        unhealthy = unhealthy_pod_lines(BOOTSTRAP_OK + "\n" + NODES + PODS)
        assert [line.split()[1] for line in unhealthy] == ["prometheus-0", "grafana-7d9f"]

    def test_node_rows_stop_at_pod_table(self):
        assert len(not_ready_node_lines(NODES + PODS)) == 1

    def test_no_pod_table_means_no_unhealthy_pods(self):
        assert unhealthy_pod_lines(NODES) == []


class TestNodePredicates:
    def test_exact_name_match(self):
        assert node_listed(NODES, "worker-3")
        assert not node_listed(NODES, "worker")
        assert not node_listed(NODES, "worker-30")

    def test_absent(self):
        assert not node_absent("worker-3")(NODES)
        assert node_absent("worker-9")(NODES)

    def test_absent_requires_a_non_empty_snapshot(self):
        assert not node_absent("worker-3")(f"{NODE_TABLE_HEADER}\n")
        assert not node_absent("worker-3")("")

    def test_present(self):
        assert node_present("master-1")(NODES)
        assert not node_present("worker-9")(NODES)
