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

"""Tests for admin kubeconfig handling and cluster bootstrap."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
import sh
import yaml

from cluster_acceptance import cluster
from cluster_acceptance.capture import CaptureLog
from cluster_acceptance.cluster import admin_kubeconfig, rewrite_server_address, settle
from cluster_acceptance.config import ClusterConfig
from cluster_acceptance.utils import InfrastructureError

ADMIN_CONF = """apiVersion: v1
kind: Config
clusters:
- cluster:
    certificate-authority-data: LS0tLS1CRUdJTg==
    server: https://127.0.0.1:6443
  name: bke-cluster
- cluster:
    server: https://10.0.0.1:6443
  name: other
contexts:
- context:
    cluster: bke-cluster
    user: kubernetes-admin
  name: bke-cluster-kubernetes-admin@bke-cluster
current-context: bke-cluster-kubernetes-admin@bke-cluster
"""


def test_rewrite_points_loopback_server_at_master():
    rewritten = yaml.safe_load(rewrite_server_address(ADMIN_CONF, "10.50.8.80", 6443))

    servers = [c["cluster"]["server"] for c in rewritten["clusters"]]
    assert servers == ["https://10.50.8.80:6443", "https://10.0.0.1:6443"]
    assert rewritten["clusters"][0]["cluster"]["certificate-authority-data"] == "LS0tLS1CRUdJTg=="
    assert rewritten["current-context"] == "bke-cluster-kubernetes-admin@bke-cluster"


@pytest.mark.parametrize("text", ["clusters: [", "- just\n- a list\n"])
def test_rewrite_rejects_malformed_kubeconfig(text):
    with pytest.raises(InfrastructureError):
        rewrite_server_address(text, "10.50.8.80", 6443)


def test_admin_kubeconfig_is_removed_after_use(tmp_path: Path):
    def fake_scp(*args, **kwargs):
        Path(args[-1]).write_text(ADMIN_CONF)

    cfg = ClusterConfig(ssh_password="secret")
    dest = tmp_path / "admin.conf"
    with patch.object(cluster.sh, "sshpass", side_effect=fake_scp, create=True) as sshpass:
        with admin_kubeconfig(cfg, dest) as path:
            assert "https://10.50.8.80:6443" in path.read_text()

    sshpass.assert_called_once_with("-p", "secret", "scp", "root@10.50.8.80:/etc/kubernetes/admin.conf", str(dest))
    assert not dest.exists()


def test_failed_copy_is_an_infrastructure_error(tmp_path: Path):
    error = sh.ErrorReturnCode_1("sshpass", b"", b"Permission denied")
    with patch.object(cluster.sh, "sshpass", side_effect=error, create=True):
        with pytest.raises(InfrastructureError, match="exit code 1"):
            cluster.fetch_admin_kubeconfig(ClusterConfig(ssh_password="x"), tmp_path / "admin.conf")


def test_create_cluster_tees_output(tmp_path: Path):
    def fake_bke(*args, _out, _err):
        _out("[10:00:01][bke-node] master-1 Node is ready\n")

    with CaptureLog(tmp_path / "logs.yaml", echo=None) as capture:
        with patch.object(cluster.sh, "bke", side_effect=fake_bke, create=True) as bke:
            cluster.create_cluster(ClusterConfig(manifest=Path("bkecluster.yaml")), capture)
        assert "bke-node" in capture.read_text()
    assert bke.call_args.args == ("cluster", "create", "-f", "bkecluster.yaml")


def test_settle_skips_non_positive_delays():
    sleeps: list[float] = []
    settle(0, "nothing", sleep=sleeps.append)
    settle(15, "something", sleep=sleeps.append)
    assert sleeps == [15]
