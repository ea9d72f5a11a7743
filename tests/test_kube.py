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

"""Tests for the kubectl wrapper."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
import sh

from cluster_acceptance import kube
from cluster_acceptance.kube import KubeClient
from cluster_acceptance.utils import InfrastructureError
from tests.factories import node_manifest, pod_manifest


def _items(*manifests) -> str:
    return json.dumps({"apiVersion": "v1", "kind": "List", "items": list(manifests)})


@pytest.fixture
def client() -> KubeClient:
    return KubeClient(kubeconfig=Path("admin.conf"), context="bke-cluster-kubernetes-admin@bke-cluster")


def test_list_nodes_passes_kubeconfig_and_context(client):
    with patch.object(kube, "run_kubectl", return_value=(True, _items(node_manifest("master-1")), "")) as run:
        nodes = client.list_nodes()

    assert [n.name for n in nodes] == ["master-1"]
    args = run.call_args.args[0]
    assert args[:4] == ["--kubeconfig", "admin.conf", "--context", "bke-cluster-kubernetes-admin@bke-cluster"]
    assert args[4:] == ["get", "nodes", "-o", "json"]


def test_list_pods_all_namespaces_by_default():
    with patch.object(kube, "run_kubectl", return_value=(True, _items(pod_manifest("coredns")), "")) as run:
        pods = KubeClient().list_pods()
        KubeClient().list_pods("kube-system")

    assert pods[0].namespace == "kube-system"
    first, second = (c.args[0] for c in run.call_args_list)
    assert first == ["get", "pods", "-A", "-o", "json"]
    assert second == ["get", "pods", "-n", "kube-system", "-o", "json"]


def test_failed_query_is_an_infrastructure_error(client):
    with patch.object(kube, "run_kubectl", return_value=(False, "", "The connection to the server was refused")):
        with pytest.raises(InfrastructureError, match="refused"):
            client.list_nodes()


@pytest.mark.parametrize("output", ["not json", _items({"metadata": {}})])
def test_malformed_output_is_an_infrastructure_error(client, output):
    with patch.object(kube, "run_kubectl", return_value=(True, output, "")):
        with pytest.raises(InfrastructureError):
            client.list_nodes()


def test_get_resource_parses_yaml(client):
    document = "apiVersion: bke.bocloud.com/v1beta1\nkind: BKECluster\nmetadata:\n  name: bke-cluster\n"
    with patch.object(kube, "run_kubectl", return_value=(True, document, "")) as run:
        resource = client.get_resource("bkecluster", "bke-cluster", "bke-cluster")

    assert resource["kind"] == "BKECluster"
    assert run.call_args.args[0][4:] == ["get", "bkecluster", "bke-cluster", "-n", "bke-cluster", "-o", "yaml"]


def test_get_resource_requires_a_mapping(client):
    with patch.object(kube, "run_kubectl", return_value=(True, "", "")):
        with pytest.raises(InfrastructureError):
            client.get_resource("bkecluster", "bke-cluster", "bke-cluster")


def test_apply_file_uses_kubectl(client):
    with patch.object(kube.sh, "kubectl", return_value="bkecluster configured\n", create=True) as kubectl:
        output = client.apply_file(Path("cluster.yaml"))

    assert output == "bkecluster configured\n"
    assert kubectl.call_args.args[-3:] == ("apply", "-f", "cluster.yaml")


def test_failed_delete_is_an_infrastructure_error(client):
    error = sh.ErrorReturnCode_1("kubectl delete", b"", b"error: the server doesn't have a resource type")
    with patch.object(kube.sh, "kubectl", side_effect=error, create=True):
        with pytest.raises(InfrastructureError, match="resource type"):
            client.delete_file(Path("bkecluster.yaml"))
