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

"""Shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest


@pytest.fixture
def spec_document() -> dict[str, Any]:
    """A fetched BKECluster resource with two nodes and server-managed fields."""
    return {
        "apiVersion": "bke.bocloud.com/v1beta1",
        "kind": "BKECluster",
        "metadata": {
            "name": "bke-cluster",
            "namespace": "bke-cluster",
            "resourceVersion": "1234",
            "uid": "6f1c",
            "generation": 3,
            "annotations": {
                "bke.bocloud.com/ignore-namespace-delete": "true",
                "bke.bocloud.com/ignore-target-cluster-delete": "true",
            },
        },
        "spec": {
            "nodes": [
                {"hostname": "master-1", "ip": "10.50.8.80", "password": "x", "port": "22",
                 "role": ["master", "etcd"], "username": "root"},
                {"hostname": "worker-3", "ip": "10.50.8.49", "password": "x", "port": "22",
                 "role": ["node"], "username": "root"},
            ],
        },
        "status": {"phase": "Provisioned"},
    }
