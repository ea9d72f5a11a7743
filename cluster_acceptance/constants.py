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

"""Constants: defaults, label and annotation keys, table layouts, report markers."""

from __future__ import annotations

# -- Cluster defaults --
DEFAULT_CLUSTER_NAME = "bke-cluster"
DEFAULT_CLUSTER_NAMESPACE = "bke-cluster"
DEFAULT_RESOURCE_KIND = "bkecluster"
DEFAULT_CLUSTER_MANIFEST = "bkecluster.yaml"
DEFAULT_KUBE_CONTEXT = "bke-cluster-kubernetes-admin@bke-cluster"
DEFAULT_MASTER_ADDRESS = "10.50.8.80"
DEFAULT_SSH_USER = "root"
DEFAULT_API_SERVER_PORT = 6443
DEFAULT_NODE_LIST_PATH = "spec.nodes"

# -- Scale test node defaults --
DEFAULT_SCALE_HOSTNAME = "worker-3"
DEFAULT_SCALE_IP = "10.50.8.49"
DEFAULT_SCALE_PORT = "22"
DEFAULT_SCALE_USERNAME = "root"
DEFAULT_SCALE_ROLE = "node"

# -- Poll cadence --
DEFAULT_POLL_TIMEOUT_SECONDS = 300
DEFAULT_POLL_INTERVAL_SECONDS = 30
DEFAULT_SCALE_SETTLE_SECONDS = 30
DEFAULT_POST_CREATE_DELAY_SECONDS = 60

# -- Command timeouts --
KUBECTL_QUERY_TIMEOUT_SECONDS = 60

# -- Artifact file names --
CAPTURE_LOG_FILE = "logs.yaml"
REPORT_FILE = "test.yaml"
SPEC_DOCUMENT_FILE = "cluster.yaml"
ADMIN_CONF_FILE = "admin.conf"
REMOTE_ADMIN_CONF_PATH = "/etc/kubernetes/admin.conf"
LOCAL_API_SERVER = "https://127.0.0.1"

# -- Labels and annotations --
ROLE_LABEL_PREFIX = "node-role.kubernetes.io/"
ROLE_NONE = "<none>"
ANNOTATION_PREFIX = "bke.bocloud.com/"
ANNOTATION_DELETED_NODES = f"{ANNOTATION_PREFIX}appointment-deleted-nodes"
ANNOTATION_IGNORE_NAMESPACE_DELETE = f"{ANNOTATION_PREFIX}ignore-namespace-delete"
ANNOTATION_IGNORE_TARGET_CLUSTER_DELETE = f"{ANNOTATION_PREFIX}ignore-target-cluster-delete"
DELETE_PROTECTION_ANNOTATIONS = (
    ANNOTATION_IGNORE_NAMESPACE_DELETE,
    ANNOTATION_IGNORE_TARGET_CLUSTER_DELETE,
)

# Server-managed fields stripped from a fetched document before re-submission.
SERVER_MANAGED_METADATA = ("resourceVersion", "uid", "managedFields", "generation", "creationTimestamp")

# -- Status values --
NODE_READY = "Ready"
NODE_NOT_READY = "NotReady"
POD_RUNNING = "Running"
POD_SUCCEEDED = "Succeeded"
POD_CRASH_LOOP = "CrashLoopBackOff"
POD_UNAVAILABLE = "Unavailable"
POD_PHASES = ("Pending", "Running", "Succeeded", "Failed", "Unknown")
HEALTHY_POD_STATUSES = (POD_RUNNING, POD_SUCCEEDED)
CONDITION_READY = "Ready"
CONDITION_CONTAINERS_READY = "ContainersReady"

# -- Table layouts --
NODE_TABLE_HEADER = "NAME       STATUS   ROLES         AGE   VERSION"
POD_TABLE_HEADER = "NAMESPACE     NAME                                       READY   STATUS              RESTARTS   AGE"

# -- Bootstrap log markers --
BOOTSTRAP_NODE_MARKER = "[bke-node]"
BOOTSTRAP_NODE_NOT_READY = "Node is not ready"

# -- Report --
SECTION_DEPLOY = "Cluster deploy test:"
SECTION_COMPONENTS = "Component install test:"
SECTION_SCALE_DOWN = "Cluster scale-down test:"
SECTION_SCALE_UP = "Cluster scale-up test:"
SECTION_DELETE = "Cluster delete test:"
MARK_SUCCESS = "success!"
MARK_FAILED = "failed"
