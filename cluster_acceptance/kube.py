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

"""kubectl-backed access to nodes, pods, and the BKECluster resource."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import sh
import yaml

from cluster_acceptance import logger
from cluster_acceptance.constants import KUBECTL_QUERY_TIMEOUT_SECONDS
from cluster_acceptance.models import NodeRecord, PodRecord
from cluster_acceptance.utils import InfrastructureError, run_kubectl


class KubeClient:
    """Thin kubectl wrapper bound to one kubeconfig and context.

    Queries go through :func:`run_kubectl` to keep JSON stdout separate from
    stderr; mutations go through ``sh`` like the rest of the tooling.

    Args:
        kubeconfig: kubeconfig file, or None for kubectl's default.
        context: Context to select, or None for the current context.
        timeout: Seconds allowed for each query.
    """

    def __init__(
        self,
        kubeconfig: Path | None = None,
        context: str | None = None,
        timeout: int = KUBECTL_QUERY_TIMEOUT_SECONDS,
    ) -> None:
        self.kubeconfig = kubeconfig
        self.context = context
        self.timeout = timeout

    def _global_args(self) -> list[str]:
        args: list[str] = []
        if self.kubeconfig is not None:
            args += ["--kubeconfig", str(self.kubeconfig)]
        if self.context:
            args += ["--context", self.context]
        return args

    def _query(self, args: list[str]) -> str:
        ok, stdout, stderr = run_kubectl([*self._global_args(), *args], timeout=self.timeout)
        if not ok:
            raise InfrastructureError(f"kubectl {' '.join(args)} failed: {stderr.strip()[:500]}")
        return stdout

    def _items(self, args: list[str]) -> list[dict[str, Any]]:
        output = self._query([*args, "-o", "json"])
        try:
            return json.loads(output).get("items") or []
        except (json.JSONDecodeError, AttributeError) as err:
            raise InfrastructureError(f"Cannot parse kubectl {' '.join(args)} output: {err}") from err

    # ========================================================================
    # Queries
    # ========================================================================

    def list_nodes(self) -> list[NodeRecord]:
        """List every node of the cluster.

        Raises:
            InfrastructureError: If kubectl fails or returns malformed nodes.
        """
        try:
            return [NodeRecord.from_manifest(item) for item in self._items(["get", "nodes"])]
        except ValueError as err:
            raise InfrastructureError(f"Malformed node in API response: {err}") from err

    def list_pods(self, namespace: str | None = None) -> list[PodRecord]:
        """List pods of one namespace, or of all namespaces when *namespace* is None.

        Raises:
            InfrastructureError: If kubectl fails or returns malformed pods.
        """
        scope = ["-A"] if namespace is None else ["-n", namespace]
        try:
            return [PodRecord.from_manifest(item) for item in self._items(["get", "pods", *scope])]
        except ValueError as err:
            raise InfrastructureError(f"Malformed pod in API response: {err}") from err

    def get_resource(self, kind: str, name: str, namespace: str) -> dict[str, Any]:
        """Fetch a namespaced resource as a parsed YAML mapping.

        Raises:
            InfrastructureError: If kubectl fails or the output is not a mapping.
        """
        output = self._query(["get", kind, name, "-n", namespace, "-o", "yaml"])
        try:
            document = yaml.safe_load(output)
        except yaml.YAMLError as err:
            raise InfrastructureError(f"Cannot parse {kind}/{name}: {err}") from err
        if not isinstance(document, dict):
            raise InfrastructureError(f"Unexpected {kind}/{name} document: {type(document).__name__}")
        return document

    # ========================================================================
    # Mutations
    # ========================================================================

    def _mutate(self, verb: str, path: Path) -> str:
        try:
            output = str(sh.kubectl(*self._global_args(), verb, "-f", str(path)))
        except sh.ErrorReturnCode as err:
            stderr = err.stderr.decode(errors="replace") if isinstance(err.stderr, bytes) else str(err.stderr)
            raise InfrastructureError(f"kubectl {verb} -f {path} failed: {stderr.strip()[:500]}") from err
        logger.info("kubectl %s -f %s: %s", verb, path, output.strip())
        return output

    def apply_file(self, path: Path) -> str:
        """Run ``kubectl apply -f`` and return its stdout.

        Raises:
            InfrastructureError: If kubectl exits non-zero.
        """
        return self._mutate("apply", path)

    def delete_file(self, path: Path) -> str:
        """Run ``kubectl delete -f`` and return its stdout.

        Raises:
            InfrastructureError: If kubectl exits non-zero.
        """
        return self._mutate("delete", path)
