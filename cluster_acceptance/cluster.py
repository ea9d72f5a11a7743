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

"""Cluster bootstrap, admin credential retrieval, and settling delays."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

import sh
import yaml
from rich.panel import Panel

from cluster_acceptance import console
from cluster_acceptance.capture import CaptureLog
from cluster_acceptance.config import ClusterConfig
from cluster_acceptance.constants import LOCAL_API_SERVER, REMOTE_ADMIN_CONF_PATH
from cluster_acceptance.utils import InfrastructureError, transient_file


# ============================================================================
# Bootstrap
# ============================================================================

def create_cluster(cluster_cfg: ClusterConfig, capture: CaptureLog) -> None:
    """Run ``bke cluster create``, teeing its output into the capture log.

    Args:
        cluster_cfg: Cluster configuration with the manifest path.
        capture: Log that receives stdout and stderr of the command.

    Raises:
        InfrastructureError: If the command fails.
    """
    console.print(Panel.fit(f"Creating cluster from {cluster_cfg.manifest}", style="bold blue"))
    try:
        sh.bke(
            "cluster", "create", "-f", str(cluster_cfg.manifest),
            _out=capture.write,
            _err=capture.write,
        )
    except sh.ErrorReturnCode as err:
        raise InfrastructureError(f"bke cluster create failed with exit code {err.exit_code}") from err
    console.print("[green]\u2705 Cluster creation finished[/green]")


def settle(seconds: float, reason: str, sleep: Callable[[float], None] = time.sleep) -> None:
    """Block for *seconds* to let the cluster react before checking it."""
    if seconds <= 0:
        return
    console.print(f"[yellow]\u2139\ufe0f  Waiting {seconds}s ({reason})...[/yellow]")
    sleep(seconds)


# ============================================================================
# Admin credentials
# ============================================================================

def rewrite_server_address(kubeconfig_text: str, master_address: str, port: int) -> str:
    """Point loopback API server entries of a kubeconfig at the master node.

    ``admin.conf`` as copied from the master addresses the API server as
    ``https://127.0.0.1:<port>``, which is only reachable on the master itself.

    Args:
        kubeconfig_text: Content of the fetched kubeconfig.
        master_address: Address of the master node.
        port: API server port.

    Returns:
        The rewritten kubeconfig.

    Raises:
        InfrastructureError: If the kubeconfig cannot be parsed.
    """
    try:
        kubeconfig = yaml.safe_load(kubeconfig_text)
    except yaml.YAMLError as err:
        raise InfrastructureError(f"Cannot parse admin kubeconfig: {err}") from err
    if not isinstance(kubeconfig, dict):
        raise InfrastructureError("Admin kubeconfig is not a mapping")

    for entry in kubeconfig.get("clusters") or []:
        cluster = entry.get("cluster") or {}
        server = cluster.get("server", "")
        if server.startswith(LOCAL_API_SERVER):
            parts = urlsplit(server)
            cluster["server"] = urlunsplit(parts._replace(netloc=f"{master_address}:{port}"))
    return yaml.safe_dump(kubeconfig, sort_keys=False)


def fetch_admin_kubeconfig(cluster_cfg: ClusterConfig, dest: Path) -> Path:
    """Copy ``admin.conf`` from the master node and rewrite its server address.

    Args:
        cluster_cfg: Cluster configuration with master address and SSH credentials.
        dest: Local path for the kubeconfig.

    Returns:
        The local kubeconfig path.

    Raises:
        InfrastructureError: If the copy fails or the file cannot be rewritten.
    """
    console.print(f"[yellow]\u2139\ufe0f  Fetching admin kubeconfig from {cluster_cfg.master_address}...[/yellow]")
    source = f"{cluster_cfg.ssh_user}@{cluster_cfg.master_address}:{REMOTE_ADMIN_CONF_PATH}"
    try:
        sh.sshpass("-p", cluster_cfg.ssh_password, "scp", source, str(dest))
    except sh.ErrorReturnCode as err:
        raise InfrastructureError(f"Failed to copy {source}: exit code {err.exit_code}") from err

    try:
        text = dest.read_text(encoding="utf-8")
        dest.write_text(
            rewrite_server_address(text, cluster_cfg.master_address, cluster_cfg.api_server_port),
            encoding="utf-8",
        )
    except OSError as err:
        raise InfrastructureError(f"Cannot rewrite {dest}: {err}") from err
    console.print(f"[green]  \u2713 Saved to {dest}[/green]")
    return dest


@contextmanager
def admin_kubeconfig(cluster_cfg: ClusterConfig, dest: Path, keep: bool = False) -> Iterator[Path]:
    """Fetch the admin kubeconfig for the duration of the block, then remove it."""
    with transient_file(dest, keep=keep) as path:
        yield fetch_admin_kubeconfig(cluster_cfg, path)
