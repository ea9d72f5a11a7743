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

"""Configuration classes, run options, and config validation/display."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from cluster_acceptance import console, logger
from cluster_acceptance.constants import (
    DEFAULT_API_SERVER_PORT,
    DEFAULT_CLUSTER_MANIFEST,
    DEFAULT_CLUSTER_NAME,
    DEFAULT_CLUSTER_NAMESPACE,
    DEFAULT_MASTER_ADDRESS,
    DEFAULT_NODE_LIST_PATH,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_TIMEOUT_SECONDS,
    DEFAULT_POST_CREATE_DELAY_SECONDS,
    DEFAULT_RESOURCE_KIND,
    DEFAULT_SCALE_HOSTNAME,
    DEFAULT_SCALE_IP,
    DEFAULT_SCALE_PORT,
    DEFAULT_SCALE_ROLE,
    DEFAULT_SCALE_SETTLE_SECONDS,
    DEFAULT_SCALE_USERNAME,
    DEFAULT_SSH_USER,
    REPORT_FILE,
)
from cluster_acceptance.models import NodeEntry


# ============================================================================
# Configuration classes
# ============================================================================

class ClusterConfig(BaseSettings):
    """Target cluster configuration, auto-loaded from BKE_* env vars.

    Attributes:
        cluster_name: Name of the cluster custom resource.
        namespace: Namespace holding the cluster custom resource.
        resource_kind: kubectl resource kind of the BKECluster resource.
        manifest: Path to the manifest used for creation and deletion.
        master_address: Address of the master node serving the API.
        api_server_port: Port of the Kubernetes API server on the master.
        ssh_user: User for copying credentials from the master.
        ssh_password: Password for copying credentials from the master.
        kube_context: Context to select, or None for the kubeconfig's current
            context. The fetched admin.conf falls back to the BKE admin context.
        kubeconfig: Existing kubeconfig to use instead of fetching one.
        node_list_path: Dotted key path of the node list in the BKECluster resource.
    """

    model_config = SettingsConfigDict(env_prefix="BKE_", extra="ignore")

    cluster_name: str = DEFAULT_CLUSTER_NAME
    namespace: str = DEFAULT_CLUSTER_NAMESPACE
    resource_kind: str = DEFAULT_RESOURCE_KIND
    manifest: Path = Path(DEFAULT_CLUSTER_MANIFEST)
    master_address: str = DEFAULT_MASTER_ADDRESS
    api_server_port: int = Field(default=DEFAULT_API_SERVER_PORT, ge=1, le=65535)
    ssh_user: str = DEFAULT_SSH_USER
    ssh_password: str = ""
    kube_context: str | None = None
    kubeconfig: Path | None = None
    node_list_path: str = Field(default=DEFAULT_NODE_LIST_PATH, pattern=r"^[\w-]+(\.[\w-]+)*$")


class PollConfig(BaseSettings):
    """Convergence poll cadence, auto-loaded from BKE_* env vars.

    Attributes:
        poll_timeout: Total seconds a convergence check may take.
        poll_interval: Seconds between two snapshots.
        scale_settle: Seconds to wait after a scale patch before polling.
        post_create_delay: Seconds to wait after cluster creation.
    """

    model_config = SettingsConfigDict(env_prefix="BKE_", extra="ignore")

    poll_timeout: int = Field(default=DEFAULT_POLL_TIMEOUT_SECONDS, ge=0)
    poll_interval: int = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, ge=1)
    scale_settle: int = Field(default=DEFAULT_SCALE_SETTLE_SECONDS, ge=0)
    post_create_delay: int = Field(default=DEFAULT_POST_CREATE_DELAY_SECONDS, ge=0)


class ScaleNodeConfig(BaseSettings):
    """Node removed and re-added by the scale tests, from BKE_SCALE_* env vars.

    Attributes:
        hostname: Hostname of the node, as listed by the cluster.
        ip: Address of the node.
        password: Encrypted SSH password as stored in the BKECluster node list.
        port: SSH port, kept as a string like the BKECluster node list does.
        username: SSH user.
        role: Role assigned to the node.
    """

    model_config = SettingsConfigDict(env_prefix="BKE_SCALE_", extra="ignore")

    hostname: str = DEFAULT_SCALE_HOSTNAME
    ip: str = DEFAULT_SCALE_IP
    password: str = ""
    port: str = Field(default=DEFAULT_SCALE_PORT, pattern=r"^\d+$")
    username: str = DEFAULT_SCALE_USERNAME
    role: str = DEFAULT_SCALE_ROLE

    def to_entry(self) -> NodeEntry:
        """Build the node-list entry inserted by the scale-up patch."""
        return NodeEntry(
            hostname=self.hostname,
            ip=self.ip,
            password=self.password,
            port=self.port,
            role=[self.role],
            username=self.username,
        )


# ============================================================================
# Run options
# ============================================================================

@dataclass(frozen=True)
class RunOptions:
    """What a single acceptance run does.

    Attributes:
        create_cluster: Whether to bootstrap the cluster first.
        fetch_credentials: Whether to copy admin.conf from the master node.
        check_deploy: Whether to run the deploy check.
        check_components: Whether to run the component check.
        scale_down: Whether to run the scale-down phase.
        scale_up: Whether to run the scale-up phase.
        delete: Whether to run the delete phase.
        keep_artifacts: Whether to keep transient files after the run.
        report_path: File the test report is written to.
    """

    create_cluster: bool = True
    fetch_credentials: bool = True
    check_deploy: bool = True
    check_components: bool = True
    scale_down: bool = True
    scale_up: bool = True
    delete: bool = True
    keep_artifacts: bool = False
    report_path: Path = Path(REPORT_FILE)

    @property
    def scale(self) -> bool:
        return self.scale_down or self.scale_up


# ============================================================================
# Config resolution
# ============================================================================

def resolve_config(
    kubeconfig: Path | None = None,
    manifest: Path | None = None,
    poll_timeout: int | None = None,
    poll_interval: int | None = None,
    hostname: str | None = None,
    node_ip: str | None = None,
) -> tuple[ClusterConfig, PollConfig, ScaleNodeConfig]:
    """Merge CLI overrides, environment variables, and defaults into config objects.

    Resolution priority: CLI arguments > BKE_* environment variables > defaults.

    Args:
        kubeconfig: Existing kubeconfig override, or None.
        manifest: Cluster manifest override, or None.
        poll_timeout: Convergence timeout override in seconds, or None.
        poll_interval: Poll interval override in seconds, or None.
        hostname: Scale node hostname override, or None.
        node_ip: Scale node address override, or None.

    Returns:
        Tuple of (ClusterConfig, PollConfig, ScaleNodeConfig).
    """
    cluster_cfg = ClusterConfig()
    poll_cfg = PollConfig()
    node_cfg = ScaleNodeConfig()

    cluster_overrides: dict = {}
    if kubeconfig is not None:
        cluster_overrides["kubeconfig"] = kubeconfig
    if manifest is not None:
        cluster_overrides["manifest"] = manifest
    if cluster_overrides:
        cluster_cfg = cluster_cfg.model_copy(update=cluster_overrides)

    poll_overrides: dict = {}
    if poll_timeout is not None:
        poll_overrides["poll_timeout"] = poll_timeout
    if poll_interval is not None:
        poll_overrides["poll_interval"] = poll_interval
    if poll_overrides:
        poll_cfg = poll_cfg.model_copy(update=poll_overrides)

    node_overrides: dict = {}
    if hostname is not None:
        node_overrides["hostname"] = hostname
    if node_ip is not None:
        node_overrides["ip"] = node_ip
    if node_overrides:
        node_cfg = node_cfg.model_copy(update=node_overrides)

    return cluster_cfg, poll_cfg, node_cfg


# ============================================================================
# Config validation
# ============================================================================

def validate_options(
    options: RunOptions,
    cluster_cfg: ClusterConfig,
    node_cfg: ScaleNodeConfig | None = None,
) -> None:
    """Validate option combinations against the resolved config.

    Args:
        options: Resolved run options.
        cluster_cfg: Resolved cluster configuration.
        node_cfg: Resolved scale node configuration, checked when scale-up
            cannot reuse the entry removed by scale-down.

    Raises:
        typer.BadParameter: If credentials cannot be obtained.
    """
    if options.fetch_credentials and not cluster_cfg.ssh_password:
        raise typer.BadParameter(
            "BKE_SSH_PASSWORD must be set to fetch admin.conf (or pass --kubeconfig)"
        )
    if not options.fetch_credentials and cluster_cfg.kubeconfig is None:
        logger.warning("No kubeconfig given; kubectl will use its default configuration")
    if options.scale_up and not options.scale_down and node_cfg is not None and not node_cfg.password:
        raise typer.BadParameter(
            "BKE_SCALE_PASSWORD must be set to add a node without removing it first"
        )
    if options.create_cluster and not cluster_cfg.manifest.exists():
        raise typer.BadParameter(f"Cluster manifest not found: {cluster_cfg.manifest}")
    if options.delete and not options.create_cluster and not cluster_cfg.manifest.exists():
        logger.warning("Cluster manifest %s not found; delete phase will fail", cluster_cfg.manifest)


# ============================================================================
# Display
# ============================================================================

def display_config(
    options: RunOptions,
    cluster_cfg: ClusterConfig,
    poll_cfg: PollConfig,
    node_cfg: ScaleNodeConfig,
) -> None:
    """Print only config relevant to the requested phases.

    Args:
        options: Resolved run options controlling what to display.
        cluster_cfg: Target cluster configuration.
        poll_cfg: Convergence poll cadence.
        node_cfg: Scale test node configuration.
    """
    console.print(Panel.fit("Configuration", style="bold blue"))

    console.print("[yellow]Cluster:[/yellow]")
    console.print(f"  cluster_name    : {cluster_cfg.cluster_name}")
    console.print(f"  namespace       : {cluster_cfg.namespace}")
    console.print(f"  manifest        : {cluster_cfg.manifest}")
    console.print(f"  master_address  : {cluster_cfg.master_address}")
    console.print(f"  kubeconfig      : {cluster_cfg.kubeconfig or '(fetched from master)'}")

    console.print("[yellow]Polling:[/yellow]")
    console.print(f"  poll_timeout    : {poll_cfg.poll_timeout}s")
    console.print(f"  poll_interval   : {poll_cfg.poll_interval}s")

    if options.scale:
        console.print("[yellow]Scale node:[/yellow]")
        console.print(f"  hostname        : {node_cfg.hostname}")
        console.print(f"  ip              : {node_cfg.ip}")
        console.print(f"  node_list_path  : {cluster_cfg.node_list_path}")

    console.print(f"[yellow]Report:[/yellow] {options.report_path}")
