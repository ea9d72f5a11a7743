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

"""Single-phase scale subcommands (down, up)."""

from __future__ import annotations

from pathlib import Path

import typer

from cluster_acceptance.commands.run_cmd import exit_on_failures
from cluster_acceptance.config import RunOptions, display_config, resolve_config, validate_options
from cluster_acceptance.constants import REPORT_FILE
from cluster_acceptance.orchestrator import run_acceptance

app = typer.Typer(help="Run a single scale phase against an existing cluster.")


def run_single_phase(
    kubeconfig: Path | None,
    report: Path,
    timeout: int | None,
    interval: int | None,
    hostname: str | None,
    node_ip: str | None,
    **phases: bool,
) -> None:
    """Run the enabled phases of *phases* against an existing cluster and exit on failure."""
    cluster_cfg, poll_cfg, node_cfg = resolve_config(
        kubeconfig=kubeconfig,
        poll_timeout=timeout,
        poll_interval=interval,
        hostname=hostname,
        node_ip=node_ip,
    )
    options = RunOptions(
        create_cluster=False,
        fetch_credentials=kubeconfig is None,
        check_deploy=False,
        check_components=False,
        scale_down=phases.get("scale_down", False),
        scale_up=phases.get("scale_up", False),
        delete=phases.get("delete", False),
        report_path=report,
    )
    validate_options(options, cluster_cfg, node_cfg)
    display_config(options, cluster_cfg, poll_cfg, node_cfg)
    exit_on_failures(run_acceptance(options, cluster_cfg, poll_cfg, node_cfg))


_KUBECONFIG = typer.Option(None, "--kubeconfig", help="Existing kubeconfig (skips fetching admin.conf)")
_REPORT = typer.Option(Path(REPORT_FILE), "--report", help="Report file")
_TIMEOUT = typer.Option(None, "--timeout", min=0, help="Convergence timeout in seconds")
_INTERVAL = typer.Option(None, "--interval", min=1, help="Poll interval in seconds")
_HOSTNAME = typer.Option(None, "--hostname", help="Scale node hostname")
_NODE_IP = typer.Option(None, "--node-ip", help="Scale node address")


@app.command()
def down(
    kubeconfig: Path | None = _KUBECONFIG,
    report: Path = _REPORT,
    timeout: int | None = _TIMEOUT,
    interval: int | None = _INTERVAL,
    hostname: str | None = _HOSTNAME,
    node_ip: str | None = _NODE_IP,
) -> None:
    """Remove the scale node from the cluster and wait for it to disappear."""
    run_single_phase(kubeconfig, report, timeout, interval, hostname, node_ip, scale_down=True)


@app.command()
def up(
    kubeconfig: Path | None = _KUBECONFIG,
    report: Path = _REPORT,
    timeout: int | None = _TIMEOUT,
    interval: int | None = _INTERVAL,
    hostname: str | None = _HOSTNAME,
    node_ip: str | None = _NODE_IP,
) -> None:
    """Add the scale node to the cluster and wait for it to join."""
    run_single_phase(kubeconfig, report, timeout, interval, hostname, node_ip, scale_up=True)

