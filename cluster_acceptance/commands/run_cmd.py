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

"""Full acceptance run subcommand."""

from __future__ import annotations

from pathlib import Path

import typer

from cluster_acceptance import console
from cluster_acceptance.config import RunOptions, display_config, resolve_config, validate_options
from cluster_acceptance.constants import REPORT_FILE
from cluster_acceptance.orchestrator import PhaseResult, run_acceptance


def exit_on_failures(results: dict[str, PhaseResult]) -> None:
    """Print a summary and exit with code 2 if any section failed."""
    failed = [section for section, result in results.items() if result is not PhaseResult.SUCCESS]
    for section, result in results.items():
        colour = "green" if result is PhaseResult.SUCCESS else "red"
        console.print(f"  [{colour}]{result.value:<8}[/{colour}] {section}")
    if failed:
        raise typer.Exit(code=2)


def run(
    skip_create: bool = typer.Option(
        False, "--skip-create", help="Use an existing cluster instead of running bke cluster create"),
    skip_deploy_check: bool = typer.Option(
        False, "--skip-deploy-check", help="Skip the deploy check"),
    skip_component_check: bool = typer.Option(
        False, "--skip-component-check", help="Skip the component check"),
    skip_scale: bool = typer.Option(
        False, "--skip-scale", help="Skip the scale-down and scale-up phases"),
    skip_delete: bool = typer.Option(
        False, "--skip-delete", help="Keep the cluster at the end of the run"),
    keep_artifacts: bool = typer.Option(
        False, "--keep-artifacts", help="Keep logs.yaml, cluster.yaml and admin.conf"),
    kubeconfig: Path | None = typer.Option(
        None, "--kubeconfig", help="Existing kubeconfig (skips fetching admin.conf)"),
    manifest: Path | None = typer.Option(
        None, "--manifest", help="Cluster manifest (overrides BKE_MANIFEST)"),
    report: Path = typer.Option(
        Path(REPORT_FILE), "--report", help="Report file"),
    timeout: int | None = typer.Option(
        None, "--timeout", min=0, help="Convergence timeout in seconds (overrides BKE_POLL_TIMEOUT)"),
    interval: int | None = typer.Option(
        None, "--interval", min=1, help="Poll interval in seconds (overrides BKE_POLL_INTERVAL)"),
    hostname: str | None = typer.Option(
        None, "--hostname", help="Scale node hostname (overrides BKE_SCALE_HOSTNAME)"),
    node_ip: str | None = typer.Option(
        None, "--node-ip", help="Scale node address (overrides BKE_SCALE_IP)"),
) -> None:
    """Run the full lifecycle acceptance test.

    Creates the cluster, checks nodes and components, scales the scale node
    down and back up, then deletes the cluster. Exits 2 when a phase failed.
    """
    cluster_cfg, poll_cfg, node_cfg = resolve_config(
        kubeconfig=kubeconfig,
        manifest=manifest,
        poll_timeout=timeout,
        poll_interval=interval,
        hostname=hostname,
        node_ip=node_ip,
    )
    options = RunOptions(
        create_cluster=not skip_create,
        fetch_credentials=kubeconfig is None,
        check_deploy=not skip_deploy_check,
        check_components=not skip_component_check,
        scale_down=not skip_scale,
        scale_up=not skip_scale,
        delete=not skip_delete,
        keep_artifacts=keep_artifacts,
        report_path=report,
    )
    validate_options(options, cluster_cfg, node_cfg)
    display_config(options, cluster_cfg, poll_cfg, node_cfg)

    results = run_acceptance(options, cluster_cfg, poll_cfg, node_cfg)
    exit_on_failures(results)
