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

"""Phase sequencing: deploy check, component check, scale-down, scale-up, delete."""

from __future__ import annotations

import time
from collections.abc import Callable
from contextlib import ExitStack
from enum import Enum
from pathlib import Path

from rich.panel import Panel

from cluster_acceptance import console, logger
from cluster_acceptance.capture import CaptureLog
from cluster_acceptance.checks import (
    any_node_not_ready,
    bootstrap_node_lines,
    node_absent,
    node_present,
    not_ready_node_lines,
    unhealthy_pod_lines,
)
from cluster_acceptance.cluster import admin_kubeconfig, create_cluster, settle
from cluster_acceptance.config import ClusterConfig, PollConfig, RunOptions, ScaleNodeConfig
from cluster_acceptance.constants import (
    ADMIN_CONF_FILE,
    CAPTURE_LOG_FILE,
    DEFAULT_KUBE_CONTEXT,
    MARK_FAILED,
    MARK_SUCCESS,
    NODE_TABLE_HEADER,
    POD_TABLE_HEADER,
    SECTION_COMPONENTS,
    SECTION_DELETE,
    SECTION_DEPLOY,
    SECTION_SCALE_DOWN,
    SECTION_SCALE_UP,
    SPEC_DOCUMENT_FILE,
)
from cluster_acceptance.kube import KubeClient
from cluster_acceptance.models import NodeEntry
from cluster_acceptance.patcher import ClusterSpecPatcher
from cluster_acceptance.poller import ConvergencePoller, PollOutcome
from cluster_acceptance.report import ReportWriter
from cluster_acceptance.status import render_node_table, render_pod_table
from cluster_acceptance.utils import require_command, transient_file


class Phase(str, Enum):
    """States of a run, entered strictly in declaration order."""

    CREATED = "Created"
    NODES_FETCHED = "NodesFetched"
    DEPLOY_CHECKED = "DeployChecked"
    PODS_FETCHED = "PodsFetched"
    COMPONENT_CHECKED = "ComponentChecked"
    SCALED_DOWN = "ScaledDown"
    SCALED_UP = "ScaledUp"
    DELETED = "Deleted"
    CLEANED_UP = "CleanedUp"


class PhaseResult(str, Enum):
    """Recorded outcome of one report section."""

    SUCCESS = "success"
    FAILED = "failed"
    EMPTY = "empty"


_PHASE_ORDER = list(Phase)


class AcceptanceRun:
    """Drives the test phases of one run against an already reachable cluster.

    Infrastructure errors raised by collaborators propagate and end the run.
    A convergence timeout is recorded as a failed section and the next
    phase still runs.

    Args:
        client: kubectl wrapper for snapshots and deletion.
        patcher: BKECluster patcher for the scale and delete phases.
        capture: Captured-output log holding bootstrap output and snapshots.
        report: Report the phase outcomes are written to.
        cluster_cfg: Target cluster configuration.
        poll_cfg: Poll cadence and settling delays.
        node_cfg: Node removed and re-added by the scale phases.
        sleep: Sleep function for settling and polling.
    """

    def __init__(
        self,
        client: KubeClient,
        patcher: ClusterSpecPatcher,
        capture: CaptureLog,
        report: ReportWriter,
        cluster_cfg: ClusterConfig,
        poll_cfg: PollConfig,
        node_cfg: ScaleNodeConfig,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.patcher = patcher
        self.capture = capture
        self.report = report
        self.cluster_cfg = cluster_cfg
        self.poll_cfg = poll_cfg
        self.node_cfg = node_cfg
        self._sleep = sleep
        self.state = Phase.CREATED
        self.removed_entry: NodeEntry | None = None
        self.results: dict[str, PhaseResult] = {}
        self.poller = ConvergencePoller(
            capture=capture,
            timeout=poll_cfg.poll_timeout,
            interval=poll_cfg.poll_interval,
            sleep=sleep,
        )

    def _expect(self, phase: Phase) -> None:
        if _PHASE_ORDER.index(phase) < _PHASE_ORDER.index(self.state):
            raise RuntimeError(f"cannot move from {self.state.value} back to {phase.value}")

    def _advance(self, phase: Phase) -> None:
        self._expect(phase)
        logger.info("Phase %s -> %s", self.state.value, phase.value)
        self.state = phase

    def _record(self, section: str, result: PhaseResult) -> PhaseResult:
        self.results[section] = result
        return result

    # ========================================================================
    # Snapshots
    # ========================================================================

    def node_snapshot(self) -> str:
        return render_node_table(self.client.list_nodes())

    def pod_snapshot(self) -> str:
        return render_pod_table(self.client.list_pods())

    # ========================================================================
    # Checks
    # ========================================================================

    def fetch_nodes(self) -> None:
        """Append the current node table to the capture log."""
        self._expect(Phase.NODES_FETCHED)
        self.capture.write("\n" + self.node_snapshot())
        self._advance(Phase.NODES_FETCHED)

    def check_deploy(self) -> PhaseResult:
        """Fail the section if bootstrap or the node table reports an unready node.

        On failure the node table header is written, followed by every
        ``[bke-node]`` bootstrap line and every node row that is not Ready.
        """
        self._expect(Phase.DEPLOY_CHECKED)
        console.print(Panel.fit("Cluster deploy test", style="bold blue"))
        self.report.begin(SECTION_DEPLOY)
        text = self.capture.read_text()
        unready_rows = not_ready_node_lines(text)
        if not any_node_not_ready(text) and not unready_rows:
            self.report.mark(MARK_SUCCESS)
            result = PhaseResult.SUCCESS
        else:
            self.report.write(NODE_TABLE_HEADER)
            for line in bootstrap_node_lines(text) + unready_rows:
                self.report.write(line)
            self.report.end()
            result = PhaseResult.FAILED
        self._advance(Phase.DEPLOY_CHECKED)
        return self._record(SECTION_DEPLOY, result)

    def fetch_pods(self) -> None:
        """Append the current pod table of all namespaces to the capture log."""
        self._expect(Phase.PODS_FETCHED)
        self.capture.write(self.pod_snapshot())
        self._advance(Phase.PODS_FETCHED)

    def check_components(self) -> PhaseResult:
        """Fail the section if any pod is neither Running nor Succeeded."""
        self._expect(Phase.COMPONENT_CHECKED)
        console.print(Panel.fit("Component install test", style="bold blue"))
        self.report.begin(SECTION_COMPONENTS)
        unhealthy = unhealthy_pod_lines(self.capture.read_text())
        if unhealthy:
            self.report.write(POD_TABLE_HEADER)
            for line in unhealthy:
                self.report.write(line)
            self.report.end()
            result = PhaseResult.FAILED
        else:
            self.report.mark(MARK_SUCCESS)
            result = PhaseResult.SUCCESS
        self._advance(Phase.COMPONENT_CHECKED)
        return self._record(SECTION_COMPONENTS, result)

    # ========================================================================
    # Scale
    # ========================================================================

    def _record_poll(self, section: str, outcome: PollOutcome) -> PhaseResult:
        if outcome.converged:
            self.report.mark(MARK_SUCCESS)
            return self._record(section, PhaseResult.SUCCESS)
        self.report.mark(MARK_FAILED)
        if outcome.empty_snapshot:
            return self._record(section, PhaseResult.EMPTY)
        return self._record(section, PhaseResult.FAILED)

    def scale_down(self) -> PhaseResult:
        """Remove the scale node from the BKECluster node list and wait for it to leave."""
        self._expect(Phase.SCALED_DOWN)
        hostname = self.node_cfg.hostname
        console.print(Panel.fit(f"Cluster scale-down test ({hostname})", style="bold blue"))
        self.report.begin(SECTION_SCALE_DOWN)
        removed = self.patcher.remove_node(hostname)
        if removed is not None:
            self.removed_entry = NodeEntry.from_spec(removed)
        settle(self.poll_cfg.scale_settle, "scale-down settling", sleep=self._sleep)
        outcome = self.poller.poll(self.node_snapshot, node_absent(hostname), f"scale-down of {hostname}")
        result = self._record_poll(SECTION_SCALE_DOWN, outcome)
        self._advance(Phase.SCALED_DOWN)
        return result

    def scale_up(self) -> PhaseResult:
        """Add the scale node back to the BKECluster node list and wait for it to join.

        The entry removed by the scale-down phase is re-added as it was, with
        its stored credentials. Without one, the entry is built from the
        scale node configuration.
        """
        self._expect(Phase.SCALED_UP)
        entry = self.removed_entry or self.node_cfg.to_entry()
        console.print(Panel.fit(f"Cluster scale-up test ({entry.hostname})", style="bold blue"))
        self.report.begin(SECTION_SCALE_UP)
        self.patcher.add_node(entry)
        settle(self.poll_cfg.scale_settle, "scale-up settling", sleep=self._sleep)
        outcome = self.poller.poll(self.node_snapshot, node_present(entry.hostname), f"scale-up of {entry.hostname}")
        result = self._record_poll(SECTION_SCALE_UP, outcome)
        self._advance(Phase.SCALED_UP)
        return result

    # ========================================================================
    # Delete
    # ========================================================================

    def delete(self) -> PhaseResult:
        """Lift delete protection, then delete the cluster from its manifest."""
        self._expect(Phase.DELETED)
        console.print(Panel.fit(f"Cluster delete test ({self.cluster_cfg.cluster_name})", style="bold blue"))
        self.report.begin(SECTION_DELETE)
        self.patcher.disable_delete_protection()
        output = self.client.delete_file(self.cluster_cfg.manifest)
        console.print(output.rstrip(), markup=False, highlight=False)
        self.report.mark(MARK_SUCCESS)
        self._advance(Phase.DELETED)
        return self._record(SECTION_DELETE, PhaseResult.SUCCESS)

    def run(self, options: RunOptions) -> dict[str, PhaseResult]:
        """Run the phases enabled in *options*, in order.

        Returns:
            Mapping of report section title to its outcome.
        """
        if options.check_deploy:
            self.fetch_nodes()
            self.check_deploy()
        if options.check_components:
            self.fetch_pods()
            self.check_components()
        if options.scale_down:
            self.scale_down()
        if options.scale_up:
            self.scale_up()
        if options.delete:
            self.delete()
        return self.results

    def finish(self) -> None:
        """Mark the run as cleaned up once its artifacts are released."""
        self._advance(Phase.CLEANED_UP)


# ============================================================================
# Public API
# ============================================================================

def _check_prerequisites(options: RunOptions) -> None:
    prereqs = ["kubectl"]
    if options.create_cluster:
        prereqs.append("bke")
    if options.fetch_credentials:
        prereqs.append("sshpass")
    console.print(Panel.fit("Checking prerequisites", style="bold blue"))
    for cmd in prereqs:
        require_command(cmd)
    console.print("[green]\u2705 All required tools are available[/green]")


def run_acceptance(
    options: RunOptions,
    cluster_cfg: ClusterConfig,
    poll_cfg: PollConfig,
    node_cfg: ScaleNodeConfig,
    workdir: Path = Path("."),
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, PhaseResult]:
    """Run a full acceptance test: bootstrap, checks, scale, delete, cleanup.

    Transient artifacts (capture log, fetched kubeconfig, BKECluster
    document) are removed on exit, also when a phase raises, unless
    ``options.keep_artifacts`` is set. The report file is always kept.

    Args:
        options: Which phases to run and where to write the report.
        cluster_cfg: Target cluster configuration.
        poll_cfg: Poll cadence and settling delays.
        node_cfg: Node removed and re-added by the scale phases.
        workdir: Directory for transient artifacts.
        sleep: Sleep function for settling and polling.

    Returns:
        Mapping of report section title to its outcome.

    Raises:
        InfrastructureError: If any infrastructure step fails.
    """
    _check_prerequisites(options)
    keep = options.keep_artifacts

    acceptance: AcceptanceRun | None = None
    try:
        with ExitStack() as stack:
            report = stack.enter_context(ReportWriter(options.report_path))
            capture_path = stack.enter_context(transient_file(workdir / CAPTURE_LOG_FILE, keep=keep))
            capture = stack.enter_context(CaptureLog(capture_path))

            if options.create_cluster:
                create_cluster(cluster_cfg, capture)
                settle(poll_cfg.post_create_delay, "post-creation settling", sleep=sleep)

            kubeconfig = cluster_cfg.kubeconfig
            context = cluster_cfg.kube_context
            if options.fetch_credentials:
                kubeconfig = stack.enter_context(
                    admin_kubeconfig(cluster_cfg, workdir / ADMIN_CONF_FILE, keep=keep)
                )
                context = context or DEFAULT_KUBE_CONTEXT

            client = KubeClient(kubeconfig=kubeconfig, context=context)
            patcher = ClusterSpecPatcher(client, cluster_cfg, workdir / SPEC_DOCUMENT_FILE, keep=keep)
            acceptance = AcceptanceRun(
                client, patcher, capture, report, cluster_cfg, poll_cfg, node_cfg, sleep=sleep
            )
            results = acceptance.run(options)
    finally:
        if acceptance is not None:
            acceptance.finish()

    console.print(f"[green]\u2705 Report written to {options.report_path}[/green]")
    return results
