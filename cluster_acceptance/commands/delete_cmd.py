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

"""Delete subcommand."""

from __future__ import annotations

from pathlib import Path

import typer

from cluster_acceptance.commands.scale_cmd import run_single_phase
from cluster_acceptance.constants import REPORT_FILE


def delete(
    kubeconfig: Path | None = typer.Option(
        None, "--kubeconfig", help="Existing kubeconfig (skips fetching admin.conf)"),
    report: Path = typer.Option(
        Path(REPORT_FILE), "--report", help="Report file"),
) -> None:
    """Lift delete protection and delete the cluster from its manifest."""
    run_single_phase(kubeconfig, report, None, None, None, None, delete=True)
