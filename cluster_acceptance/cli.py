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

"""
cli.py - Lifecycle acceptance tester for BKE clusters.

Subcommands:
    run        Full lifecycle test (create, deploy check, component check,
               scale down, scale up, delete)
    snapshot   Print classified node or pod tables
    scale      Run a single scale phase (down, up)
    delete     Delete the cluster

Environment Variables:
    BKE_* and BKE_SCALE_* variables override the defaults, e.g.
    BKE_MASTER_ADDRESS, BKE_SSH_PASSWORD, BKE_POLL_TIMEOUT, BKE_SCALE_HOSTNAME.

Examples:
    # Full lifecycle test, report in test.yaml
    cluster-acceptance run

    # Test an existing cluster without creating or deleting it
    cluster-acceptance run --skip-create --skip-delete --kubeconfig ~/.kube/config

    # Show the node table
    cluster-acceptance snapshot nodes --kubeconfig ~/.kube/config
"""

from __future__ import annotations

import logging
import sys

import typer

from cluster_acceptance import console
from cluster_acceptance.commands import delete_cmd, run_cmd, scale_cmd, snapshot_cmd

app = typer.Typer(
    help="Lifecycle acceptance tester for BKE clusters.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.command("run")(run_cmd.run)
app.command("delete")(delete_cmd.delete)
app.add_typer(snapshot_cmd.app, name="snapshot")
app.add_typer(scale_cmd.app, name="scale")


def main() -> None:
    """Console script entry point; infrastructure errors exit with code 1."""
    try:
        app()
    except Exception as e:
        console.print(f"[red]\u274c {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
