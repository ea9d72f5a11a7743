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

"""Snapshot subcommands (nodes, pods)."""

from __future__ import annotations

from pathlib import Path

import typer

from cluster_acceptance import console
from cluster_acceptance.kube import KubeClient
from cluster_acceptance.status import render_node_table, render_pod_table

app = typer.Typer(help="Print classified cluster snapshots.")


def _client(kubeconfig: Path | None, context: str | None) -> KubeClient:
    return KubeClient(kubeconfig=kubeconfig, context=context)


@app.command()
def nodes(
    kubeconfig: Path | None = typer.Option(None, "--kubeconfig", help="kubeconfig file"),
    context: str | None = typer.Option(None, "--context", help="kubeconfig context"),
) -> None:
    """Print the node table: name, status, roles, age, version."""
    console.out(render_node_table(_client(kubeconfig, context).list_nodes()), end="", highlight=False)


@app.command()
def pods(
    kubeconfig: Path | None = typer.Option(None, "--kubeconfig", help="kubeconfig file"),
    context: str | None = typer.Option(None, "--context", help="kubeconfig context"),
    namespace: str | None = typer.Option(None, "--namespace", "-n", help="Namespace (default: all)"),
) -> None:
    """Print the pod table: namespace, name, ready, status, restarts, age."""
    client = _client(kubeconfig, context)
    console.out(render_pod_table(client.list_pods(namespace)), end="", highlight=False)
