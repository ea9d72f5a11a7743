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

"""Structured edits of the BKECluster document and their submission."""

from __future__ import annotations

import copy
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from rich.panel import Panel

from cluster_acceptance import console, logger
from cluster_acceptance.config import ClusterConfig
from cluster_acceptance.constants import (
    ANNOTATION_DELETED_NODES,
    ANNOTATION_PREFIX,
    DEFAULT_NODE_LIST_PATH,
    DELETE_PROTECTION_ANNOTATIONS,
    SERVER_MANAGED_METADATA,
)
from cluster_acceptance.kube import KubeClient
from cluster_acceptance.models import NodeEntry
from cluster_acceptance.utils import InfrastructureError, transient_file

SpecDocument = dict[str, Any]


class PatchError(ValueError):
    """The BKECluster document does not have the structure an edit expects."""


# ============================================================================
# Document helpers
# ============================================================================

def _node_list(document: SpecDocument, path: str) -> list[dict[str, Any]]:
    """Return the node list found at the dotted key *path*.

    Raises:
        PatchError: If a key on the path is missing or the value is not a list.
    """
    node: Any = document
    for key in path.split("."):
        if not isinstance(node, dict) or key not in node:
            raise PatchError(f"node list '{path}' not found (missing '{key}')")
        node = node[key]
    if not isinstance(node, list):
        raise PatchError(f"'{path}' is a {type(node).__name__}, not a list")
    return node


def _annotations(document: SpecDocument) -> dict[str, Any]:
    metadata = document.get("metadata")
    if not isinstance(metadata, dict):
        metadata = document["metadata"] = {}
    annotations = metadata.get("annotations")
    if not isinstance(annotations, dict):
        annotations = metadata["annotations"] = {}
    return annotations


def annotation_key(flag: str) -> str:
    """Qualify a short annotation name (``ignore-namespace-delete``) with the BKE prefix."""
    return flag if "/" in flag else f"{ANNOTATION_PREFIX}{flag}"


def find_node(
    document: SpecDocument,
    hostname: str,
    node_list_path: str = DEFAULT_NODE_LIST_PATH,
) -> dict[str, Any] | None:
    """Return a copy of the node-list entry for *hostname*, or None."""
    try:
        nodes = _node_list(document, node_list_path)
    except PatchError:
        return None
    for entry in nodes:
        if isinstance(entry, dict) and entry.get("hostname") == hostname:
            return copy.deepcopy(entry)
    return None


# ============================================================================
# Edits
# ============================================================================

def remove_node(
    document: SpecDocument,
    hostname: str,
    node_list_path: str = DEFAULT_NODE_LIST_PATH,
    strict: bool = True,
) -> SpecDocument:
    """Remove a node entry and record its address as appointed for deletion.

    The address is appended to the ``appointment-deleted-nodes`` annotation,
    which tells the cluster controller to drain and decommission the node.

    Args:
        document: BKECluster document; left untouched.
        hostname: Hostname of the entry to remove.
        node_list_path: Dotted key path of the node list.
        strict: Raise on a missing entry instead of returning an unchanged copy.

    Returns:
        The edited copy of the document.

    Raises:
        PatchError: In strict mode, if the node list or the entry is missing.
    """
    edited = copy.deepcopy(document)
    try:
        nodes = _node_list(edited, node_list_path)
        index = next(i for i, entry in enumerate(nodes) if entry.get("hostname") == hostname)
    except (PatchError, StopIteration) as err:
        if strict:
            raise PatchError(f"no node '{hostname}' in {node_list_path}") from err
        logger.warning("Node %s not found in %s; document left unchanged", hostname, node_list_path)
        return edited

    address = str(nodes.pop(index).get("ip", ""))
    annotations = _annotations(edited)
    pending = [a for a in str(annotations.get(ANNOTATION_DELETED_NODES) or "").split(",") if a]
    if address and address not in pending:
        pending.append(address)
    annotations[ANNOTATION_DELETED_NODES] = ",".join(pending)
    return edited


def add_node(
    document: SpecDocument,
    entry: NodeEntry,
    node_list_path: str = DEFAULT_NODE_LIST_PATH,
    strict: bool = True,
) -> SpecDocument:
    """Append a node entry to the node list.

    Args:
        document: BKECluster document; left untouched.
        entry: Node to add.
        node_list_path: Dotted key path of the node list.
        strict: Raise on a missing list or duplicate hostname instead of
            returning an unchanged copy.

    Returns:
        The edited copy of the document.

    Raises:
        PatchError: In strict mode, if the list is missing or already holds the hostname.
    """
    edited = copy.deepcopy(document)
    try:
        nodes = _node_list(edited, node_list_path)
        if any(existing.get("hostname") == entry.hostname for existing in nodes):
            raise PatchError(f"node '{entry.hostname}' already in {node_list_path}")
    except PatchError:
        if strict:
            raise
        logger.warning("Cannot add node %s to %s; document left unchanged", entry.hostname, node_list_path)
        return edited

    nodes.append(entry.model_dump())
    return edited


def set_protection(document: SpecDocument, flag: str, value: bool) -> SpecDocument:
    """Set a boolean protection annotation, adding it when absent.

    Args:
        document: BKECluster document; left untouched.
        flag: Annotation key, or its name without the BKE prefix.
        value: New value, stored as ``"true"`` or ``"false"``.

    Returns:
        The edited copy of the document.
    """
    edited = copy.deepcopy(document)
    _annotations(edited)[annotation_key(flag)] = "true" if value else "false"
    return edited


def prepare_for_submit(document: SpecDocument) -> SpecDocument:
    """Drop status and server-managed metadata so the document can be re-applied."""
    cleaned = copy.deepcopy(document)
    cleaned.pop("status", None)
    metadata = cleaned.get("metadata")
    if isinstance(metadata, dict):
        for key in SERVER_MANAGED_METADATA:
            metadata.pop(key, None)
    return cleaned


# ============================================================================
# Fetch, mutate, apply
# ============================================================================

class ClusterSpecPatcher:
    """Read-modify-write cycles against the live BKECluster resource.

    Every patch fetches the document afresh right before editing it, so
    edits made by others since the previous patch are preserved. There is
    no optimistic-concurrency check.

    Args:
        client: kubectl wrapper.
        cluster_cfg: Identifies the BKECluster resource and its node list.
        document_path: Where the edited document is written for ``kubectl apply``.
        keep: Keep the written document after applying it.
        strict: Fail on documents that lack the expected node entries.
    """

    def __init__(
        self,
        client: KubeClient,
        cluster_cfg: ClusterConfig,
        document_path: Path,
        keep: bool = False,
        strict: bool = True,
    ) -> None:
        self.client = client
        self.cluster_cfg = cluster_cfg
        self.document_path = Path(document_path)
        self.keep = keep
        self.strict = strict

    def fetch(self) -> SpecDocument:
        cfg = self.cluster_cfg
        return self.client.get_resource(cfg.resource_kind, cfg.cluster_name, cfg.namespace)

    def patch(self, mutate: Callable[[SpecDocument], SpecDocument]) -> str:
        """Fetch the document, apply *mutate*, and submit the result.

        Args:
            mutate: Pure edit returning the new document.

        Returns:
            ``kubectl apply`` output.

        Raises:
            InfrastructureError: If fetching, writing, or applying fails.
            PatchError: If the edit does not match the document.
        """
        document = prepare_for_submit(mutate(self.fetch()))
        with transient_file(self.document_path, keep=self.keep) as path:
            try:
                path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
            except OSError as err:
                raise InfrastructureError(f"Cannot write {path}: {err}") from err
            output = self.client.apply_file(path)
        console.print(output.rstrip(), markup=False, highlight=False)
        return output

    def remove_node(self, hostname: str) -> dict[str, Any] | None:
        """Remove *hostname* from the node list.

        Returns:
            The removed entry as it was in the document, or None when a
            lenient patcher found nothing to remove.
        """
        path = self.cluster_cfg.node_list_path
        removed: list[dict[str, Any]] = []

        def _mutate(doc: SpecDocument) -> SpecDocument:
            entry = find_node(doc, hostname, path)
            if entry is not None:
                removed.append(entry)
            return remove_node(doc, hostname, path, strict=self.strict)

        console.print(Panel.fit(f"Removing node {hostname} from {self.cluster_cfg.cluster_name}", style="bold blue"))
        self.patch(_mutate)
        return removed[0] if removed else None

    def add_node(self, entry: NodeEntry) -> str:
        console.print(Panel.fit(f"Adding node {entry.hostname} to {self.cluster_cfg.cluster_name}", style="bold blue"))
        return self.patch(
            lambda doc: add_node(doc, entry, self.cluster_cfg.node_list_path, strict=self.strict)
        )

    def disable_delete_protection(self) -> str:
        """Turn off the namespace and target-cluster delete safeguards."""
        def _mutate(doc: SpecDocument) -> SpecDocument:
            for flag in DELETE_PROTECTION_ANNOTATIONS:
                doc = set_protection(doc, flag, False)
            return doc

        console.print("[yellow]\u2139\ufe0f  Disabling delete protection annotations...[/yellow]")
        return self.patch(_mutate)
