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

"""Utility functions for kubectl, command checks, and transient artifacts."""

from __future__ import annotations

import subprocess
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import sh

from cluster_acceptance import logger


class InfrastructureError(RuntimeError):
    """The orchestration API, a CLI, or a local artifact is unusable; the run must stop."""


def require_command(cmd: str) -> None:
    """Check if a command exists on the system PATH.

    Args:
        cmd: Name of the CLI command to check.

    Raises:
        InfrastructureError: If the command is not found.
    """
    try:
        sh.which(cmd)
    except sh.ErrorReturnCode as err:
        raise InfrastructureError(f"Required command '{cmd}' not found. Please install it first.") from err


def run_kubectl(args: list[str], timeout: int = 30) -> tuple[bool, str, str]:
    """Run a kubectl command via subprocess and return (success, stdout, stderr).

    Uses subprocess instead of sh because JSON output parsing requires
    stdout kept apart from stderr warnings.

    Args:
        args: kubectl arguments (e.g. ``["get", "pods", "-A", "-o", "json"]``).
        timeout: Maximum seconds to wait for the command to complete.

    Returns:
        Tuple of (success, stdout, stderr).
    """
    try:
        result = subprocess.run(
            ["kubectl", *args],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        return result.returncode == 0, result.stdout, result.stderr
    except (subprocess.SubprocessError, OSError) as exc:
        return False, "", str(exc)


@contextmanager
def transient_file(path: Path, keep: bool = False) -> Iterator[Path]:
    """Yield *path* and remove the file on exit unless *keep* is set.

    Args:
        path: Artifact location; it need not exist yet.
        keep: Leave the file in place for debugging.

    Yields:
        The artifact path.
    """
    try:
        yield path
    finally:
        if not keep:
            try:
                path.unlink(missing_ok=True)
            except OSError as err:
                logger.warning("Could not remove %s: %s", path, err)
