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

"""Tests for the capture log, transient artifacts, and command helpers."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
import sh

from cluster_acceptance import utils
from cluster_acceptance.capture import CaptureLog
from cluster_acceptance.utils import InfrastructureError, require_command, run_kubectl, transient_file


def test_capture_log_tees_and_clears(tmp_path: Path):
    echoed: list[str] = []
    with CaptureLog(tmp_path / "logs.yaml", echo=echoed.append) as capture:
        capture.write("first\n")
        capture.write("second\n")
        assert capture.read_text() == "first\nsecond\n"
        capture.clear()
        capture.write("third\n")
        assert capture.read_text() == "third\n"
    assert echoed == ["first\n", "second\n", "third\n"]


def test_capture_log_must_be_open(tmp_path: Path):
    with pytest.raises(InfrastructureError):
        CaptureLog(tmp_path / "logs.yaml", echo=None).write("text")


def test_transient_file_is_removed(tmp_path: Path):
    with transient_file(tmp_path / "cluster.yaml") as path:
        path.write_text("kind: BKECluster\n")
    assert not path.exists()


def test_transient_file_is_removed_on_error(tmp_path: Path):
    with pytest.raises(RuntimeError):
        with transient_file(tmp_path / "cluster.yaml") as path:
            path.write_text("kind: BKECluster\n")
            raise RuntimeError("phase failed")
    assert not path.exists()


def test_transient_file_kept_on_request(tmp_path: Path):
    with transient_file(tmp_path / "cluster.yaml", keep=True) as path:
        path.write_text("kind: BKECluster\n")
    assert path.exists()


def test_transient_file_that_was_never_created(tmp_path: Path):
    with transient_file(tmp_path / "admin.conf") as path:
        pass
    assert not path.exists()


def test_run_kubectl_reports_failures():
    completed = subprocess.CompletedProcess(["kubectl"], 1, stdout="", stderr="forbidden")
    with patch.object(utils.subprocess, "run", return_value=completed):
        assert run_kubectl(["get", "nodes"]) == (False, "", "forbidden")


def test_run_kubectl_timeout():
    with patch.object(utils.subprocess, "run", side_effect=subprocess.TimeoutExpired("kubectl", 5)):
        ok, stdout, stderr = run_kubectl(["get", "nodes"], timeout=5)
    assert not ok
    assert "timed out" in stderr


def test_require_command_missing():
    error = sh.ErrorReturnCode_1("/usr/bin/which bke", b"", b"")
    with patch.object(utils.sh, "which", side_effect=error, create=True):
        with pytest.raises(InfrastructureError, match="bke"):
            require_command("bke")


def test_require_command_missing_on_path():
    with pytest.raises(InfrastructureError, match="not found"):
        require_command("bke-acceptance-no-such-command")


def test_require_command_present():
    with patch.object(utils.sh, "which", return_value="/usr/local/bin/kubectl", create=True):
        require_command("kubectl")
