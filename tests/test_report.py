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

"""Tests for the incrementally written report."""

from __future__ import annotations

from pathlib import Path

import pytest

from cluster_acceptance.report import ReportWriter
from cluster_acceptance.utils import InfrastructureError


def test_sections_are_flushed_as_written(tmp_path: Path):
    path = tmp_path / "test.yaml"
    with ReportWriter(path) as report:
        report.begin("Cluster deploy test:")
        report.mark("success!")
        assert path.read_text() == "Cluster deploy test:\nsuccess!\n\n"

        report.begin("Component install test:")
        report.write_block("NAMESPACE NAME\nkube-system coredns\n")
        report.end()

    expected = (
        "Cluster deploy test:\nsuccess!\n\n"
        "Component install test:\nNAMESPACE NAME\nkube-system coredns\n\n"
    )
    assert path.read_text() == expected
    assert report.render() == expected
    assert [s.title for s in report.sections] == ["Cluster deploy test:", "Component install test:"]


def test_render_matches_file_for_an_open_section(tmp_path: Path):
    path = tmp_path / "test.yaml"
    with ReportWriter(path) as report:
        report.begin("Cluster deploy test:")
        report.mark("success!")
        report.begin("Cluster scale-down test:")
        report.write("NAME STATUS ROLES")

        assert report.render() == path.read_text()
        assert report.render().endswith("NAME STATUS ROLES\n")

        report.end()
        assert report.render() == path.read_text()
        assert report.render().endswith("NAME STATUS ROLES\n\n")


def test_write_requires_a_section(tmp_path: Path):
    with ReportWriter(tmp_path / "test.yaml") as report:
        with pytest.raises(RuntimeError):
            report.write("orphan")


def test_unwritable_location_is_an_infrastructure_error(tmp_path: Path):
    with pytest.raises(InfrastructureError):
        with ReportWriter(tmp_path / "missing" / "test.yaml"):
            pass


def test_writes_after_close_fail(tmp_path: Path):
    report = ReportWriter(tmp_path / "test.yaml")
    with report:
        report.begin("Cluster delete test:")
    with pytest.raises(InfrastructureError):
        report.mark("success!")
