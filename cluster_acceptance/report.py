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

"""Append-only test report, flushed to disk after every write."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from cluster_acceptance.utils import InfrastructureError


@dataclass
class ReportSection:
    """One phase of the report: a header label and its lines."""

    title: str
    lines: list[str] = field(default_factory=list)
    closed: bool = False


class ReportWriter:
    """Ordered report sections written incrementally to a file.

    Every write is flushed so that a run aborted by an infrastructure error
    still leaves the sections recorded so far on disk. Use as a context
    manager to open and close the underlying file.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.sections: list[ReportSection] = []
        self._file: TextIO | None = None

    def __enter__(self) -> ReportWriter:
        try:
            self._file = open(self.path, "w", encoding="utf-8")
        except OSError as err:
            raise InfrastructureError(f"Cannot create report file {self.path}: {err}") from err
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def _emit(self, text: str) -> None:
        if self._file is None:
            raise InfrastructureError(f"Report file {self.path} is not open")
        try:
            self._file.write(text)
            self._file.flush()
        except OSError as err:
            raise InfrastructureError(f"Cannot write report file {self.path}: {err}") from err

    def begin(self, title: str) -> None:
        """Start a new section with the given header label."""
        self.sections.append(ReportSection(title))
        self._emit(f"{title}\n")

    def write(self, line: str) -> None:
        """Append one line to the current section."""
        if not self.sections:
            raise RuntimeError("write() called before begin()")
        self.sections[-1].lines.append(line)
        self._emit(f"{line}\n")

    def write_block(self, text: str) -> None:
        """Append every line of a multi-line block to the current section."""
        for line in text.splitlines():
            self.write(line)

    def end(self) -> None:
        """Close the current section with a blank separator line."""
        self._emit("\n")
        if self.sections:
            self.sections[-1].closed = True

    def mark(self, marker: str) -> None:
        """Append a single outcome marker and close the section."""
        self.write(marker)
        self.end()

    def render(self) -> str:
        """Return the report text as written so far."""
        return "".join(
            f"{section.title}\n"
            + "".join(f"{line}\n" for line in section.lines)
            + ("\n" if section.closed else "")
            for section in self.sections
        )
