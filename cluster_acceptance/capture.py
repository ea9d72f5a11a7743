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

"""Captured-output log: a file that is also echoed to the console."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from cluster_acceptance import console
from cluster_acceptance.utils import InfrastructureError


def _console_echo(text: str) -> None:
    # Raw command output may contain [brackets]; bypass rich markup.
    console.out(text, end="", highlight=False)


class CaptureLog:
    """Tee raw command output and snapshots into a file and the console.

    The file is re-read by the phase checks, and cleared before every
    convergence snapshot so that it only ever holds the latest one.
    """

    def __init__(self, path: Path, echo: Callable[[str], None] | None = _console_echo) -> None:
        self.path = Path(path)
        self._echo = echo
        self._file: TextIO | None = None

    def __enter__(self) -> CaptureLog:
        self._open("w")
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def _open(self, mode: str) -> None:
        try:
            self._file = open(self.path, mode, encoding="utf-8")
        except OSError as err:
            raise InfrastructureError(f"Cannot open capture log {self.path}: {err}") from err

    def write(self, text: str) -> None:
        """Append *text* to the file and echo it."""
        if self._file is None:
            raise InfrastructureError(f"Capture log {self.path} is not open")
        try:
            self._file.write(text)
            self._file.flush()
        except OSError as err:
            raise InfrastructureError(f"Cannot write capture log {self.path}: {err}") from err
        if self._echo is not None:
            self._echo(text)

    def clear(self) -> None:
        """Truncate the file, discarding the previous snapshot."""
        if self._file is not None:
            self._file.close()
        self._open("w")

    def read_text(self) -> str:
        """Return the current file content."""
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as err:
            raise InfrastructureError(f"Cannot read capture log {self.path}: {err}") from err
