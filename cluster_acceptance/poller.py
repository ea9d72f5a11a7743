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

"""Fixed-cadence convergence polling over rendered cluster snapshots."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_attempt, wait_fixed

from cluster_acceptance import console, logger
from cluster_acceptance.capture import CaptureLog
from cluster_acceptance.checks import Predicate, table_rows
from cluster_acceptance.constants import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_POLL_TIMEOUT_SECONDS


@dataclass(frozen=True)
class PollOutcome:
    """Result of one convergence poll.

    Attributes:
        converged: Whether the predicate held on some snapshot.
        last_snapshot_text: The final snapshot taken.
        attempts: Number of snapshots taken.
    """

    converged: bool
    last_snapshot_text: str
    attempts: int

    @property
    def empty_snapshot(self) -> bool:
        """Whether the final snapshot listed nothing at all."""
        return not table_rows(self.last_snapshot_text)


class ConvergencePoller:
    """Take snapshots until a predicate holds or the timeout is used up.

    Snapshots are taken at a fixed interval with no backoff: at most
    ``timeout // interval + 1`` snapshots and ``timeout // interval`` sleeps.
    Exceptions raised by the snapshot callable propagate immediately.

    Args:
        capture: Log cleared before and written with every snapshot, or None.
        timeout: Total seconds allowed for convergence.
        interval: Seconds between snapshots.
        sleep: Sleep function, replaceable in tests.
    """

    def __init__(
        self,
        capture: CaptureLog | None = None,
        timeout: float = DEFAULT_POLL_TIMEOUT_SECONDS,
        interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"poll interval must be positive, got {interval}")
        if timeout < 0:
            raise ValueError(f"poll timeout must not be negative, got {timeout}")
        self.capture = capture
        self.timeout = timeout
        self.interval = interval
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return int(self.timeout // self.interval) + 1

    def poll(self, snapshot: Callable[[], str], predicate: Predicate, description: str = "cluster") -> PollOutcome:
        """Poll *snapshot* until *predicate* holds on its text.

        Args:
            snapshot: Produces the rendered snapshot text.
            predicate: Convergence condition over the snapshot text.
            description: What is being waited for, used in progress output.

        Returns:
            The poll outcome; a timeout is a value, never an exception.
        """
        last_text = ""
        attempts = 0

        def _attempt() -> bool:
            nonlocal last_text, attempts
            attempts += 1
            if self.capture is not None:
                self.capture.clear()
            last_text = snapshot()
            if self.capture is not None:
                self.capture.write(last_text)
            return predicate(last_text)

        def _before_sleep(state: RetryCallState) -> None:
            console.print(
                f"[yellow]\u2139\ufe0f  {description}: not converged "
                f"(attempt {state.attempt_number}/{self.max_attempts}), waiting {self.interval}s...[/yellow]"
            )

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.interval),
            retry=retry_if_result(lambda ok: not ok),
            sleep=self._sleep,
            before_sleep=_before_sleep,
            retry_error_callback=lambda state: False,
        )
        converged = bool(retrying(_attempt))
        outcome = PollOutcome(converged=converged, last_snapshot_text=last_text, attempts=attempts)

        if converged:
            console.print(f"[green]\u2705 {description}: converged after {attempts} snapshot(s)[/green]")
        elif outcome.empty_snapshot:
            logger.error("%s: final snapshot after %ss is empty", description, self.timeout)
            console.print(f"[red]\u274c {description}: timed out and the final snapshot is empty[/red]")
        else:
            logger.warning("%s: predicate not satisfied within %ss", description, self.timeout)
            console.print(f"[yellow]\u26a0\ufe0f  {description}: not converged within {self.timeout}s[/yellow]")
        return outcome
