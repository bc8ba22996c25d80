"""
Polling loop for long-running asynchronous AWS jobs.

Import jobs commonly take several minutes. The poller queries the job at an
interval that grows with the total time spent waiting, so fast jobs are
noticed quickly while slow ones do not burn API quota.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from ami_uploader.common import (
    DEFAULT_BACKOFF_BANDS,
    ERR_AWS_TASK_RESULT_FAILED,
    IMPORT_TASK_COMPLETED_STATE,
    IMPORT_TASK_FAILURE_STATES,
    ImportTaskFailedError,
    JobStatus,
    PollCancelledError,
    PollTimeoutError,
    ServiceError,
)


@dataclass(frozen=True)
class JobState:
    """A single observation of an asynchronous job."""

    status: JobStatus
    artifact_id: Optional[str] = None
    raw_status: Optional[str] = None
    progress: int = 0
    message: Optional[str] = None


def classify_status(raw_status: Optional[str]) -> JobStatus:
    """
    Map a service-reported status string onto a JobStatus.

    Only "completed" is terminal-success. Known failure states are FAILED;
    anything else, including unknown values, is still PENDING.
    """
    if raw_status is None:
        return JobStatus.PENDING

    normalized = raw_status.strip().lower()
    if normalized == IMPORT_TASK_COMPLETED_STATE:
        return JobStatus.COMPLETED
    if normalized in IMPORT_TASK_FAILURE_STATES:
        return JobStatus.FAILED
    return JobStatus.PENDING


class BackoffSchedule:
    """Sleep intervals keyed on total elapsed time since polling began."""

    def __init__(self, bands: Sequence[Tuple[float, float]] = DEFAULT_BACKOFF_BANDS):
        """
        Args:
            bands: ``(threshold_seconds, interval_seconds)`` pairs. The band with
                the largest threshold not above the elapsed time applies.
        """
        if not bands:
            raise ValueError("Backoff schedule needs at least one band")

        self.bands = tuple(sorted(bands))
        if self.bands[0][0] != 0:
            raise ValueError("The first backoff band must start at 0 seconds")
        if any(interval <= 0 for _, interval in self.bands):
            raise ValueError("Backoff intervals must be positive")

    def interval_for(self, elapsed: float) -> float:
        """Return the sleep interval for the given elapsed time in seconds."""
        interval = self.bands[0][1]
        for threshold, band_interval in self.bands:
            if elapsed >= threshold:
                interval = band_interval
            else:
                break
        return interval


_DEFAULT_SCHEDULE = BackoffSchedule()


def backoff_interval(elapsed: float) -> float:
    """Sleep interval for ``elapsed`` seconds under the default 20s/40s/120s schedule."""
    return _DEFAULT_SCHEDULE.interval_for(elapsed)


class JobPoller:
    """Blocks until an asynchronous job completes and returns its artifact id."""

    def __init__(
        self,
        schedule: Optional[BackoffSchedule] = None,
        max_wait_seconds: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Args:
            schedule: Backoff schedule, defaults to 20s/40s/120s at 0/3/6 minutes.
            max_wait_seconds: Give up with PollTimeoutError after this long. None waits forever.
            cancel_event: Setting this event aborts the poll with PollCancelledError.
            clock: Monotonic clock in seconds.
            sleep: Sleep function. Defaults to waiting on ``cancel_event`` so that
                cancellation interrupts the sleep, or ``time.sleep`` without one.
        """
        self.schedule = schedule or _DEFAULT_SCHEDULE
        self.max_wait_seconds = max_wait_seconds
        self.cancel_event = cancel_event
        self.clock = clock
        self._sleep = sleep

    def poll(
        self,
        job_id: str,
        query: Callable[[str], JobState],
        on_update: Optional[Callable[[JobState, float], None]] = None,
    ) -> str:
        """
        Query ``job_id`` until it completes.

        Args:
            job_id: The job to wait on.
            query: Returns the current JobState of a job. Errors propagate.
            on_update: Called with each observed state and the elapsed seconds.

        Returns:
            str: The artifact id reported by the completing query.

        Raises:
            ImportTaskFailedError: The job reached a failure state.
            PollTimeoutError: ``max_wait_seconds`` elapsed first.
            PollCancelledError: ``cancel_event`` was set.
            ServiceError: The job completed without an artifact id.
        """
        started = self.clock()

        while True:
            self._check_cancelled(job_id)
            state = query(job_id)
            elapsed = self.clock() - started

            if on_update is not None:
                on_update(state, elapsed)

            if state.status == JobStatus.COMPLETED:
                if not state.artifact_id:
                    raise ServiceError(
                        f"Job {job_id} completed but returned no result id",
                        ERR_AWS_TASK_RESULT_FAILED,
                    )
                return state.artifact_id

            if state.status == JobStatus.FAILED:
                raise ImportTaskFailedError(job_id, state.raw_status or state.status.value, state.message)

            interval = self.schedule.interval_for(elapsed)
            if self.max_wait_seconds is not None:
                remaining = self.max_wait_seconds - elapsed
                if remaining <= 0:
                    raise PollTimeoutError(
                        f"Job {job_id} did not complete within {self.max_wait_seconds:.0f} seconds"
                    )
                interval = min(interval, remaining)

            self._wait(job_id, interval)

    def _check_cancelled(self, job_id: str) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise PollCancelledError(f"Polling of job {job_id} was cancelled")

    def _wait(self, job_id: str, seconds: float) -> None:
        if self._sleep is not None:
            self._sleep(seconds)
        elif self.cancel_event is not None:
            if self.cancel_event.wait(seconds):
                raise PollCancelledError(f"Polling of job {job_id} was cancelled")
        else:
            time.sleep(seconds)
