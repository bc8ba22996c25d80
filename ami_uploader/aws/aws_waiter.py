"""AWS waiter functions for snapshot import tasks."""

import threading
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from ami_uploader.common import ERR_AWS_TASK_STATUS_CHECK_FAILED, JobStatus, LogLevel, ServiceError
from ami_uploader.core.job_poller import BackoffSchedule, JobPoller, JobState, classify_status
from ami_uploader.utils import format_duration, log_message, stage_progress


def _parse_progress(value) -> int:
    # EC2 reports progress as a string percentage, sometimes missing
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return 0
    if isinstance(value, int):
        return value
    return 0


class AWSWaiter:
    """Waits on EC2 import snapshot tasks."""

    def __init__(self, ec2_client):
        """Initialize AWS waiter with an EC2 client."""
        self.ec2 = ec2_client

    def describe_import_snapshot_task(self, task_id: str) -> JobState:
        """
        Fetch the current state of an import snapshot task.

        The snapshot ID is only reported once the task has completed.
        """
        try:
            response = self.ec2.describe_import_snapshot_tasks(ImportTaskIds=[task_id])
        except (ClientError, BotoCoreError) as e:
            raise ServiceError(
                f"Failed to check status of import task {task_id}", ERR_AWS_TASK_STATUS_CHECK_FAILED, str(e)
            ) from e

        tasks = response.get("ImportSnapshotTasks") or []
        if not tasks:
            raise ServiceError(f"Import task not found: {task_id}", ERR_AWS_TASK_STATUS_CHECK_FAILED)

        detail = tasks[0].get("SnapshotTaskDetail", {})
        raw_status = detail.get("Status")
        status = classify_status(raw_status)

        return JobState(
            status=status,
            artifact_id=detail.get("SnapshotId") if status == JobStatus.COMPLETED else None,
            raw_status=raw_status,
            progress=_parse_progress(detail.get("Progress")),
            message=detail.get("StatusMessage"),
        )

    def wait_for_snapshot_import(
        self,
        task_id: str,
        schedule: Optional[BackoffSchedule] = None,
        max_wait_seconds: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Wait for an import snapshot task to complete and return the snapshot ID.

        Args:
            task_id: Import task ID returned by ImportSnapshot
            schedule: Backoff schedule for status queries
            max_wait_seconds: Optional upper bound on the wait
            cancel_event: Optional event that aborts the wait when set
        """
        poller = JobPoller(schedule=schedule, max_wait_seconds=max_wait_seconds, cancel_event=cancel_event)
        description = f"Waiting for import task {task_id}"
        log_message(LogLevel.INFO, description)

        with stage_progress(description) as update:

            def report(state: JobState, elapsed: float) -> None:
                status = state.raw_status or "unknown"
                progress_desc = f"{description} (Status: {status})"
                if state.progress > 0:
                    progress_desc = f"{progress_desc} ({state.progress}%)"
                update(progress_desc)
                log_message(
                    LogLevel.DEBUG,
                    f"Import task {task_id} status after {format_duration(elapsed)}: {status} "
                    f"{state.message or ''}".rstrip(),
                )

            snapshot_id = poller.poll(task_id, self.describe_import_snapshot_task, on_update=report)

        log_message(LogLevel.SUCCESS, f"Snapshot import completed: {snapshot_id}")
        return snapshot_id
