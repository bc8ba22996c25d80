import threading

import pytest
from botocore.stub import Stubber

from ami_uploader.aws import AWSWaiter
from ami_uploader.common import (
    ERR_AWS_TASK_STATUS_CHECK_FAILED,
    ImportTaskFailedError,
    JobStatus,
    PollCancelledError,
    ServiceError,
)

TASK_ID = "import-snap-0123456789abcdef0"


def task_response(status, snapshot_id=None, progress=None, message=None):
    detail = {"Status": status, "Format": "VHD"}
    if snapshot_id:
        detail["SnapshotId"] = snapshot_id
    if progress is not None:
        detail["Progress"] = progress
    if message:
        detail["StatusMessage"] = message
    return {"ImportSnapshotTasks": [{"ImportTaskId": TASK_ID, "SnapshotTaskDetail": detail}]}


@pytest.fixture
def waiter(ec2_client):
    return AWSWaiter(ec2_client)


def test_describe_active_task(waiter):
    with Stubber(waiter.ec2) as stubber:
        stubber.add_response(
            "describe_import_snapshot_tasks",
            task_response("active", progress="42", message="downloading/converting"),
            {"ImportTaskIds": [TASK_ID]},
        )
        state = waiter.describe_import_snapshot_task(TASK_ID)

    assert state.status == JobStatus.PENDING
    assert state.artifact_id is None
    assert state.raw_status == "active"
    assert state.progress == 42
    assert state.message == "downloading/converting"


def test_describe_completed_task(waiter):
    with Stubber(waiter.ec2) as stubber:
        stubber.add_response(
            "describe_import_snapshot_tasks",
            task_response("completed", snapshot_id="snap-123"),
            {"ImportTaskIds": [TASK_ID]},
        )
        state = waiter.describe_import_snapshot_task(TASK_ID)

    assert state.status == JobStatus.COMPLETED
    assert state.artifact_id == "snap-123"
    assert state.progress == 0


def test_snapshot_id_ignored_until_completed(waiter):
    with Stubber(waiter.ec2) as stubber:
        stubber.add_response(
            "describe_import_snapshot_tasks",
            task_response("active", snapshot_id="snap-early", progress="unknown"),
            {"ImportTaskIds": [TASK_ID]},
        )
        state = waiter.describe_import_snapshot_task(TASK_ID)

    assert state.artifact_id is None
    assert state.progress == 0


def test_describe_missing_task(waiter):
    with Stubber(waiter.ec2) as stubber:
        stubber.add_response("describe_import_snapshot_tasks", {"ImportSnapshotTasks": []}, {"ImportTaskIds": [TASK_ID]})
        with pytest.raises(ServiceError) as excinfo:
            waiter.describe_import_snapshot_task(TASK_ID)

    assert excinfo.value.exit_code == ERR_AWS_TASK_STATUS_CHECK_FAILED


def test_describe_client_error(waiter):
    with Stubber(waiter.ec2) as stubber:
        stubber.add_client_error("describe_import_snapshot_tasks", "RequestLimitExceeded", "Request limit exceeded.")
        with pytest.raises(ServiceError) as excinfo:
            waiter.describe_import_snapshot_task(TASK_ID)

    assert excinfo.value.exit_code == ERR_AWS_TASK_STATUS_CHECK_FAILED
    assert "Request limit exceeded." in excinfo.value.cause


def test_wait_returns_snapshot_when_already_completed(waiter):
    with Stubber(waiter.ec2) as stubber:
        stubber.add_response(
            "describe_import_snapshot_tasks",
            task_response("completed", snapshot_id="snap-123"),
            {"ImportTaskIds": [TASK_ID]},
        )
        assert waiter.wait_for_snapshot_import(TASK_ID) == "snap-123"


def test_wait_polls_until_completed(waiter, monkeypatch):
    sleeps = []
    monkeypatch.setattr("ami_uploader.core.job_poller.time.sleep", sleeps.append)

    with Stubber(waiter.ec2) as stubber:
        for status in ["pending", "active", "active"]:
            stubber.add_response(
                "describe_import_snapshot_tasks", task_response(status), {"ImportTaskIds": [TASK_ID]}
            )
        stubber.add_response(
            "describe_import_snapshot_tasks",
            task_response("completed", snapshot_id="snap-123"),
            {"ImportTaskIds": [TASK_ID]},
        )
        assert waiter.wait_for_snapshot_import(TASK_ID) == "snap-123"
        stubber.assert_no_pending_responses()

    assert sleeps == [20, 20, 20]


def test_wait_fails_on_deleted_task(waiter):
    with Stubber(waiter.ec2) as stubber:
        stubber.add_response(
            "describe_import_snapshot_tasks",
            task_response("deleted", message="ClientError: Unknown OS / Missing OS files."),
            {"ImportTaskIds": [TASK_ID]},
        )
        with pytest.raises(ImportTaskFailedError) as excinfo:
            waiter.wait_for_snapshot_import(TASK_ID)

    assert excinfo.value.task_id == TASK_ID
    assert "Unknown OS" in excinfo.value.cause


def test_wait_honours_cancel_event(waiter):
    cancel = threading.Event()
    cancel.set()

    with Stubber(waiter.ec2):
        with pytest.raises(PollCancelledError):
            waiter.wait_for_snapshot_import(TASK_ID, cancel_event=cancel)
