import threading
from unittest import mock

import pytest

from ami_uploader.aws import AWSClient
from ami_uploader.common import (
    ERR_AWS_S3_UPLOAD_FAILED,
    ERR_AWS_TASK_TIMEOUT,
    ERR_FILE_READ_FAILED,
    ConfigError,
    PollCancelledError,
    PollTimeoutError,
    RegionError,
    ServiceError,
    SourceFileError,
    UploaderConfig,
    UploadStage,
)
from ami_uploader.core import ImageUploader
from ami_uploader.core.job_poller import BackoffSchedule


@pytest.fixture
def aws_client():
    client = mock.MagicMock(spec=AWSClient)
    client.upload_to_s3.side_effect = lambda path, bucket, key: f"s3://{bucket}/{key}"
    client.import_snapshot.return_value = "import-snap-1"
    client.waiter.wait_for_snapshot_import.return_value = "snap-123"
    client.register_image.return_value = "ami-0123456789abcdef0"
    return client


def make_uploader(image_file, aws_client, **kwargs):
    params = {"region": "us-west-2", "bucket": "b", "image_path": image_file, "image_name": "my-image"}
    params.update(kwargs)
    return ImageUploader(aws_client=aws_client, **params)


def test_default_key_gets_image_extension(image_file, aws_client):
    result = make_uploader(image_file, aws_client).execute()

    assert result.object_key == "new-ami-source-image.vhd"
    aws_client.upload_to_s3.assert_called_once_with(image_file.resolve(), "b", "new-ami-source-image.vhd")
    aws_client.import_snapshot.assert_called_once_with("b", "new-ami-source-image.vhd", "vhd")


def test_custom_key_is_unchanged(image_file, aws_client):
    result = make_uploader(image_file, aws_client, key="images/boot-disk").execute()

    assert result.object_key == "images/boot-disk"
    aws_client.import_snapshot.assert_called_once_with("b", "images/boot-disk", "vhd")


def test_full_pipeline_result(image_file, aws_client):
    uploader = make_uploader(image_file, aws_client, ena_support=True)
    result = uploader.execute()

    assert result.s3_url == "s3://b/new-ami-source-image.vhd"
    assert result.import_task_id == "import-snap-1"
    assert result.snapshot_id == "snap-123"
    assert result.image_id == "ami-0123456789abcdef0"
    assert result.elapsed_seconds >= 0
    assert uploader.stage == UploadStage.DONE
    aws_client.register_image.assert_called_once_with("snap-123", "my-image", True)


def test_poll_settings_are_passed_to_waiter(image_file, aws_client):
    config = UploaderConfig(backoff_bands=((0, 5), (60, 10)))
    make_uploader(image_file, aws_client, config=config, max_wait_minutes=30).execute()

    _, kwargs = aws_client.waiter.wait_for_snapshot_import.call_args
    assert aws_client.waiter.wait_for_snapshot_import.call_args[0] == ("import-snap-1",)
    assert kwargs["max_wait_seconds"] == 1800
    assert isinstance(kwargs["schedule"], BackoffSchedule)
    assert kwargs["schedule"].interval_for(61) == 10


def test_upload_failure_stops_pipeline(image_file, aws_client):
    aws_client.upload_to_s3.side_effect = ServiceError("Failed to upload", ERR_AWS_S3_UPLOAD_FAILED)
    uploader = make_uploader(image_file, aws_client)

    with pytest.raises(ServiceError) as excinfo:
        uploader.execute()

    assert excinfo.value.exit_code == ERR_AWS_S3_UPLOAD_FAILED
    assert excinfo.value.partial_results == {}
    assert uploader.stage == UploadStage.UPLOADING
    aws_client.import_snapshot.assert_not_called()
    aws_client.waiter.wait_for_snapshot_import.assert_not_called()
    aws_client.register_image.assert_not_called()


def test_poll_failure_reports_completed_stages(image_file, aws_client):
    aws_client.waiter.wait_for_snapshot_import.side_effect = PollTimeoutError("too slow")
    uploader = make_uploader(image_file, aws_client)

    with pytest.raises(PollTimeoutError) as excinfo:
        uploader.execute()

    assert excinfo.value.exit_code == ERR_AWS_TASK_TIMEOUT
    assert excinfo.value.partial_results == {
        "S3 Object": "s3://b/new-ami-source-image.vhd",
        "Import Task": "import-snap-1",
    }
    assert uploader.stage == UploadStage.POLLING
    aws_client.register_image.assert_not_called()


def test_missing_file(tmp_path, aws_client):
    with pytest.raises(SourceFileError):
        make_uploader(tmp_path / "nope.vhd", aws_client)


def test_empty_file(tmp_path, aws_client):
    empty = tmp_path / "empty.vmdk"
    empty.touch()
    with pytest.raises(SourceFileError):
        make_uploader(empty, aws_client)


def test_file_without_extension(tmp_path, aws_client):
    image = tmp_path / "disk"
    image.write_bytes(b"data")
    with pytest.raises(SourceFileError) as excinfo:
        make_uploader(image, aws_client)
    assert excinfo.value.exit_code == ERR_FILE_READ_FAILED


def test_malformed_backoff_bands(image_file, aws_client):
    config = UploaderConfig(backoff_bands=((60, 20),))
    with pytest.raises(ConfigError):
        make_uploader(image_file, aws_client, config=config)


def test_invalid_region(image_file, aws_client):
    with pytest.raises(RegionError):
        make_uploader(image_file, aws_client, region="mars-north-1")
    aws_client.upload_to_s3.assert_not_called()


def test_unknown_format_still_uploads(tmp_path, aws_client):
    image = tmp_path / "disk.qcow2"
    image.write_bytes(b"data")

    make_uploader(image, aws_client).execute()

    aws_client.import_snapshot.assert_called_once_with("b", "new-ami-source-image.qcow2", "qcow2")


def test_cancel_before_register_stops_pipeline(image_file, aws_client):
    cancel = threading.Event()

    def finish_import_then_cancel(task_id, **kwargs):
        cancel.set()
        return "snap-123"

    aws_client.waiter.wait_for_snapshot_import.side_effect = finish_import_then_cancel
    uploader = make_uploader(image_file, aws_client, cancel_event=cancel)

    with pytest.raises(PollCancelledError) as excinfo:
        uploader.execute()

    assert excinfo.value.partial_results["Snapshot"] == "snap-123"
    aws_client.register_image.assert_not_called()


def test_display_results(image_file, aws_client, monkeypatch):
    shown = {}
    monkeypatch.setattr(
        "ami_uploader.core.image_uploader.display_summary", lambda title, items: shown.update(items)
    )
    uploader = make_uploader(image_file, aws_client)

    uploader.display_results(uploader.execute())

    assert "ami-0123456789abcdef0" in shown["Created AMI ID"]
    assert shown["Snapshot"] == "snap-123"
    assert shown["ENA Support"] == "false"
