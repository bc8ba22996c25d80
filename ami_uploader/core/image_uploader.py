"""Disk image to AMI upload orchestrator."""

import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from ami_uploader.aws.aws_client import AWSClient
from ami_uploader.common import (
    DEFAULT_BUCKET_KEY,
    SUPPORTED_FORMATS,
    ConfigError,
    LogLevel,
    PollCancelledError,
    UploaderConfig,
    UploaderError,
    UploadStage,
)
from ami_uploader.core.job_poller import BackoffSchedule
from ami_uploader.utils import (
    display_summary,
    format_bytes,
    format_duration,
    get_file_size,
    get_image_format,
    is_supported_format,
    log_message,
    log_section,
    log_step,
    resolve_object_key,
    stage_progress,
    validate_local_file,
    validate_region,
)

TOTAL_STEPS = 4


@dataclass(frozen=True)
class UploadResult:
    """Outputs of a completed upload."""

    object_key: str
    s3_url: str
    import_task_id: str
    snapshot_id: str
    image_id: str
    elapsed_seconds: float


class ImageUploader:
    """
    Uploads a local disk image and turns it into an AMI.

    Stages run strictly in order: upload to S3, start the snapshot import,
    wait for the import, register the AMI. The first failure aborts the rest;
    nothing already created is rolled back.
    """

    def __init__(
        self,
        region: str,
        bucket: str,
        image_path: Path,
        image_name: str,
        key: str = DEFAULT_BUCKET_KEY,
        ena_support: bool = False,
        config: Optional[UploaderConfig] = None,
        max_wait_minutes: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        aws_client: Optional[AWSClient] = None,
    ):
        """Validate the inputs and prepare the AWS client."""
        self.config = config or UploaderConfig()
        self.region = validate_region(region)
        self.bucket = bucket
        self.image_path = validate_local_file(image_path)
        self.image_name = image_name
        self.ena_support = ena_support
        self.image_format = get_image_format(self.image_path)
        self.object_key = resolve_object_key(key, self.image_path, self.config.default_key)
        self.max_wait_seconds = max_wait_minutes * 60 if max_wait_minutes is not None else None
        self.cancel_event = cancel_event

        try:
            self.schedule = BackoffSchedule(self.config.backoff_bands)
        except ValueError as e:
            raise ConfigError(f"Invalid backoff bands {self.config.backoff_bands}: {e}") from e

        self.aws_client = aws_client or AWSClient(self.region, self.config)

        self.stage = UploadStage.UPLOADING
        # Outputs of completed stages, reported if a later stage fails
        self.results: Dict[str, str] = {}

    def execute(self) -> UploadResult:
        """Run all four stages and return their outputs."""
        started = time.monotonic()

        if not is_supported_format(self.image_format):
            log_message(
                LogLevel.WARN,
                f"Image format '{self.image_format}' is not one of {', '.join(SUPPORTED_FORMATS)}; "
                "EC2 may reject the import",
            )

        log_section("Disk Image to AMI", section_level=1)
        try:
            s3_url = self._upload()
            task_id = self._submit_import()
            snapshot_id = self._wait_for_snapshot(task_id)
            image_id = self._register_image(snapshot_id)
        except UploaderError as e:
            e.partial_results = dict(self.results)
            log_message(LogLevel.ERROR, f"Upload failed during {self.stage.value} stage: {e}")
            raise

        self.stage = UploadStage.DONE
        return UploadResult(
            object_key=self.object_key,
            s3_url=s3_url,
            import_task_id=task_id,
            snapshot_id=snapshot_id,
            image_id=image_id,
            elapsed_seconds=time.monotonic() - started,
        )

    def _enter_stage(self, stage: UploadStage) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise PollCancelledError(f"Upload cancelled before the {stage.value} stage")
        self.stage = stage

    def _upload(self) -> str:
        """Copy the source image to S3."""
        self._enter_stage(UploadStage.UPLOADING)
        log_step(1, TOTAL_STEPS, "Copying to S3...")
        log_message(
            LogLevel.INFO,
            f"Uploading file: {self.image_path} (size: {format_bytes(get_file_size(self.image_path))})",
        )
        with stage_progress(f"[1/{TOTAL_STEPS}] Copying to s3://{self.bucket}/{self.object_key}"):
            s3_url = self.aws_client.upload_to_s3(self.image_path, self.bucket, self.object_key)
        self.results["S3 Object"] = s3_url
        return s3_url

    def _submit_import(self) -> str:
        """Start the snapshot import job."""
        self._enter_stage(UploadStage.SUBMITTING)
        log_step(2, TOTAL_STEPS, "Importing snapshot...")
        with stage_progress(f"[2/{TOTAL_STEPS}] Importing snapshot"):
            task_id = self.aws_client.import_snapshot(self.bucket, self.object_key, self.image_format)
        self.results["Import Task"] = task_id
        return task_id

    def _wait_for_snapshot(self, task_id: str) -> str:
        """Block until the import job yields a snapshot."""
        self._enter_stage(UploadStage.POLLING)
        log_step(3, TOTAL_STEPS, "Waiting on snapshot task queue...")
        snapshot_id = self.aws_client.waiter.wait_for_snapshot_import(
            task_id,
            schedule=self.schedule,
            max_wait_seconds=self.max_wait_seconds,
            cancel_event=self.cancel_event,
        )
        self.results["Snapshot"] = snapshot_id
        return snapshot_id

    def _register_image(self, snapshot_id: str) -> str:
        """Register the AMI from the imported snapshot."""
        self._enter_stage(UploadStage.REGISTERING)
        log_step(4, TOTAL_STEPS, "Registering new AWS AMI image...")
        with stage_progress(f"[4/{TOTAL_STEPS}] Registering {self.image_name}"):
            image_id = self.aws_client.register_image(snapshot_id, self.image_name, self.ena_support)
        self.results["AMI"] = image_id
        return image_id

    def display_results(self, result: UploadResult) -> None:
        """Display the upload summary."""
        log_section("Upload Summary", section_level=1)
        log_message(LogLevel.SUCCESS, f"Done in {format_duration(result.elapsed_seconds)}")

        display_summary(
            "ami-uploader Results",
            {
                "Region": self.region,
                "S3 Object": result.s3_url,
                "Import Task": result.import_task_id,
                "Snapshot": result.snapshot_id,
                "AMI Name": self.image_name,
                "ENA Support": str(self.ena_support).lower(),
                "Created AMI ID": f"[bold underline]{result.image_id}[/bold underline]",
            },
        )
