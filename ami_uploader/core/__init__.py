"""Core ami-uploader functionality modules."""

# job_poller first: the AWS waiter depends on it
from .job_poller import BackoffSchedule, JobPoller, JobState, backoff_interval, classify_status
from .image_uploader import ImageUploader, UploadResult

__all__ = [
    "BackoffSchedule",
    "JobPoller",
    "JobState",
    "backoff_interval",
    "classify_status",
    "ImageUploader",
    "UploadResult",
]
