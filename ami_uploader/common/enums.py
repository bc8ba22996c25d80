"""
This module defines enums for ami-uploader operations.
"""

from enum import Enum


class JobStatus(str, Enum):
    """Normalized state of an asynchronous import job."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class UploadStage(str, Enum):
    """Stages of the upload pipeline, in execution order."""

    UPLOADING = "uploading"
    SUBMITTING = "submitting"
    POLLING = "polling"
    REGISTERING = "registering"
    DONE = "done"


class LogLevel(str, Enum):
    """Log levels for ami-uploader operations."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARN = "WARN"
    ERROR = "ERROR"


class ConsoleLogLevel(str, Enum):
    """Console log levels accepted by --log-level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
