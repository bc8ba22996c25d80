"""
Exception types raised by ami-uploader.

Every exception carries the exit code the CLI reports it with.
"""

from typing import Dict, Optional

from ami_uploader.common.error_codes import (
    ERR_AWS_REGION_INVALID,
    ERR_AWS_TASK_FAILED,
    ERR_AWS_TASK_TIMEOUT,
    ERR_CONFIG_INVALID,
    ERR_FILE_READ_FAILED,
    ERR_GENERAL_OPERATION_FAILED,
    ERR_OPERATION_CANCELLED,
)


class UploaderError(Exception):
    """Base class for all ami-uploader failures."""

    exit_code: int = ERR_GENERAL_OPERATION_FAILED
    title: str = "Operation failed"

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        if code is not None:
            self.exit_code = code
        # Outputs of the pipeline stages that completed before the failure
        self.partial_results: Dict[str, str] = {}


class SourceFileError(UploaderError):
    """Raised when the source image file cannot be read."""

    exit_code = ERR_FILE_READ_FAILED
    title = "Invalid source image"


class RegionError(UploaderError):
    """Raised when the AWS region string is not a known region."""

    exit_code = ERR_AWS_REGION_INVALID
    title = "Invalid AWS region"


class ConfigError(UploaderError):
    """Raised when a required setting is missing or malformed."""

    exit_code = ERR_CONFIG_INVALID
    title = "Invalid configuration"


class ServiceError(UploaderError):
    """Raised when an AWS API call fails."""

    title = "AWS request failed"

    def __init__(self, message: str, code: int, cause: Optional[str] = None):
        super().__init__(message, code)
        self.cause = cause


class ImportTaskFailedError(ServiceError):
    """Raised when the import task reaches a failure state."""

    title = "Snapshot import failed"

    def __init__(self, task_id: str, status: str, status_message: Optional[str] = None):
        message = f"Import task {task_id} ended in state: {status}"
        super().__init__(message, ERR_AWS_TASK_FAILED, cause=status_message)
        self.task_id = task_id
        self.status = status


class PollTimeoutError(UploaderError):
    """Raised when a job does not complete within the configured maximum wait."""

    exit_code = ERR_AWS_TASK_TIMEOUT
    title = "Timed out"


class PollCancelledError(UploaderError):
    """Raised when polling is cancelled through the cancellation event."""

    exit_code = ERR_OPERATION_CANCELLED
    title = "Cancelled"
