"""Shared constants, enums, errors and configuration for ami-uploader."""

from .config import UploaderConfig
from .constants import *  # noqa: F401,F403
from .enums import ConsoleLogLevel, JobStatus, LogLevel, UploadStage
from .error_codes import *  # noqa: F401,F403
from .errors import (
    ConfigError,
    ImportTaskFailedError,
    PollCancelledError,
    PollTimeoutError,
    RegionError,
    ServiceError,
    SourceFileError,
    UploaderError,
)
