"""
Utils package for ami_uploader.

- file_utils: image format and object key helpers, human-readable sizes
- logging_utils: logging configuration and rich display utilities
- validation_utils: input validation (region, local file, AMI id and name)
"""

from .file_utils import (
    format_bytes,
    format_duration,
    get_file_size,
    get_image_format,
    is_supported_format,
    resolve_object_key,
)
from .logging_utils import (
    display_summary,
    error_and_exit,
    get_logger,
    log_message,
    log_section,
    log_step,
    setup_logging,
    stage_progress,
)
from .validation_utils import (
    ValidationError,
    validate_image_id,
    validate_image_name,
    validate_local_file,
    validate_region,
)

__all__ = [
    "format_bytes",
    "format_duration",
    "get_file_size",
    "get_image_format",
    "is_supported_format",
    "resolve_object_key",
    "display_summary",
    "error_and_exit",
    "get_logger",
    "log_message",
    "log_section",
    "log_step",
    "setup_logging",
    "stage_progress",
    "ValidationError",
    "validate_image_id",
    "validate_image_name",
    "validate_local_file",
    "validate_region",
]
