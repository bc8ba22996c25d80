"""
This module defines project-level constants.
"""

from typing import Tuple

AWS_DEFAULT_REGION = "us-west-2"

# Sentinel S3 key; when used, the source image extension is appended
DEFAULT_BUCKET_KEY = "new-ami-source-image"

IMPORT_DESCRIPTION = "ami-uploader created this object"

# Register-image platform defaults
DEFAULT_ROOT_DEVICE_NAME = "/dev/sda1"
DEFAULT_ARCHITECTURE = "x86_64"
DEFAULT_VIRTUALIZATION_TYPE = "hvm"
DEFAULT_DELETE_ON_TERMINATION = True

# Poll backoff bands: (elapsed seconds threshold, sleep seconds)
DEFAULT_BACKOFF_BANDS: Tuple[Tuple[float, float], ...] = (
    (0, 20),
    (60 * 3, 40),
    (60 * 6, 60 * 2),
)

# Disk formats accepted by EC2 ImportSnapshot, by file extension
SUPPORTED_FORMATS = ["ova", "vmdk", "vhd", "vhdx", "raw", "img"]

# ImportSnapshot task states that will never reach "completed"
IMPORT_TASK_FAILURE_STATES = ["deleting", "deleted", "cancelling", "cancelled", "error", "failed"]
IMPORT_TASK_COMPLETED_STATE = "completed"

# AMI names: 3-128 characters, letters, numbers and ( ) . - / ' @ _
AMI_NAME_PATTERN = r"^[A-Za-z0-9()\[\]./\-'@_ ]{3,128}$"
AMI_ID_PATTERN = r"^ami-[a-f0-9]{8,17}$"
