"""Validation utility functions for ami-uploader operations."""

import re
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError

from ami_uploader.common import (
    AMI_ID_PATTERN,
    AMI_NAME_PATTERN,
    ERR_AWS_CLIENT_INIT_FAILED,
    RegionError,
    ServiceError,
    SourceFileError,
)


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass


def validate_region(region: Optional[str]) -> str:
    """
    Validate an AWS region name against botocore's bundled endpoint data.

    Args:
        region: The region name to validate, e.g. ``us-west-2``

    Returns:
        str: The validated region

    Raises:
        RegionError: If the region is not known in any partition
        ServiceError: If the boto3 session cannot be created, e.g. an unknown AWS_PROFILE
    """
    if not region or not region.strip():
        raise RegionError("AWS region is required")

    # Region names are lowercase; accept any case and surrounding whitespace
    region = region.strip().lower()

    try:
        session = boto3.Session()
        partitions = session.get_available_partitions()
        for partition in partitions:
            if region in session.get_available_regions("ec2", partition_name=partition):
                return region
    except BotoCoreError as e:
        raise ServiceError("Failed to initialize AWS session", ERR_AWS_CLIENT_INIT_FAILED, str(e)) from e

    raise RegionError(f"Unknown AWS region: {region}")


def validate_local_file(local_path: Path) -> Path:
    """
    Validate local file path.

    Args:
        local_path: The local file path to validate

    Returns:
        Path: The resolved file path

    Raises:
        SourceFileError: If the local file is missing, not a regular file, or empty
    """
    try:
        source_path = Path(local_path).resolve()
    except (OSError, RuntimeError) as e:
        raise SourceFileError(f"Invalid local file path: {local_path}") from e

    if not source_path.exists():
        raise SourceFileError(f"Local file not found: {source_path}")

    if not source_path.is_file():
        raise SourceFileError(f"Path is not a file: {source_path}")

    if source_path.stat().st_size == 0:
        raise SourceFileError(f"Local file is empty: {source_path}")

    return source_path


def validate_image_id(image_id: Optional[str]) -> str:
    """
    Validate AMI ID format.

    Raises:
        ValidationError: If the AMI ID is invalid
    """
    if not image_id:
        raise ValidationError("AMI ID is required")

    if not re.match(AMI_ID_PATTERN, image_id):
        raise ValidationError(f"Invalid AMI ID format: {image_id}")
    return image_id


def validate_image_name(name: Optional[str]) -> str:
    """
    Validate a new AMI name.

    Raises:
        ValidationError: If the name breaks the EC2 AMI naming rules
    """
    if not name:
        raise ValidationError("AMI name is required")

    if not re.match(AMI_NAME_PATTERN, name):
        raise ValidationError(
            f"Invalid AMI name: {name}. "
            "Names must be 3-128 characters of letters, numbers, spaces and ( ) [ ] . / - ' @ _"
        )
    return name
