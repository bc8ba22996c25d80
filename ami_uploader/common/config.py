"""
Configuration for the upload pipeline.
"""

from dataclasses import dataclass
from typing import Tuple

from ami_uploader.common.constants import (
    DEFAULT_ARCHITECTURE,
    DEFAULT_BACKOFF_BANDS,
    DEFAULT_BUCKET_KEY,
    DEFAULT_DELETE_ON_TERMINATION,
    DEFAULT_ROOT_DEVICE_NAME,
    DEFAULT_VIRTUALIZATION_TYPE,
    IMPORT_DESCRIPTION,
)


@dataclass(frozen=True)
class UploaderConfig:
    """
    Immutable settings shared by every stage of an upload.

    The register-image values are platform policy, not user input.
    """

    default_key: str = DEFAULT_BUCKET_KEY
    import_description: str = IMPORT_DESCRIPTION
    root_device_name: str = DEFAULT_ROOT_DEVICE_NAME
    architecture: str = DEFAULT_ARCHITECTURE
    virtualization_type: str = DEFAULT_VIRTUALIZATION_TYPE
    delete_on_termination: bool = DEFAULT_DELETE_ON_TERMINATION
    backoff_bands: Tuple[Tuple[float, float], ...] = DEFAULT_BACKOFF_BANDS
