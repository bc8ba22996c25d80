"""File utility functions for ami-uploader operations."""

from pathlib import Path

from ami_uploader.common import SUPPORTED_FORMATS, SourceFileError


def get_image_format(image_path: Path) -> str:
    """
    Return the image format named by the file extension.

    The extension is returned without the leading dot and otherwise verbatim,
    since it is passed straight through to EC2 as the disk format.
    """
    suffix = image_path.suffix
    if not suffix or suffix == ".":
        raise SourceFileError(
            f"Source image has no file extension: {image_path}. "
            f"The extension must name the image format ({', '.join(SUPPORTED_FORMATS)})"
        )
    return suffix[1:]


def is_supported_format(image_format: str) -> bool:
    """Check whether EC2 is known to accept the given disk format."""
    return image_format.lower() in SUPPORTED_FORMATS


def resolve_object_key(key: str, image_path: Path, default_key: str) -> str:
    """
    Return the S3 object key to upload to.

    The default key is suffixed with the image format extension; any other
    key is used as given.
    """
    if key == default_key:
        return f"{default_key}.{get_image_format(image_path)}"
    return key


def get_file_size(file_path: Path) -> int:
    """Get file size in bytes."""
    return file_path.stat().st_size


def format_bytes(bytes_count: int) -> str:
    """Format bytes as human-readable string."""
    bytes_float = float(bytes_count)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if bytes_float < 1024.0:
            return f"{bytes_float:.1f} {unit}"
        bytes_float /= 1024.0
    return f"{bytes_float:.1f} PB"


def format_duration(seconds: float) -> str:
    """Format a duration as a short human-readable string, e.g. ``12m 5s``."""
    total = int(round(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
