"""Disk image to Amazon Machine Image uploader.

Uploads a local disk image to S3, imports it as an EBS snapshot and registers
a bootable AMI from that snapshot.
"""

# Core first: the AWS modules import the job poller from it
from .core import ImageUploader, JobPoller

from .aws import AWSClient, AWSWaiter

__version__ = "1.0.0"

__all__ = [
    "ImageUploader",
    "JobPoller",
    "AWSClient",
    "AWSWaiter",
]
