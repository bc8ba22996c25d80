"""AWS integration modules for ami-uploader."""

from .aws_client import AWSClient
from .aws_waiter import AWSWaiter

__all__ = ["AWSClient", "AWSWaiter"]
