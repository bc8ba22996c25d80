import logging

import boto3
import pytest

from ami_uploader.utils import logging_utils


@pytest.fixture(autouse=True)
def quiet_logger(monkeypatch):
    """Log through a handler-less logger so tests never write log files."""
    logger = logging.getLogger("ami_uploader.tests")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    monkeypatch.setattr(logging_utils, "_logger", logger)
    monkeypatch.setattr(logging_utils, "setup_logging", lambda log_level="INFO": logger)
    return logger


@pytest.fixture
def aws_env(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture
def ec2_client(aws_env):
    return boto3.client("ec2", region_name="us-west-2")


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "disk.vhd"
    path.write_bytes(b"\x00" * 512)
    return path
