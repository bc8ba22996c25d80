"""AWS client wrapper for ami-uploader operations."""

import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from ami_uploader.aws.aws_waiter import AWSWaiter
from ami_uploader.aws.pagination import paginate_aws_response
from ami_uploader.common import (
    ERR_AWS_AMI_DEREGISTER_FAILED,
    ERR_AWS_AMI_FETCH_FAILED,
    ERR_AWS_AMI_REGISTER_FAILED,
    ERR_AWS_CLIENT_INIT_FAILED,
    ERR_AWS_CREDENTIALS_NOT_FOUND,
    ERR_AWS_IMPORT_TASK_FAILED,
    ERR_AWS_S3_UPLOAD_FAILED,
    LogLevel,
    ServiceError,
    SourceFileError,
    UploaderConfig,
)
from ami_uploader.utils import log_message

CREDENTIALS_HINT = (
    'Configure AWS CLI using "aws configure" or set AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY '
    "and optionally AWS_SESSION_TOKEN"
)


def _service_error(message: str, code: int, error: Exception) -> ServiceError:
    if isinstance(error, NoCredentialsError):
        return ServiceError(f"{message}: AWS credentials not found", ERR_AWS_CREDENTIALS_NOT_FOUND, CREDENTIALS_HINT)
    return ServiceError(message, code, cause=str(error))


class AWSClient:
    """
    AWS client wrapper for ami-uploader operations.

    boto3 clients are created on first use, so constructing an AWSClient
    never touches the network or the credential chain.
    """

    def __init__(self, region: str, config: Optional[UploaderConfig] = None) -> None:
        self.region = region
        self.config = config or UploaderConfig()

        self._session: Optional[boto3.Session] = None
        self._ec2 = None
        self._s3 = None
        self._waiter: Optional[AWSWaiter] = None

    @property
    def session(self) -> boto3.Session:
        """
        Lazy initialization of boto3 session.
        """
        if self._session is None:
            try:
                self._session = boto3.Session()
            except Exception as e:
                raise ServiceError("Failed to initialize AWS session", ERR_AWS_CLIENT_INIT_FAILED, str(e)) from e
        return self._session

    @property
    def ec2(self) -> Any:
        """
        Lazy initialization of EC2 client.
        """
        if self._ec2 is None:
            try:
                self._ec2 = self.session.client("ec2", region_name=self.region)
            except Exception as e:
                raise ServiceError("Failed to initialize EC2 client", ERR_AWS_CLIENT_INIT_FAILED, str(e)) from e
        return self._ec2

    @property
    def s3(self) -> Any:
        """
        Lazy initialization of S3 client.
        """
        if self._s3 is None:
            try:
                self._s3 = self.session.client("s3", region_name=self.region)
            except Exception as e:
                raise ServiceError("Failed to initialize S3 client", ERR_AWS_CLIENT_INIT_FAILED, str(e)) from e
        return self._s3

    @property
    def waiter(self) -> AWSWaiter:
        if self._waiter is None:
            self._waiter = AWSWaiter(self.ec2)
        return self._waiter

    def upload_to_s3(self, local_file: Path, bucket: str, key: str) -> str:
        """Upload a file to S3, overwriting any object under ``key``, and return its S3 URL."""
        try:
            self.s3.upload_file(
                str(local_file),
                bucket,
                key,
                ExtraArgs={
                    "Metadata": {
                        "uploaded-by": "ami-uploader",
                        "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
                    },
                },
            )
        except OSError as e:
            raise SourceFileError(f"Failed to read source image {local_file}: {e}") from e
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            raise _service_error(f"Failed to upload file to S3: {bucket}/{key}", ERR_AWS_S3_UPLOAD_FAILED, e) from e

        s3_url = f"s3://{bucket}/{key}"
        log_message(LogLevel.SUCCESS, f"File uploaded to S3: {s3_url}")
        return s3_url

    def import_snapshot(self, bucket: str, key: str, image_format: str) -> str:
        """
        Start an EBS snapshot import from an S3 object.

        :param bucket: S3 bucket holding the disk image
        :param key: S3 key of the disk image
        :param image_format: Disk format, passed through verbatim
        :return: Import task ID
        """
        description = self.config.import_description
        try:
            response = self.ec2.import_snapshot(
                Description=description,
                DiskContainer={
                    "Description": description,
                    "Format": image_format,
                    "UserBucket": {"S3Bucket": bucket, "S3Key": key},
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise _service_error("Failed to start snapshot import task", ERR_AWS_IMPORT_TASK_FAILED, e) from e

        task_id = response.get("ImportTaskId")
        if not task_id:
            raise ServiceError("ImportSnapshot returned no import task ID", ERR_AWS_IMPORT_TASK_FAILED)

        log_message(LogLevel.SUCCESS, f"Import task started: {task_id}")
        return task_id

    def register_image(self, snapshot_id: str, name: str, ena_support: bool) -> str:
        """
        Register a bootable AMI whose root volume is created from ``snapshot_id``.

        :return: AMI ID
        """
        config = self.config
        try:
            response = self.ec2.register_image(
                Name=name,
                Architecture=config.architecture,
                RootDeviceName=config.root_device_name,
                VirtualizationType=config.virtualization_type,
                EnaSupport=ena_support,
                BlockDeviceMappings=[
                    {
                        "DeviceName": config.root_device_name,
                        "Ebs": {
                            "SnapshotId": snapshot_id,
                            "DeleteOnTermination": config.delete_on_termination,
                        },
                    }
                ],
            )
        except (ClientError, BotoCoreError) as e:
            raise _service_error(f"Failed to register AMI: {name}", ERR_AWS_AMI_REGISTER_FAILED, e) from e

        image_id = response.get("ImageId")
        if not image_id:
            raise ServiceError("RegisterImage returned no image ID", ERR_AWS_AMI_REGISTER_FAILED)

        log_message(LogLevel.SUCCESS, f"AMI registered: {image_id}")
        return image_id

    def deregister_image(self, image_id: str) -> None:
        """Deregister an AMI. Its backing snapshots are left in place."""
        try:
            self.ec2.deregister_image(ImageId=image_id)
        except (ClientError, BotoCoreError) as e:
            raise _service_error(f"Failed to deregister AMI: {image_id}", ERR_AWS_AMI_DEREGISTER_FAILED, e) from e

        log_message(LogLevel.SUCCESS, f"AMI deregistered: {image_id}")

    def list_owned_images(self) -> List[Dict[str, Any]]:
        """Return every AMI owned by the calling account."""
        try:
            return paginate_aws_response(self.ec2.describe_images, "Images", Owners=["self"])
        except (ClientError, BotoCoreError) as e:
            raise _service_error("Failed to list owned AMIs", ERR_AWS_AMI_FETCH_FAILED, e) from e

    def find_image_id_by_name(self, name: str) -> Optional[str]:
        """Return the ID of the first owned AMI named ``name``, or None."""
        for image in self.list_owned_images():
            if image.get("Name") == name:
                return image.get("ImageId")
        return None
