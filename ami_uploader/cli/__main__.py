#!/usr/bin/python3
"""Disk image to AMI uploader for AWS EC2."""

import signal
import threading
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.markup import escape
from rich.rule import Rule
from typing_extensions import Annotated

from ami_uploader.aws import AWSClient
from ami_uploader.common import (
    AWS_DEFAULT_REGION,
    DEFAULT_BUCKET_KEY,
    ERR_AWS_AMI_NOT_FOUND,
    ERR_OPERATION_CANCELLED,
    ConsoleLogLevel,
    LogLevel,
    ServiceError,
    UploaderError,
)
from ami_uploader.core import ImageUploader
from ami_uploader.utils import (
    ValidationError,
    error_and_exit,
    log_message,
    setup_logging,
    validate_image_id,
    validate_image_name,
    validate_region,
)

app = typer.Typer(
    name="ami-uploader",
    help="Amazon machine image uploader & other miscellaneous utilities",
    add_completion=False,
    no_args_is_help=True,
)


def _check_image_name(name: str) -> str:
    try:
        return validate_image_name(name)
    except ValidationError as e:
        raise typer.BadParameter(str(e)) from e


def _check_image_id(image_id: str) -> str:
    try:
        return validate_image_id(image_id)
    except ValidationError as e:
        raise typer.BadParameter(str(e)) from e


def report_error(error: UploaderError) -> NoReturn:
    """Render an UploaderError and exit with its code."""
    parts = [escape(str(error))]

    cause = getattr(error, "cause", None)
    if cause:
        parts.extend([Rule(), escape(cause)])

    if error.partial_results:
        parts.append(Rule("Completed before the failure"))
        parts.extend(f"[bold]{key}:[/bold] {escape(value)}" for key, value in error.partial_results.items())

    error_and_exit(f"[bold]{error.title}[/bold]", *parts, code=error.exit_code)


@app.callback()
def main(
    log_level: Annotated[
        ConsoleLogLevel, typer.Option("--log-level", case_sensitive=False, help="Console log level")
    ] = ConsoleLogLevel.INFO,
) -> None:
    """
    Amazon machine image uploader & other miscellaneous utilities.
    """
    setup_logging(log_level.value)


@app.command("upload")
def upload(
    bucket: Annotated[str, typer.Option("--bucket", "-b", help="S3 bucket name")],
    image: Annotated[
        Path,
        typer.Option(
            "--image",
            "-i",
            help="Filepath of the source image. The file extension must denote the format of the image",
        ),
    ],
    name: Annotated[str, typer.Option("--name", "-n", help="Name of the new AMI image", callback=_check_image_name)],
    region: Annotated[str, typer.Option("--region", "-r", help="AWS region")] = AWS_DEFAULT_REGION,
    key: Annotated[
        str,
        typer.Option(
            "--key",
            "-k",
            help="S3 object key. If the default key is used, the resulting key is suffixed with the image format extension",
        ),
    ] = DEFAULT_BUCKET_KEY,
    ena: Annotated[
        bool, typer.Option("--ena", help="Enhanced Network Adapter support. Images that support ENA must enable it")
    ] = False,
    max_wait_minutes: Annotated[
        Optional[float],
        typer.Option("--max-wait-minutes", min=1, help="Give up waiting for the snapshot import after this long"),
    ] = None,
) -> None:
    """
    Upload a local disk image and register it as an AMI.

    The image is copied to S3, imported as an EBS snapshot, and registered as a
    new AMI backed by that snapshot.

    Examples:

    \b
    # Upload a VHD image with ENA support
    ami-uploader upload --bucket my-bucket --image ./disk.vhd --name my-image --ena

    \b
    # Upload to a specific key in another region
    ami-uploader upload -r eu-west-1 -b my-bucket -k images/disk.vmdk -i ./disk.vmdk -n my-image
    """
    cancel_event = threading.Event()
    previous_handler = signal.signal(signal.SIGTERM, lambda signum, frame: cancel_event.set())

    try:
        uploader = ImageUploader(
            region=region,
            bucket=bucket,
            image_path=image,
            image_name=name,
            key=key,
            ena_support=ena,
            max_wait_minutes=max_wait_minutes,
            cancel_event=cancel_event,
        )
        result = uploader.execute()
        uploader.display_results(result)
    except UploaderError as e:
        report_error(e)
    except KeyboardInterrupt:
        error_and_exit("Upload interrupted", code=ERR_OPERATION_CANCELLED)
    finally:
        signal.signal(signal.SIGTERM, previous_handler)


@app.command("deregister")
def deregister(
    image_id: Annotated[
        str, typer.Option("--image-id", "-a", help="AMI ID to deregister", callback=_check_image_id)
    ],
    region: Annotated[str, typer.Option("--region", "-r", help="AWS region")] = AWS_DEFAULT_REGION,
) -> None:
    """
    Deregister an AMI. Snapshots backing the AMI are not deleted.
    """
    try:
        AWSClient(validate_region(region)).deregister_image(image_id)
    except UploaderError as e:
        report_error(e)


@app.command("find-image")
def find_image(
    name: Annotated[str, typer.Option("--name", "-n", help="Name of the AMI to look up")],
    region: Annotated[str, typer.Option("--region", "-r", help="AWS region")] = AWS_DEFAULT_REGION,
) -> None:
    """
    Print the ID of the AMI with the given name among the images you own.
    """
    try:
        image_id = AWSClient(validate_region(region)).find_image_id_by_name(name)
    except UploaderError as e:
        report_error(e)

    if image_id is None:
        report_error(ServiceError(f"No AMI owned by this account is named: {name}", ERR_AWS_AMI_NOT_FOUND))

    log_message(LogLevel.SUCCESS, f"Found AMI {image_id} named {name}")
    typer.echo(image_id)


if __name__ == "__main__":
    app()
