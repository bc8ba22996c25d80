"""Logging utility functions for ami-uploader operations."""

import logging
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterator, NoReturn, Optional

from rich.console import Console, Group, RenderableType
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.rule import Rule
from rich.text import Text

from ami_uploader.common import LogLevel

_logger: Optional[logging.Logger] = None
_console = Console()


def get_logger() -> logging.Logger:
    """Get the global ami-uploader logger instance."""
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger


class UploaderLogFileFormatter(logging.Formatter):
    """Plain-text formatter for ami-uploader log files"""

    def format(self, record):
        record.asctime = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")

        # Log files never contain Rich markup
        message = record.getMessage()
        clean_message = Text.from_markup(message).plain

        formatted = f"{record.asctime} | {record.levelname:<8} | {clean_message}"
        return formatted


def _setup_file_logging() -> Path:
    """Create the log directory and return this run's log file path."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_dir = Path.cwd() / "logs"
    log_dir.mkdir(exist_ok=True)
    return log_dir / f"ami_uploader_{timestamp}.log"


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Set up console and file logging.

    Args:
        log_level: Minimum console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    global _logger

    logger = logging.getLogger("ami_uploader")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    console_handler = RichHandler(
        console=_console,
        show_time=True,
        omit_repeated_times=False,
        show_path=False,
        rich_tracebacks=True,
        markup=True,
        log_time_format="[%Y-%m-%d %H:%M:%S]",
    )
    console_handler.setLevel(getattr(logging, log_level.upper()))
    logger.addHandler(console_handler)

    # The file always gets everything
    log_file = _setup_file_logging()
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(UploaderLogFileFormatter())
    logger.addHandler(file_handler)

    logger.propagate = False
    _logger = logger

    logger.debug(f"Log file: {log_file}")

    return logger


def log_message(level: LogLevel, message: str) -> None:
    """
    Log a message.

    Args:
        level: Log level (mapped to standard logging levels)
        message: Message to log
    """
    logger = get_logger()

    if level == LogLevel.SUCCESS:
        logger.info(f"[bright_green]✓[/bright_green] {message}")
    elif level == LogLevel.ERROR:
        logger.error(f"[bright_red]✗[/bright_red] {message}")
    elif level == LogLevel.WARN:
        logger.warning(f"[yellow]⚠[/yellow] {message}")
    elif level == LogLevel.DEBUG:
        logger.debug(message)
    else:
        logger.info(message)


def log_section(title: str, section_level: int = 1) -> None:
    """
    Print a section header.

    Args:
        title: The title of the section
        section_level: 1 for main sections, 2+ for subsections
    """
    _console.print(Rule(title, style="blue", characters="─" if section_level == 1 else "-"))


def log_step(step_number: int, total_steps: int, description: str) -> None:
    """Log a step in a multi-step process."""
    logger = get_logger()
    logger.info(f"[bold blue]Step {step_number}/{total_steps}:[/bold blue] {description}")


@contextmanager
def stage_progress(description: str) -> Iterator[Callable[[str], None]]:
    """
    Show a transient spinner with elapsed time while a stage runs.

    Yields a function that replaces the spinner's description.
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=_console,
        transient=True,
    ) as progress:
        task = progress.add_task(description, total=None)

        def update(new_description: str) -> None:
            progress.update(task, description=new_description)

        yield update


def error_and_exit(*parts: RenderableType, code: int) -> NoReturn:
    """
    Display an error message and exit the application.

    Args:
        *parts: Renderable parts to display in the error message.
        code: Exit code to use when exiting.
    """
    logger = get_logger()

    processed_parts = []
    for part in parts:
        if isinstance(part, Rule):
            processed_part = Rule(title=part.title, align=part.align, characters=part.characters, style="red")
        elif isinstance(part, str):
            processed_part = Text.from_markup(part)
            logger.debug(f"Fatal error (exit code {code}): {processed_part}")
        else:
            processed_part = part
        processed_parts.append(processed_part)

    group = Group(*processed_parts)
    _console.print(Panel(group, title="[bold red]Error[/bold red]", border_style="red", padding=(1, 2)))

    _console.file.flush()

    sys.exit(code)


def display_summary(title: str, items: Dict[str, str]) -> None:
    """Display a summary panel with key-value pairs."""
    logger = get_logger()
    for key, value in items.items():
        logger.debug(f"{title} - {key}: {value}")

    content = "\n".join([f"[bold]{key}:[/bold] {value}" for key, value in items.items()])
    panel = Panel(content, title=title, border_style="cyan", padding=(1, 2))
    _console.print(panel)
