"""Console and logging configuration module for mini telnet.

This module provides a standardised console setup, configuring a Rich-based
console with integrated logging and a progress bar for batch runs.

Key features:
1. Rich-formatted logging that appears above the progress bar
2. A progress bar pinned to the bottom of the screen while hosts are processed
3. Thread-safe progress updates
"""

from __future__ import annotations

import logging
import threading
from logging import DEBUG, INFO, WARNING, getLogger
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

# Create a Rich console for diagnostics, keeping stdout free for results
console = Console(stderr=True)

# Get the logger shared by the whole package
log = getLogger("mini_telnet")

# Progress display shared across the application
progress_lock = threading.RLock()
progress = Progress(
    SpinnerColumn(),
    TextColumn("[bold blue]{task.description}"),
    BarColumn(),
    MofNCompleteColumn(),
    TimeElapsedColumn(),
    console=console,
    transient=True,  # Remove the bar once the batch is done
)

# Totals of progress tasks that have not been completed yet
_active_tasks: dict[TaskID, int] = {}


def configure_logging(verbosity: int = 0) -> None:
    """Send package logs to the Rich console.

    Args:
        verbosity: 0 for warnings only, 1 for info, 2 or more for debug
    """
    level = WARNING
    if verbosity >= 2:  # noqa: PLR2004
        level = DEBUG
    elif verbosity == 1:
        level = INFO

    logging.basicConfig(
        level=WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_time=True)],
        force=True,
    )
    log.setLevel(level)


def create_progress(description: str, total: int) -> TaskID:
    """Create a new progress bar task, starting the display if needed.

    Returns:
        Identifier for the task
    """
    with progress_lock:
        if not progress.live.is_started:
            progress.start()
        task_id = progress.add_task(description, total=total)
        _active_tasks[task_id] = total
        return task_id


def update_progress(task_id: TaskID, advance: float = 1, **kwargs: Any) -> None:
    """Advance a progress bar task.

    Args:
        task_id: Identifier for the task
        advance: Number of steps to advance
        **kwargs: Additional arguments to pass to progress.update
    """
    with progress_lock:
        if task_id not in _active_tasks:
            log.warning("Attempted to update non-existent progress task: %s", task_id)
            return
        progress.update(task_id, advance=advance, **kwargs)


def complete_progress(task_id: TaskID, description: str | None = None) -> None:
    """Mark a progress bar task as complete, stopping the display when idle.

    Args:
        task_id: Identifier for the task
        description: Final description for the completed task
    """
    with progress_lock:
        if task_id not in _active_tasks:
            log.warning("Attempted to complete non-existent progress task: %s", task_id)
            return

        update_kwargs: dict[str, Any] = {"completed": _active_tasks[task_id]}
        if description is not None:
            update_kwargs["description"] = description
        progress.update(task_id, **update_kwargs)
        del _active_tasks[task_id]

        if not _active_tasks and progress.live.is_started:
            progress.stop()
