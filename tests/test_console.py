"""Unit tests for the console and logging implementation."""

from __future__ import annotations

import logging
import threading
from logging import DEBUG, INFO, WARNING, getLogger
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest
from rich.logging import RichHandler

from mini_telnet.cli.console import (
    _active_tasks,  # noqa: PLC2701
    complete_progress,
    configure_logging,
    create_progress,
    log,
    progress_lock,
    update_progress,
)

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def reset_progress_state() -> Generator[None]:
    """Reset progress-related global state between tests."""
    original_active_tasks = _active_tasks.copy()
    _active_tasks.clear()

    yield

    _active_tasks.clear()
    _active_tasks.update(original_active_tasks)


@pytest.fixture
def mock_log() -> Generator[MagicMock]:
    """Fixture providing a mock logger for testing."""
    with patch("mini_telnet.cli.console.log") as mock:
        yield mock


@pytest.fixture
def mock_progress() -> Generator[MagicMock]:
    """Fixture providing a mock progress bar for testing."""
    with patch("mini_telnet.cli.console.progress") as mock:
        mock.live.is_started = True
        yield mock


@pytest.fixture
def restore_logging() -> Generator[None]:
    """Restore the root handlers and package log level after a test."""
    root = getLogger()
    handlers, level = root.handlers[:], log.level
    yield
    root.handlers[:] = handlers
    log.setLevel(level)


def test_progress_lock_is_rlock() -> None:
    """Test that progress_lock is an RLock instance."""
    if not isinstance(progress_lock, type(threading.RLock())):
        pytest.fail(f"Expected progress_lock to be threading.RLock, got {type(progress_lock)}")


@pytest.mark.usefixtures("restore_logging")
@pytest.mark.parametrize(("verbosity", "level"), [(0, WARNING), (1, INFO), (2, DEBUG), (5, DEBUG)])
def test_configure_logging(verbosity: int, level: int) -> None:
    """Test that verbosity maps to the package log level with a Rich handler."""
    configure_logging(verbosity)

    if log.level != level:
        pytest.fail(f"Expected level {logging.getLevelName(level)}, got {logging.getLevelName(log.level)}")
    if not any(isinstance(handler, RichHandler) for handler in getLogger().handlers):
        pytest.fail("Expected a RichHandler on the root logger")


def test_create_progress_new_task(mock_progress: MagicMock) -> None:
    """Test create_progress registers the task and its total."""
    mock_progress.add_task.return_value = 123

    task_id = create_progress("Test Task", total=50)

    mock_progress.add_task.assert_called_once_with("Test Task", total=50)
    mock_progress.start.assert_not_called()
    if task_id != 123:
        pytest.fail(f"Expected task ID 123, got {task_id}")
    if _active_tasks[task_id] != 50:
        pytest.fail(f"Expected task {task_id} to have total 50, got {_active_tasks[task_id]}")


def test_create_progress_starts_display(mock_progress: MagicMock) -> None:
    """Test create_progress starts the display if not already started."""
    mock_progress.add_task.return_value = 123
    mock_progress.live.is_started = False

    task_id = create_progress("Test Task", total=1)

    mock_progress.start.assert_called_once()
    if task_id not in _active_tasks:
        pytest.fail(f"Task {task_id} should be in _active_tasks")


def test_update_progress_advance(mock_progress: MagicMock) -> None:
    """Test update_progress passes its arguments through."""
    _active_tasks[123] = 10

    update_progress(123, advance=2, description="Updated description")

    mock_progress.update.assert_called_once_with(123, advance=2, description="Updated description")


def test_update_progress_nonexistent_task(mock_progress: MagicMock, mock_log: MagicMock) -> None:
    """Test update_progress with non-existent task ID."""
    update_progress(999, advance=10)

    mock_progress.update.assert_not_called()
    mock_log.warning.assert_called_once_with("Attempted to update non-existent progress task: %s", 999)


def test_complete_progress(mock_progress: MagicMock) -> None:
    """Test complete_progress fills the bar and stops the idle display."""
    _active_tasks[123] = 100

    complete_progress(123)

    mock_progress.update.assert_called_once_with(123, completed=100)
    if 123 in _active_tasks:
        pytest.fail("Task 123 should not be in _active_tasks")
    mock_progress.stop.assert_called_once()


def test_complete_progress_with_description(mock_progress: MagicMock) -> None:
    """Test complete_progress with description parameter."""
    _active_tasks[123] = 100

    complete_progress(123, description="Completed!")

    mock_progress.update.assert_called_once_with(123, completed=100, description="Completed!")


def test_complete_progress_nonexistent_task(mock_progress: MagicMock, mock_log: MagicMock) -> None:
    """Test complete_progress with non-existent task ID."""
    complete_progress(999)

    mock_progress.update.assert_not_called()
    mock_log.warning.assert_called_once_with("Attempted to complete non-existent progress task: %s", 999)


def test_complete_progress_with_other_tasks(mock_progress: MagicMock) -> None:
    """Test complete_progress when other tasks are still active."""
    _active_tasks[123] = 100
    _active_tasks[456] = 5

    complete_progress(123)

    mock_progress.stop.assert_not_called()
    if 123 in _active_tasks or 456 not in _active_tasks:
        pytest.fail(f"Only task 123 should have been removed, got {_active_tasks!r}")
