"""Command line interface components for mini telnet.

This module provides CLI-related functionality including argument parsing,
console output, logging, progress tracking and inventory/result files.
"""

from __future__ import annotations

from .args import parse_args
from .console import complete_progress, configure_logging, console, create_progress, log, update_progress
from .files import InventoryReader, ResultWriter

__all__ = [
    "InventoryReader",
    "ResultWriter",
    "complete_progress",
    "configure_logging",
    "console",
    "create_progress",
    "log",
    "parse_args",
    "update_progress",
]
