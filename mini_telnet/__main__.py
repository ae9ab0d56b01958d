"""Main entry point for mini telnet."""

from __future__ import annotations

from asyncio import run as asyncio_run
from sys import exit as sys_exit

from .cli.main import main


def launch() -> None:
    """Launch the mini telnet application."""
    sys_exit(asyncio_run(main()))


if __name__ == "__main__":
    launch()
