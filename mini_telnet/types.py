"""Type definitions module for mini telnet.

This module contains type aliases shared by the CLI and the batch runner.
"""

from __future__ import annotations

from typing import TypeAlias

JSON_TYPE: TypeAlias = "bool | dict[str, JSON_TYPE] | float | int | list[JSON_TYPE] | str | None"
