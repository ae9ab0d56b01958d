"""Minimal asynchronous telnet client package.

This package connects to telnet servers, refuses all option negotiation,
detects textual prompts in the incoming stream, logs in and executes remote
shell commands, returning their output with the echoed command and the
trailing prompt removed.

It also ships a small command line tool that runs a batch of commands on
many hosts concurrently. It uses modern asynchronous Python patterns for
efficient network operations.
"""

from __future__ import annotations

from importlib.metadata import version

from .runner import HostResult, HostTarget, run_host, run_hosts
from .telnet import (
    BufferLimitError,
    ConnectFailedError,
    ConnectionClosedError,
    PromptNotConfiguredError,
    SessionState,
    SessionStateError,
    TelnetConfig,
    TelnetError,
    TelnetIOError,
    TelnetSession,
    TelnetTimeoutError,
    connect,
)

__all__ = [
    "BufferLimitError",
    "ConnectFailedError",
    "ConnectionClosedError",
    "HostResult",
    "HostTarget",
    "PromptNotConfiguredError",
    "SessionState",
    "SessionStateError",
    "TelnetConfig",
    "TelnetError",
    "TelnetIOError",
    "TelnetSession",
    "TelnetTimeoutError",
    "connect",
    "run_host",
    "run_hosts",
]

__version__ = version("mini-telnet")
