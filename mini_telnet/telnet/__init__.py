"""Telnet Session Module.

This module provides a small asyncio-based telnet client that refuses all
option negotiation, detects prompts in the output stream, logs in and runs
shell commands on the remote side.

Example usage:
    ```python
    import asyncio
    from mini_telnet.telnet import TelnetConfig, connect

    async def main():
        config = TelnetConfig(command_prompt="ubuntu@ubuntu:~$ ")
        async with await connect("192.168.100.2:23", config) as session:
            await session.login("ubuntu", "ubuntu")
            print(await session.execute("uname -a"))

    asyncio.run(main())
    ```
"""

from __future__ import annotations

from .client import TelnetSession, connect, extract_output
from .config import TelnetConfig
from .errors import (
    BufferLimitError,
    ConnectFailedError,
    ConnectionClosedError,
    PromptNotConfiguredError,
    SessionStateError,
    TelnetError,
    TelnetIOError,
    TelnetTimeoutError,
)
from .negotiate import ControlSequenceFilter, escape_iac
from .scanner import PromptScanner
from .types import SessionState, TelnetAddress

__all__ = [
    "BufferLimitError",
    "ConnectFailedError",
    "ConnectionClosedError",
    "ControlSequenceFilter",
    "PromptNotConfiguredError",
    "PromptScanner",
    "SessionState",
    "SessionStateError",
    "TelnetAddress",
    "TelnetConfig",
    "TelnetError",
    "TelnetIOError",
    "TelnetSession",
    "TelnetTimeoutError",
    "connect",
    "escape_iac",
    "extract_output",
]
