"""Constants for mini telnet."""

from __future__ import annotations

from os import environ
from pathlib import Path
from typing import Any

# Network protocol constants

IAC_BYTE = 0xFF  # Interpret As Command byte
DEFAULT_TELNET_PORT = 23
MIN_PORT = 1
MAX_PORT = 65535
READ_CHUNK_SIZE = 4096
MAX_BUFFER_SIZE = 1024 * 1024  # Hard ceiling for unconsumed output

# Session defaults

DEFAULT_USERNAME_PROMPT = "login: "
DEFAULT_PASSWORD_PROMPT = "Password: "
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 5.0

# CLI constants

PASSWORD_ENV_VAR = "MINI_TELNET_PASSWORD"

CLI_ARGUMENTS: dict[str, list[tuple[Any]]] = {
    "targets": [
        (["-H", "--host"], {"action": "append", "default": [], "help": "Host or host:port", "metavar": "ADDR"}),
        (["-i", "--input"], {"help": "Inventory file of hosts", "type": Path}),
        (
            ["-if", "--input-format"],
            {"choices": ["csv", "json", "xlsx"], "default": "csv", "metavar": "<csv>|json|xlsx"},
        ),
    ],
    "login": [
        (["-u", "--username"], {"help": "Login username (skip login if omitted)"}),
        (
            ["-p", "--password"],
            {"default": environ.get(PASSWORD_ENV_VAR), "help": f"Login password (or ${PASSWORD_ENV_VAR})"},
        ),
        (["--username-prompt"], {"default": DEFAULT_USERNAME_PROMPT, "metavar": f"<{DEFAULT_USERNAME_PROMPT!r}>"}),
        (["--password-prompt"], {"default": DEFAULT_PASSWORD_PROMPT, "metavar": f"<{DEFAULT_PASSWORD_PROMPT!r}>"}),
        (["-P", "--prompt"], {"help": "Command prompt printed by the remote shell", "required": True}),
        (["--no-login"], {"action": "store_true", "help": "Run commands without the login handshake"}),
    ],
    "operations": [
        (["-c", "--command"], {"action": "append", "default": [], "help": "Command to run (repeatable)"}),
        (["--raw"], {"action": "store_true", "help": "Keep command echo and trailing prompt"}),
        (["-n", "--concurrency"], {"type": int, "default": 10, "metavar": "<10>"}),
        (
            ["--connect-timeout"],
            {"type": float, "default": DEFAULT_CONNECT_TIMEOUT, "metavar": f"<{DEFAULT_CONNECT_TIMEOUT:g}>"},
        ),
        (
            ["-t", "--timeout"],
            {"type": float, "default": DEFAULT_READ_TIMEOUT, "metavar": f"<{DEFAULT_READ_TIMEOUT:g}>"},
        ),
        (["-v", "--verbose"], {"action": "count", "default": 0, "help": "Increase log verbosity"}),
    ],
    "files": [
        (["-o", "--output"], {"help": "Output file path (default: stdout)", "type": Path}),
        (
            ["-of", "--output-format"],
            {"choices": ["csv", "json", "plain", "xlsx"], "default": "plain", "metavar": "csv|json|<plain>|xlsx"},
        ),
    ],
}
CLI_HELP_DESCRIPTION: str = """Mini telnet: log in to telnet servers and run shell commands.

Each host is logged in to with the given credentials, then every command
is sent in turn and its output captured by waiting for the command prompt.
Hosts come from repeated --host options or an inventory file, and results
are printed or written out in the chosen format.
"""
CLI_HELP_EPILOGUE: str | None = "If an argument has a default, it's shown in <parentheses>."
CLI_HELP_NAME: str = "mini-telnet"
