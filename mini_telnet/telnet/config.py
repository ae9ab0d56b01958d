"""Session configuration for the telnet client."""

from __future__ import annotations

from codecs import lookup as codecs_lookup
from dataclasses import dataclass, field, replace
from typing import Any, Self

from mini_telnet.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_PASSWORD_PROMPT,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_USERNAME_PROMPT,
    MAX_BUFFER_SIZE,
)

from .errors import PromptNotConfiguredError


@dataclass(slots=True, frozen=True)
class TelnetConfig:
    """Prompts, timeouts and encoding used by a telnet session.

    The command prompt is required: pick as many characters of the remote
    shell's prompt as possible, since short prompts like ``#`` or ``$ `` may
    also appear inside command output.

    Examples:
        ```python
        config = TelnetConfig(
            command_prompt="ubuntu@ubuntu:~$ ",
            username_prompt="login: ",
            password_prompt="Password: ",
            connect_timeout=10.0,
            read_timeout=5.0,
        )
        ```
    """

    command_prompt: str | None = field(default=None)
    username_prompt: str = field(default=DEFAULT_USERNAME_PROMPT)
    password_prompt: str = field(default=DEFAULT_PASSWORD_PROMPT)
    # Alternative prompts that also terminate command output
    extra_prompts: tuple[str, ...] = field(default=())
    connect_timeout: float = field(default=DEFAULT_CONNECT_TIMEOUT)
    read_timeout: float = field(default=DEFAULT_READ_TIMEOUT)
    newline: str = field(default="\n")
    encoding: str = field(default="utf-8")
    max_buffer_size: int = field(default=MAX_BUFFER_SIZE)

    def __post_init__(self) -> None:
        """Validate the configuration.

        Raises:
            PromptNotConfiguredError: If a required prompt is missing or empty.
            ValueError: If a timeout, the buffer size, the newline or the encoding is invalid.
        """
        if not self.command_prompt:
            msg = "A command prompt must be configured"
            raise PromptNotConfiguredError(msg)
        if not self.username_prompt or not self.password_prompt:
            msg = "Login prompts must not be empty"
            raise PromptNotConfiguredError(msg)
        if any(not prompt for prompt in self.extra_prompts):
            msg = "Extra prompts must not be empty"
            raise PromptNotConfiguredError(msg)
        if self.connect_timeout <= 0:
            msg = f"Connect timeout must be positive, got {self.connect_timeout}"
            raise ValueError(msg)
        if self.read_timeout < 0:
            msg = f"Read timeout must not be negative, got {self.read_timeout}"
            raise ValueError(msg)
        if self.max_buffer_size <= 0:
            msg = f"Buffer size must be positive, got {self.max_buffer_size}"
            raise ValueError(msg)
        if not self.newline:
            msg = "Newline must not be empty"
            raise ValueError(msg)
        try:
            codecs_lookup(self.encoding)
        except LookupError as e:
            msg = f"Unknown encoding: {self.encoding}"
            raise ValueError(msg) from e

    @property
    def prompts(self) -> tuple[str, ...]:
        """All strings accepted as the command prompt, primary first."""
        return (self.command_prompt, *self.extra_prompts)

    def with_options(self, **changes: Any) -> Self:
        """Return a validated copy with some fields changed."""
        return replace(self, **changes)
