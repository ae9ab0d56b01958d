"""Asynchronous telnet session implementation module.

This module provides the session handle that owns a telnet connection: it reads
the byte stream through the control-sequence filter, cuts it into blocks at the
configured prompts, drives the login handshake and runs shell commands.

Every blocking step is bounded by an explicit deadline. A session is meant to
be driven by a single task; callers must not run ``login`` or ``execute``
concurrently on the same session.
"""

from __future__ import annotations

from asyncio import StreamReader, StreamWriter, open_connection, timeout as asyncio_timeout
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Self, TypeAlias

from mini_telnet.cli.console import log
from mini_telnet.constants import READ_CHUNK_SIZE

from .config import TelnetConfig
from .errors import (
    ConnectFailedError,
    ConnectionClosedError,
    SessionStateError,
    TelnetError,
    TelnetIOError,
    TelnetTimeoutError,
)
from .negotiate import ControlSequenceFilter, escape_iac
from .scanner import PromptScanner
from .types import SessionState, TelnetAddress

PromptLike: TypeAlias = str | bytes

_SPACE = 0x20


@dataclass(slots=True)
class TelnetSession:
    """Telnet session that logs in and runs commands by waiting for prompts.

    This class implements the async context manager protocol for easy use in
    async with statements.

    Examples:
        ```python
        config = TelnetConfig(command_prompt="ubuntu@ubuntu:~$ ")
        async with await TelnetSession.connect_to("192.168.100.2:23", config) as session:
            await session.login("ubuntu", "ubuntu")
            output = await session.execute("echo 'haha'")
            assert output == "haha\\n"
        ```
    """

    address: TelnetAddress
    config: TelnetConfig
    reader: StreamReader | None = field(default=None)
    writer: StreamWriter | None = field(default=None)

    # Protocol helpers, owned exclusively by this session
    control_filter: ControlSequenceFilter = field(init=False)
    scanner: PromptScanner = field(init=False)
    _state: SessionState = field(default=SessionState.CLOSED, init=False)

    def __post_init__(self) -> None:
        """Initialise the filter and scanner with our settings."""
        self.control_filter = ControlSequenceFilter()
        self.scanner = PromptScanner(max_buffer_size=self.config.max_buffer_size)
        if self.is_connected:
            self._state = SessionState.CONNECTED

    @classmethod
    async def connect_to(cls, address: str | TelnetAddress, config: TelnetConfig) -> Self:
        """Create a session and connect it in one step.

        Args:
            address: ``host``, ``host:port`` or a parsed TelnetAddress
            config: Prompts and timeouts for the session

        Returns:
            A connected TelnetSession instance

        Raises:
            ConnectFailedError: If the connection attempt fails
        """
        if isinstance(address, str):
            address = TelnetAddress.parse(address)
        session = cls(address=address, config=config)
        await session.connect()
        return session

    async def __aenter__(self) -> Self:
        """Enter the async context manager, connecting if needed.

        Returns:
            The connected session instance
        """
        if not self.is_connected:
            await self.connect()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        """Exit the async context manager, closing the connection."""
        await self.close()

    @property
    def is_connected(self) -> bool:
        """Check if the session currently owns a transport."""
        return self.reader is not None and self.writer is not None

    @property
    def state(self) -> SessionState:
        """Current position in the protocol conversation."""
        return self._state

    async def connect(self) -> None:
        """Open the TCP connection within the configured connect timeout.

        A failed session drops its old transport and connects again.

        Raises:
            ConnectFailedError: If the connection is refused, fails or times out
        """
        if self.is_connected:
            if self._state != SessionState.FAILED:
                return
            log.debug("Reconnecting failed session to %s", self.address)
            await self.close()

        log.info("Connecting with telnet to %s", self.address)
        try:
            async with asyncio_timeout(self.config.connect_timeout):
                self.reader, self.writer = await open_connection(self.address.host, self.address.port)
        except TimeoutError as e:
            msg = f"Timed out connecting to {self.address}"
            raise ConnectFailedError(msg) from e
        except OSError as e:
            msg = f"Failed to connect to {self.address}: {e}"
            raise ConnectFailedError(msg) from e

        self.control_filter.reset()
        self.scanner.clear()
        self._state = SessionState.CONNECTED
        log.debug("Connected with telnet to %s", self.address)

    async def read_until(
        self, prompt: PromptLike | Iterable[PromptLike], time_limit: float | None = None
    ) -> bytes:
        """Read until the output ends with one of the given prompts.

        The deadline covers the whole call, not each transport read. Negotiation
        replies produced by the filter are written back as soon as they appear.

        Args:
            prompt: Prompt, or several alternative prompts, to wait for
            time_limit: Seconds to wait in total, defaults to config.read_timeout

        Returns:
            All output since the previous block, including the prompt

        Raises:
            TelnetTimeoutError: If the prompt does not arrive before the deadline
            ConnectionClosedError: If the stream ends, or was never connected
            TelnetIOError: If the transport fails
            BufferLimitError: If the output grows past the buffer ceiling
        """
        reader = self._require_reader()
        if time_limit is None:
            time_limit = self.config.read_timeout

        # Leftovers from the previous read may already hold the prompt
        block = self.scanner.expect(*self._encode_prompts(prompt))
        if block is not None:
            return block

        try:
            async with asyncio_timeout(time_limit):
                while True:
                    chunk = await reader.read(READ_CHUNK_SIZE)
                    if not chunk:
                        msg = f"Connection to {self.address} closed while waiting for {prompt!r}"
                        raise ConnectionClosedError(msg)

                    data, replies = self.control_filter.feed(chunk)
                    if replies:
                        await self._send_raw(b"".join(replies))
                    if data and (block := self.scanner.feed(data)) is not None:
                        log.debug("Matched prompt from %s after %d bytes", self.address, len(block))
                        return block
        except TelnetError:
            raise
        except TimeoutError as e:
            msg = f"Timeout waiting for {prompt!r}"
            raise TelnetTimeoutError(msg) from e
        except OSError as e:
            msg = f"Error reading from {self.address}: {e}"
            raise TelnetIOError(msg) from e

    async def write(self, data: bytes, time_limit: float | None = None) -> None:
        """Write data to the telnet connection with IAC escaping.

        Raises:
            TelnetTimeoutError: If the write does not complete before the deadline
            ConnectionClosedError: If the session is not connected
            TelnetIOError: If the transport fails
        """
        self._require_writer()
        if time_limit is None:
            time_limit = self.config.read_timeout

        try:
            async with asyncio_timeout(time_limit):
                await self._send_raw(escape_iac(data))
        except TimeoutError as e:
            msg = f"Timeout writing to {self.address}"
            raise TelnetTimeoutError(msg) from e

    async def send_line(self, text: str, time_limit: float | None = None) -> None:
        """Send a line of text, appending the newline unless already present."""
        await self.write(self._terminate(text).encode(self.config.encoding), time_limit)

    async def login(self, username: str, password: str, time_limit: float | None = None) -> None:
        """Log in by answering the username and password prompts.

        Wrong credentials are not detected as such: the command prompt never
        arrives and the final step fails with a timeout.

        Args:
            username: Sent after the username prompt
            password: Sent after the password prompt
            time_limit: Seconds allowed for each prompt, defaults to config.read_timeout

        Raises:
            SessionStateError: If the session already logged in or has failed
            TelnetTimeoutError: If any prompt does not arrive in time
            ConnectionClosedError: If the stream ends during the handshake
            TelnetIOError: If the transport fails
        """
        self._check_state(self._state == SessionState.CONNECTED, "login")
        log.debug("Logging in to %s as %s", self.address, username)
        try:
            self._advance(SessionState.AWAIT_USERNAME_PROMPT)
            await self.read_until(self.config.username_prompt, time_limit)
            self._advance(SessionState.SEND_USERNAME)
            await self.send_line(username, time_limit)

            self._advance(SessionState.AWAIT_PASSWORD_PROMPT)
            await self.read_until(self.config.password_prompt, time_limit)
            self._advance(SessionState.SEND_PASSWORD)
            await self.send_line(password, time_limit)

            self._advance(SessionState.AWAIT_COMMAND_PROMPT)
            await self.read_until(self.config.prompts, time_limit)
        except TelnetError:
            self._advance(SessionState.FAILED)
            raise
        self._advance(SessionState.READY)
        log.info("Logged in to %s as %s", self.address, username)

    async def normal_execute(self, command: str, time_limit: float | None = None) -> str:
        """Run a command and return everything the server sent back.

        The result includes the echoed command line and the trailing prompt.

        Returns:
            The decoded output block, unchanged
        """
        block = await self._run(command, time_limit)
        return block.decode(self.config.encoding, errors="replace")

    async def execute(self, command: str, time_limit: float | None = None) -> str:
        """Run a command and return only its output.

        The echoed command lines and the trailing prompt are removed and line
        endings are normalised to ``\\n``. A bare carriage return sent as
        ``CR NUL`` is dropped. If the first line of the output is not the echo
        of the command, only the prompt is removed.

        Returns:
            The command's own output
        """
        block = await self._run(command, time_limit)
        output = extract_output(
            block,
            self._terminate(command).encode(self.config.encoding),
            [prompt.encode(self.config.encoding) for prompt in self.config.prompts],
        )
        output = output.replace(b"\r\x00", b"").replace(b"\r\n", b"\n")
        return output.decode(self.config.encoding, errors="replace")

    async def _run(self, command: str, time_limit: float | None) -> bytes:
        """Send a command and wait for the command prompt.

        Returns:
            The raw output block
        """
        self._check_state(self._state.accepts_commands, "execute")
        log.debug("Executing on %s: %r", self.address, command)
        try:
            await self.send_line(command, time_limit)
            return await self.read_until(self.config.prompts, time_limit)
        except TelnetError:
            self._advance(SessionState.FAILED)
            raise

    async def close(self) -> None:
        """Close the telnet connection."""
        if self.writer:
            try:
                self.writer.close()
                async with asyncio_timeout(self.config.read_timeout):
                    await self.writer.wait_closed()
            except TimeoutError:
                log.warning("Timed out waiting for telnet connection to %s to close", self.address)
            except Exception:
                log.exception("Error closing telnet connection")
            finally:
                log.debug("Closed telnet connection to %s", self.address)
        self.writer = None
        self.reader = None
        self.scanner.clear()
        self.control_filter.reset()
        self._state = SessionState.CLOSED

    async def _send_raw(self, data: bytes) -> None:
        """Write bytes as they are and wait for the transport to accept them.

        Raises:
            TelnetIOError: If the transport fails
        """
        writer = self._require_writer()
        try:
            writer.write(data)
            await writer.drain()
        except OSError as e:
            msg = f"Error writing to {self.address}: {e}"
            raise TelnetIOError(msg) from e

    def _require_reader(self) -> StreamReader:
        if self.reader is None:
            msg = f"Not connected to {self.address}"
            raise ConnectionClosedError(msg)
        return self.reader

    def _require_writer(self) -> StreamWriter:
        if self.writer is None:
            msg = f"Not connected to {self.address}"
            raise ConnectionClosedError(msg)
        return self.writer

    def _check_state(self, allowed: bool, operation: str) -> None:
        """Reject operations that the current state does not allow.

        Raises:
            ConnectionClosedError: If the session is not connected
            SessionStateError: If the state does not allow the operation
        """
        if not self.is_connected:
            msg = f"Not connected to {self.address}"
            raise ConnectionClosedError(msg)
        if not allowed:
            msg = f"Cannot {operation} while session is {self._state.name}"
            if self._state == SessionState.FAILED:
                msg += "; reconnect to continue"
            raise SessionStateError(msg)

    def _advance(self, state: SessionState) -> None:
        log.debug("Session %s: %s -> %s", self.address, self._state.name, state.name)
        self._state = state

    def _terminate(self, text: str) -> str:
        # Already terminated lines are sent as they are
        if text.endswith(("\n", self.config.newline)):
            return text
        return text + self.config.newline

    def _encode_prompts(self, prompt: PromptLike | Iterable[PromptLike]) -> tuple[bytes, ...]:
        if isinstance(prompt, (str, bytes)):
            prompt = (prompt,)
        return tuple(p.encode(self.config.encoding) if isinstance(p, str) else p for p in prompt)


def extract_output(block: bytes, command: bytes, prompts: Iterable[bytes]) -> bytes:
    """Strip the echoed command and the trailing prompt from an output block.

    The echo is recognised by comparing the block's first line with the first
    line of the command, ignoring spaces and control bytes, since terminals
    wrap long echoes with `` \\r``. On a match as many lines as the command
    spans are dropped. Without a match the echo is left in place and only the
    prompt is removed.

    Args:
        block: Output block as returned by read_until
        command: The command as it was sent, including its newline
        prompts: Prompts that may terminate the block

    Returns:
        The command's own output
    """
    for prompt in sorted(prompts, key=len, reverse=True):
        if prompt and block.endswith(prompt):
            block = block[: -len(prompt)]
            break

    command_lines = command.rstrip(b"\r\n").split(b"\n")
    first_line, newline, rest = block.partition(b"\n")
    if not newline or _visible(first_line) != _visible(command_lines[0]):
        return block

    for _ in command_lines[1:]:
        _, newline, rest = rest.partition(b"\n")
        if not newline:
            return b""
    return rest


def _visible(line: bytes) -> bytes:
    # Printable bytes only: drops spaces, CR and other terminal control bytes
    return bytes(byte for byte in line if byte > _SPACE)


async def connect(address: str | TelnetAddress, config: TelnetConfig) -> TelnetSession:
    """Connect to a telnet server.

    Returns:
        A connected TelnetSession

    Raises:
        ConnectFailedError: If the connection attempt fails
    """
    return await TelnetSession.connect_to(address, config)
