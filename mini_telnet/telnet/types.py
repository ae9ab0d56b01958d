"""Telnet protocol types module."""

from __future__ import annotations

from enum import IntEnum
from ipaddress import IPv6Address, ip_address
from typing import NamedTuple, Self

from mini_telnet.constants import DEFAULT_TELNET_PORT, IAC_BYTE, MAX_PORT, MIN_PORT


class ParserState(IntEnum):
    """States for the control-sequence filter state machine."""

    DATA = 0
    IAC = 1
    COMMAND = 2
    SUBNEG = 3
    SUBNEG_IAC = 4


class SessionState(IntEnum):
    """Position of a session in the telnet protocol conversation."""

    CONNECTED = 0
    AWAIT_USERNAME_PROMPT = 1
    SEND_USERNAME = 2
    AWAIT_PASSWORD_PROMPT = 3
    SEND_PASSWORD = 4
    AWAIT_COMMAND_PROMPT = 5
    READY = 6
    FAILED = 7
    CLOSED = 8

    @property
    def accepts_commands(self) -> bool:
        """Check if commands may be executed in this state."""
        return self in {SessionState.CONNECTED, SessionState.READY}


class TelnetCommand(IntEnum):
    """Telnet protocol commands."""

    IAC = IAC_BYTE  # Interpret As Command
    DONT = 254
    DO = 253
    WONT = 252
    WILL = 251
    SB = 250  # Subnegotiation Begin
    GA = 249  # Go Ahead
    NOP = 241
    SE = 240  # Subnegotiation End

    @classmethod
    def is_negotiation(cls, cmd: int) -> bool:
        """Check if a command byte is a negotiation command.

        Returns:
            True if the command is a negotiation command, False otherwise
        """
        return cmd in {cls.DO, cls.DONT, cls.WILL, cls.WONT}

    @classmethod
    def describe(cls, cmd: int) -> str:
        """Return a readable name for a command byte, used in debug logs."""
        try:
            return cls(cmd).name
        except ValueError:
            return str(cmd)


class TelnetOption(IntEnum):
    """Well known telnet options, only used to name them in logs."""

    BINARY = 0
    ECHO = 1
    SGA = 3  # Suppress Go Ahead
    STATUS = 5
    TIMING_MARK = 6
    TERMINAL_TYPE = 24
    NAWS = 31  # Negotiate About Window Size
    TERMINAL_SPEED = 32
    LINEMODE = 34
    NEW_ENVIRON = 39

    @classmethod
    def describe(cls, option: int) -> str:
        """Return a readable name for an option byte."""
        try:
            return cls(option).name
        except ValueError:
            return str(option)


class TelnetSequence(NamedTuple):
    """Represents a complete telnet negotiation sequence."""

    command: int
    option: int

    def to_bytes(self) -> bytes:
        """Serialise the sequence to its three wire bytes.

        Returns:
            The IAC, command and option bytes
        """
        return bytes([TelnetCommand.IAC, self.command, self.option])

    def refusal(self) -> bytes:
        """Build the refusal for a negotiation request.

        The client never grants an option:
        - WONT in response to DO
        - DONT in response to WILL
        - nothing in response to WONT or DONT, which are already negative

        Returns:
            The reply to write back, or empty bytes when no reply is due
        """
        match self.command:
            case TelnetCommand.DO:
                return TelnetSequence(TelnetCommand.WONT, self.option).to_bytes()
            case TelnetCommand.WILL:
                return TelnetSequence(TelnetCommand.DONT, self.option).to_bytes()
        return b""


class TelnetAddress(NamedTuple):
    """Host and port of a telnet server."""

    host: str
    port: int = DEFAULT_TELNET_PORT

    @classmethod
    def parse(cls, address: str) -> Self:
        """Parse ``host``, ``host:port``, ``[v6]:port`` or a bare IPv6 literal.

        Returns:
            The parsed address

        Raises:
            ValueError: If the address is empty or the port is invalid
        """
        address = address.strip()
        if not address:
            msg = "Address must not be empty"
            raise ValueError(msg)

        port_text: str | None = None
        if address.startswith("["):
            host, _, rest = address[1:].partition("]")
            if rest:
                if not rest.startswith(":"):
                    msg = f"Invalid address: {address}"
                    raise ValueError(msg)
                port_text = rest[1:]
        elif address.count(":") == 1:
            host, _, port_text = address.partition(":")
        else:
            # Either a plain hostname or an unbracketed IPv6 literal
            host = address
            if ":" in host and not isinstance(_as_ip(host), IPv6Address):
                msg = f"Invalid address: {address}"
                raise ValueError(msg)

        if not host:
            msg = f"Invalid address: {address}"
            raise ValueError(msg)
        if port_text is None:
            return cls(host=host)
        if not port_text.isdigit() or not MIN_PORT <= int(port_text) <= MAX_PORT:
            msg = f"Invalid port in address: {address}"
            raise ValueError(msg)
        return cls(host=host, port=int(port_text))

    def __str__(self) -> str:
        """Format as ``host:port``, bracketing IPv6 hosts."""
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def _as_ip(host: str) -> IPv6Address | None:
    try:
        address = ip_address(host)
    except ValueError:
        return None
    return address if isinstance(address, IPv6Address) else None
