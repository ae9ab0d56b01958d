"""Telnet control-sequence filter.

Strips IAC sequences out of the received byte stream and answers every
option request with a refusal. Parser state is kept between calls to
``feed`` so a sequence split across two transport reads is handled the same
as one delivered in a single chunk.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mini_telnet.cli.console import log
from mini_telnet.constants import IAC_BYTE

from .types import ParserState, TelnetCommand, TelnetOption, TelnetSequence

_ESCAPED_IAC = bytes([IAC_BYTE, IAC_BYTE])


@dataclass(slots=True)
class ControlSequenceFilter:
    """Stateful filter separating data bytes from telnet commands."""

    state: ParserState = field(default=ParserState.DATA)
    # Negotiation command waiting for its option byte
    pending_command: int = field(default=0)

    # Options the server asked for and we refused
    refused_local: set[int] = field(default_factory=set)  # DO requests
    refused_remote: set[int] = field(default_factory=set)  # WILL offers

    def feed(self, data: bytes) -> tuple[bytes, list[bytes]]:
        """Process telnet commands from received data.

        Args:
            data: Raw bytes received from the telnet server

        Returns:
            Tuple containing (clean_data, replies_to_send)
        """
        if not data:
            return b"", []

        processed = bytearray()
        replies: list[bytes] = []

        for byte in data:
            match self.state:
                case ParserState.DATA:
                    if byte == TelnetCommand.IAC:
                        self.state = ParserState.IAC
                    else:
                        processed.append(byte)

                case ParserState.IAC:
                    match byte:
                        case TelnetCommand.IAC:
                            # Escaped IAC - literal 255
                            processed.append(byte)
                            self.state = ParserState.DATA
                        case TelnetCommand.SB:
                            self.state = ParserState.SUBNEG
                        case _ if TelnetCommand.is_negotiation(byte):
                            self.pending_command = byte
                            self.state = ParserState.COMMAND
                        case _:
                            # Two byte command (NOP, GA, ...), nothing to answer
                            log.debug("Ignoring telnet command %s", TelnetCommand.describe(byte))
                            self.state = ParserState.DATA

                case ParserState.COMMAND:
                    reply = self._refuse(self.pending_command, byte)
                    if reply:
                        replies.append(reply)
                    self.pending_command = 0
                    self.state = ParserState.DATA

                case ParserState.SUBNEG:
                    # Subnegotiation payload is discarded
                    if byte == TelnetCommand.IAC:
                        self.state = ParserState.SUBNEG_IAC

                case ParserState.SUBNEG_IAC:
                    # IAC SE ends the block, anything else is escaped payload
                    self.state = ParserState.DATA if byte == TelnetCommand.SE else ParserState.SUBNEG

        return bytes(processed), replies

    def _refuse(self, cmd: int, option: int) -> bytes:
        """Record a negotiation request and build the refusal, if one is due.

        Returns:
            The reply to send to the server, or empty bytes
        """
        log.debug(
            "Received %s %s, refusing", TelnetCommand.describe(cmd), TelnetOption.describe(option)
        )
        match cmd:
            case TelnetCommand.DO:
                self.refused_local.add(option)
            case TelnetCommand.WILL:
                self.refused_remote.add(option)
        return TelnetSequence(cmd, option).refusal()

    @property
    def is_idle(self) -> bool:
        """Check if the filter is between sequences."""
        return self.state == ParserState.DATA

    def reset(self) -> None:
        """Drop any partially received sequence."""
        self.state = ParserState.DATA
        self.pending_command = 0


def escape_iac(data: bytes) -> bytes:
    """Double every IAC byte so outgoing data is not read as a command.

    Returns:
        The escaped data
    """
    # Fast path for common case - no IAC bytes
    if IAC_BYTE not in data:
        return data
    return data.replace(bytes([IAC_BYTE]), _ESCAPED_IAC)
