"""Exceptions raised by telnet sessions.

Every error derives from ``TelnetError`` and also from the closest builtin
exception, so callers can catch either ``TelnetError`` or e.g. ``TimeoutError``.
"""

from __future__ import annotations


class TelnetError(Exception):
    """Base class for all telnet session errors."""


class ConnectFailedError(TelnetError, ConnectionError):
    """The transport could not be connected, or the connect timed out."""


class TelnetTimeoutError(TelnetError, TimeoutError):
    """A deadline elapsed before the expected prompt arrived."""


class ConnectionClosedError(TelnetError, ConnectionError):
    """The remote side closed the stream before the expected prompt arrived."""


class TelnetIOError(TelnetError, OSError):
    """A transport read or write failed."""


class PromptNotConfiguredError(TelnetError, ValueError):
    """An operation needs a prompt that was never configured."""


class BufferLimitError(TelnetError, BufferError):
    """Unconsumed output grew past the configured buffer ceiling."""


class SessionStateError(TelnetError, RuntimeError):
    """An operation is not allowed in the session's current state."""
