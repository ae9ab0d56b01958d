"""Prompt detection over the filtered byte stream."""

from __future__ import annotations

from dataclasses import dataclass, field

from mini_telnet.constants import MAX_BUFFER_SIZE

from .errors import BufferLimitError, PromptNotConfiguredError


@dataclass(slots=True)
class PromptScanner:
    """Accumulate output and cut it into blocks ending with a prompt.

    A match is reported at the earliest point where the buffer ends with one
    of the active prompts, exactly as if the tail were checked after every
    single byte. Bytes received after the prompt stay buffered and become the
    start of the next block.
    """

    max_buffer_size: int = field(default=MAX_BUFFER_SIZE)
    prompts: tuple[bytes, ...] = field(default=())
    buffer: bytearray = field(default_factory=bytearray)
    # Offset below which no active prompt can start, to avoid rescanning
    _scan_from: int = field(default=0, init=False)

    def expect(self, *prompts: bytes) -> bytes | None:
        """Switch the active prompts and check what is already buffered.

        Returns:
            A completed output block, or None if more data is needed

        Raises:
            PromptNotConfiguredError: If no prompt, or an empty prompt, is given
        """
        if not prompts or not all(prompts):
            msg = "Cannot scan for an empty prompt"
            raise PromptNotConfiguredError(msg)
        self.prompts = prompts
        self._scan_from = 0
        return self._match()

    def feed(self, data: bytes) -> bytes | None:
        """Append filtered bytes and check for the active prompts.

        Returns:
            A completed output block, or None if more data is needed

        Raises:
            PromptNotConfiguredError: If no prompt has been set with expect
            BufferLimitError: If the unconsumed output exceeds the buffer ceiling
        """
        if not self.prompts:
            msg = "No prompt is being waited for"
            raise PromptNotConfiguredError(msg)
        self.buffer.extend(data)
        block = self._match()
        # Leftovers after a match count towards the ceiling too
        if len(self.buffer) > self.max_buffer_size:
            msg = f"Unconsumed output exceeded {self.max_buffer_size} bytes"
            raise BufferLimitError(msg)
        return block

    def _match(self) -> bytes | None:
        """Cut the buffer at the earliest prompt end, if any.

        Returns:
            The block up to and including the prompt, or None
        """
        if not self.prompts:
            return None

        end = -1
        for prompt in self.prompts:
            index = self.buffer.find(prompt, self._scan_from)
            if index != -1 and (end == -1 or index + len(prompt) < end):
                end = index + len(prompt)

        if end == -1:
            longest = max(len(prompt) for prompt in self.prompts)
            self._scan_from = max(0, len(self.buffer) - longest + 1)
            return None

        block = bytes(self.buffer[:end])
        del self.buffer[:end]
        self._scan_from = 0
        return block

    @property
    def pending(self) -> bytes:
        """Bytes received but not yet returned in a block."""
        return bytes(self.buffer)

    def clear(self) -> None:
        """Discard buffered output."""
        self.buffer.clear()
        self._scan_from = 0
