"""
Incremental line framing over byte streams and message channels.

A line source frames the next complete line out of whatever carries the
engine's output. Polling never blocks: when no full line is buffered the
source reports PENDING and the caller awaits ``wait_readable()`` before
polling again.

Two consumption disciplines exist:

1. **Manual-consuming** sources (``ByteBufferLineSource`` and the stream
   and transport sources built on it) re-derive the same line from their
   byte buffer on every poll until ``consume(length)`` removes it. Bytes
   may arrive one at a time.

2. **Auto-consuming** sources (``MessageLineSource``) hand out each line
   exactly once. A line that was looked at but not claimed is handed back
   through ``restore()`` and is returned by the next poll.

Wire Format Notes:
- Lines end with LF; the returned text includes the terminator
- A line is only framed once its bytes decode as UTF-8, so a multi-byte
  code point split across chunks is never cut
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from ucicodec.exceptions import TimeoutError, TransportError
from ucicodec.protocol.constants import ECHOED_GUI_KEYWORDS, GuiKeyword, ProtocolConstants

if TYPE_CHECKING:
    from ucicodec.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)

_ARGUMENT_KEYWORDS = frozenset({GuiKeyword.POSITION, GuiKeyword.GO, GuiKeyword.SETOPTION})


class LinePollResult(Enum):
    """Result codes for a single poll of a line source."""

    LINE = auto()
    """A complete line is available."""

    PENDING = auto()
    """No complete line is buffered yet; wait and poll again."""

    EOF = auto()
    """No more bytes will arrive and no partial line remains."""


@dataclass(frozen=True)
class LinePoll:
    """
    Outcome of polling a line source.

    Attributes:
        result: What the poll found.
        line: The framed line text (terminator included when present).
        length: Number of buffered bytes the line occupies.
    """

    result: LinePollResult
    line: str = ""
    length: int = 0

    @classmethod
    def pending(cls) -> LinePoll:
        return cls(LinePollResult.PENDING)

    @classmethod
    def eof(cls) -> LinePoll:
        return cls(LinePollResult.EOF)


class LineSource(ABC):
    """
    Abstract base class for line sources.

    A line source is owned by exactly one reader at a time. Polling must be
    idempotent: a PENDING result leaves the source exactly as it was.
    """

    auto_consume: bool = False
    """Whether lines are removed from the source as soon as they are polled."""

    @abstractmethod
    def poll_line(self) -> LinePoll:
        """
        Frame the next line without blocking.

        Raises:
            TransportError: If the underlying stream failed.
        """
        ...

    @abstractmethod
    def consume(self, length: int) -> None:
        """Permanently remove ``length`` bytes from the front of the buffer."""
        ...

    def restore(self, line: str) -> None:
        """
        Hand back a polled but unclaimed line.

        Only auto-consuming sources need this; manual sources still hold the
        line in their buffer.
        """
        raise NotImplementedError(f"{type(self).__name__} does not hand out lines")

    @abstractmethod
    async def wait_readable(self) -> None:
        """
        Suspend until polling might make progress.

        Raises:
            TransportError: If the underlying stream failed.
            TimeoutError: If the source gave up waiting.
        """
        ...


class ByteBufferLineSource(LineSource):
    """
    Manual-consuming line source over an in-memory byte buffer.

    Bytes are appended with ``feed()`` and the end of the stream is
    signalled with ``feed_eof()``. The same line is returned by every poll
    until it is consumed.

    Example:
        >>> source = ByteBufferLineSource()
        >>> source.feed(b"uci")
        >>> source.poll_line().result
        <LinePollResult.PENDING: 2>
        >>> source.feed(b"ok\\n")
        >>> poll = source.poll_line()
        >>> poll.line, poll.length
        ('uciok\\n', 6)
    """

    def __init__(self, data: bytes = b"", *, eof: bool = False) -> None:
        self._buffer = bytearray(data)
        self._eof = eof
        self._readable = asyncio.Event()

    @property
    def buffered(self) -> bytes:
        """Bytes not yet consumed."""
        return bytes(self._buffer)

    @property
    def at_eof(self) -> bool:
        """Whether the end of the stream has been signalled."""
        return self._eof

    def feed(self, data: bytes) -> None:
        """Append bytes received from the stream."""
        if self._eof:
            raise TransportError("Cannot feed data after end of stream")
        if data:
            self._buffer.extend(data)
            self._readable.set()

    def feed_eof(self) -> None:
        """Signal that no more bytes will arrive."""
        self._eof = True
        self._readable.set()

    def poll_line(self) -> LinePoll:
        buffer = self._buffer
        newline = buffer.find(ProtocolConstants.LINE_TERMINATOR_BYTE)

        if newline >= 0:
            length = newline + 1
            try:
                return LinePoll(LinePollResult.LINE, buffer[:length].decode("utf-8"), length)
            except UnicodeDecodeError as e:
                # Only the valid prefix is usable and it holds no terminator yet.
                logger.debug("Invalid UTF-8 at byte %d, waiting for more data", e.start)
                if self._eof:
                    raise TransportError(f"Invalid UTF-8 in stream at byte {e.start}") from e
                return LinePoll.pending()

        if not self._eof:
            return LinePoll.pending()

        if not buffer:
            return LinePoll.eof()

        # Unterminated final line
        try:
            return LinePoll(LinePollResult.LINE, buffer.decode("utf-8"), len(buffer))
        except UnicodeDecodeError as e:
            raise TransportError(f"Stream ended inside invalid UTF-8 at byte {e.start}") from e

    def consume(self, length: int) -> None:
        if length < 0 or length > len(self._buffer):
            raise ValueError(f"Cannot consume {length} bytes, {len(self._buffer)} buffered")
        del self._buffer[:length]

    async def wait_readable(self) -> None:
        if self._eof:
            return
        await self._readable.wait()
        self._readable.clear()


class StreamReaderLineSource(ByteBufferLineSource):
    """
    Manual-consuming line source over an ``asyncio.StreamReader``.

    Typically wraps the stdout of an engine subprocess or a TCP connection.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        chunk_size: int = ProtocolConstants.DEFAULT_CHUNK_SIZE,
    ) -> None:
        super().__init__()
        self._reader = reader
        self._chunk_size = chunk_size

    async def wait_readable(self) -> None:
        if self.at_eof:
            return
        try:
            data = await self._reader.read(self._chunk_size)
        except OSError as e:
            raise TransportError(f"Stream read failed: {e}") from e

        if data:
            self.feed(data)
        else:
            logger.debug("Stream reached end of file")
            self.feed_eof()


class TransportLineSource(ByteBufferLineSource):
    """
    Manual-consuming line source reading from a transport.

    A read timeout on the transport is propagated to the caller; an empty
    read means the transport reached end of stream.
    """

    def __init__(
        self,
        transport: AbstractTransport,
        chunk_size: int = ProtocolConstants.DEFAULT_CHUNK_SIZE,
        timeout: float | None = None,
    ) -> None:
        super().__init__()
        self._transport = transport
        self._chunk_size = chunk_size
        self._timeout = timeout

    async def wait_readable(self) -> None:
        if self.at_eof:
            return
        try:
            data = await self._transport.read(self._chunk_size, timeout=self._timeout)
        except TimeoutError:
            logger.debug("Timed out waiting for data on %s", self._transport.port_name)
            raise

        if data:
            self.feed(data)
        else:
            logger.debug("Transport %s reached end of stream", self._transport.port_name)
            self.feed_eof()


def split_message(message: str, *, filter_echo: bool = False) -> list[str]:
    """
    Split a multi-line message into protocol lines.

    Each line is right-stripped and a trailing empty element (from a final
    newline) is dropped. With ``filter_echo`` set, controller commands echoed
    back by a pseudo-terminal bridge are removed.

    Example:
        >>> split_message("uci\\nid name X\\n", filter_echo=True)
        ['id name X']
    """
    lines = [line.rstrip() for line in message.split(ProtocolConstants.LINE_TERMINATOR)]
    if lines and not lines[-1]:
        lines.pop()
    if filter_echo:
        lines = [line for line in lines if not is_echoed_command(line)]
    return lines


def is_echoed_command(line: str) -> bool:
    """Check whether a line is a controller command rather than engine output."""
    keyword, _, rest = line.partition(" ")
    if keyword not in ECHOED_GUI_KEYWORDS:
        return False
    # Bare keywords for the fixed commands, keyword plus arguments for the rest
    return bool(rest) == (keyword in _ARGUMENT_KEYWORDS)


class MessageLineSource(LineSource):
    """
    Auto-consuming line source for line-granular message channels.

    Messages (for example websocket frames relayed from an engine) are split
    into lines on arrival. Each poll removes the line it returns; a line
    handed back with ``restore()`` is returned first by the next poll.
    """

    auto_consume = True

    def __init__(self, *, filter_echo: bool = False) -> None:
        self._lines: deque[str] = deque()
        self._restored: str | None = None
        self._closed = False
        self._filter_echo = filter_echo
        self._readable = asyncio.Event()

    def __len__(self) -> int:
        return len(self._lines) + (self._restored is not None)

    def feed_message(self, message: str) -> None:
        """Split a received message into lines and queue them."""
        if self._closed:
            raise TransportError("Cannot feed messages after the channel closed")
        lines = split_message(message, filter_echo=self._filter_echo)
        self._lines.extend(lines)
        if lines:
            self._readable.set()

    def close(self) -> None:
        """Signal that the channel closed."""
        self._closed = True
        self._readable.set()

    def poll_line(self) -> LinePoll:
        if self._restored is not None:
            line, self._restored = self._restored, None
        elif self._lines:
            line = self._lines.popleft()
        elif self._closed:
            return LinePoll.eof()
        else:
            return LinePoll.pending()
        return LinePoll(LinePollResult.LINE, line, len(line.encode("utf-8")))

    def consume(self, length: int) -> None:
        # Lines were removed when polled
        pass

    def restore(self, line: str) -> None:
        if self._restored is not None:
            raise RuntimeError("A restored line is already pending")
        self._restored = line

    async def wait_readable(self) -> None:
        if self._closed:
            return
        await self._readable.wait()
        self._readable.clear()
