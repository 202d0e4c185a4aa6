"""
Mock transport for testing.

This module provides a mock transport that stands in for an engine. Engine
output can be queued up front, generated from what the controller writes,
or scripted as request/response pairs.

Example:
    >>> from ucicodec.transport import MockTransport
    >>> from ucicodec import EngineClient
    >>>
    >>> mock = MockTransport()
    >>> mock.add_lines("id name Mock", "id author Tests", "", "uciok")
    >>>
    >>> async with EngineClient(mock) as client:
    ...     print(client.engine_name)
"""

from __future__ import annotations

from collections import deque
from typing import Callable

from ucicodec.exceptions import TimeoutError, TransportError
from ucicodec.protocol.constants import ProtocolConstants
from ucicodec.transport.abc import AbstractTransport


def encode_lines(*lines: str) -> bytes:
    """Join lines into engine output, each terminated by LF."""
    return "".join(line + ProtocolConstants.LINE_TERMINATOR for line in lines).encode("utf-8")


class MockTransport(AbstractTransport):
    """
    Mock transport for testing without an engine.

    Each queued response is delivered by a separate ``read()`` (split further
    if larger than the requested size), so tests control chunk boundaries.
    Once the queue is drained a read returns ``b""`` if ``feed_eof()`` was
    called and raises TimeoutError otherwise.

    Attributes:
        written_data: List of all bytes written to the transport.

    Example:
        >>> mock = MockTransport()
        >>> mock.add_response(b"readyok\\n")
        >>>
        >>> async with mock:
        ...     await mock.write(b"isready\\n")
        ...     assert await mock.read(4096) == b"readyok\\n"
        ...     assert mock.written_data == [b"isready\\n"]
    """

    def __init__(
        self,
        port_name: str = "mock://engine",
        default_timeout: float = ProtocolConstants.DEFAULT_RECEIVE_TIMEOUT,
    ) -> None:
        self._port_name = port_name
        self._default_timeout = default_timeout
        self._is_open = False
        self._eof = False
        self._responses: deque[bytes] = deque()
        self._written_data: list[bytes] = []
        self._read_buffer = bytearray()
        self._response_callback: Callable[[bytes], bytes | None] | None = None

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def port_name(self) -> str:
        return self._port_name

    @property
    def written_data(self) -> list[bytes]:
        """Get all data written to the transport."""
        return self._written_data.copy()

    @property
    def last_written(self) -> bytes | None:
        """Get the most recently written data."""
        return self._written_data[-1] if self._written_data else None

    @property
    def written_lines(self) -> list[str]:
        """All written data decoded and split into lines."""
        text = b"".join(self._written_data).decode("utf-8")
        return text.splitlines()

    def add_response(self, response: bytes) -> None:
        """
        Add a response to the queue.

        Responses are returned in FIFO order on read operations.
        """
        self._responses.append(response)

    def add_responses(self, *responses: bytes) -> None:
        for response in responses:
            self._responses.append(response)

    def add_lines(self, *lines: str) -> None:
        """Queue lines of engine output as a single response."""
        self._responses.append(encode_lines(*lines))

    def feed_eof(self) -> None:
        """Make reads return ``b""`` once the queued output is drained."""
        self._eof = True

    def set_response_callback(
        self,
        callback: Callable[[bytes], bytes | None] | None,
    ) -> None:
        """
        Set a callback to generate engine output from controller input.

        The callback receives the written data and returns the bytes the
        engine replies with, or None for no reply.
        """
        self._response_callback = callback

    def clear(self) -> None:
        """Clear all written data and pending responses."""
        self._written_data.clear()
        self._responses.clear()
        self._read_buffer.clear()
        self._eof = False

    def clear_written(self) -> None:
        self._written_data.clear()

    async def open(self) -> None:
        if self._is_open:
            raise TransportError("Mock transport already open")
        self._is_open = True

    async def close(self) -> None:
        self._is_open = False

    async def write(self, data: bytes) -> None:
        """
        Record written data and trigger the response callback.

        Raises:
            TransportError: If transport is not open.
        """
        if not self._is_open:
            raise TransportError("Mock transport not open")

        self._written_data.append(bytes(data))

        if self._response_callback:
            response = self._response_callback(data)
            if response is not None:
                self._read_buffer.extend(response)

    async def read(self, max_size: int, timeout: float | None = None) -> bytes:
        """
        Return buffered output, or the next queued response.

        Raises:
            TimeoutError: If nothing is available and EOF was not fed.
            TransportError: If transport is not open.
        """
        if not self._is_open:
            raise TransportError("Mock transport not open")

        if not self._read_buffer and self._responses:
            self._read_buffer.extend(self._responses.popleft())

        if not self._read_buffer:
            if self._eof:
                return b""
            effective_timeout = timeout if timeout is not None else self._default_timeout
            raise TimeoutError("No mock response available", timeout_seconds=effective_timeout)

        result = bytes(self._read_buffer[:max_size])
        del self._read_buffer[:max_size]
        return result

    def discard_buffers(self) -> None:
        self._read_buffer.clear()

    def assert_written(self, expected: bytes, index: int = -1) -> None:
        """
        Assert that specific data was written.

        Args:
            expected: Expected bytes.
            index: Index in written_data list (-1 for last).

        Raises:
            AssertionError: If data doesn't match.
        """
        if not self._written_data:
            raise AssertionError("No data written to mock transport")

        actual = self._written_data[index]
        if actual != expected:
            raise AssertionError(f"Written data mismatch: expected {expected!r}, got {actual!r}")

    def assert_write_count(self, expected: int) -> None:
        actual = len(self._written_data)
        if actual != expected:
            raise AssertionError(f"Write count mismatch: expected {expected}, got {actual}")


class ScriptedMockTransport(MockTransport):
    """
    Mock transport with scripted request/response pairs.

    Example:
        >>> mock = ScriptedMockTransport()
        >>> mock.expect(request=b"isready\\n", response=b"readyok\\n")
    """

    def __init__(self, port_name: str = "mock://scripted") -> None:
        super().__init__(port_name)
        self._script: list[tuple[bytes | None, bytes]] = []
        self._script_index = 0

    def expect(
        self,
        response: bytes,
        request: bytes | None = None,
    ) -> None:
        """
        Add an expected request/response pair.

        Args:
            response: Engine output to deliver after the request.
            request: Expected request (None to match any).
        """
        self._script.append((request, response))

    async def write(self, data: bytes) -> None:
        if not self._is_open:
            raise TransportError("Mock transport not open")

        self._written_data.append(bytes(data))

        if self._script_index < len(self._script):
            expected_request, response = self._script[self._script_index]

            if expected_request is not None and data != expected_request:
                raise AssertionError(
                    f"Script mismatch at step {self._script_index}: "
                    f"expected {expected_request!r}, got {data!r}"
                )

            self._read_buffer.extend(response)
            self._script_index += 1

    @property
    def script_complete(self) -> bool:
        return self._script_index == len(self._script)

    def reset_script(self) -> None:
        self._script_index = 0
        self._read_buffer.clear()

    def clear_script(self) -> None:
        self._script.clear()
        self._script_index = 0
