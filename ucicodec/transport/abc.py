"""
Abstract transport interface for engine communication.

A transport carries the raw byte stream between controller and engine. The
codec never depends on a concrete transport: line sources only need
``read()`` to return whatever bytes have arrived, and an empty result once
the engine has gone away.

Implementations:
- AsyncSerialTransport: engine attached to a serial line (pyserial-asyncio)
- MockTransport: scripted engine output for tests
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import TracebackType


class AbstractTransport(ABC):
    """
    Abstract base class for engine transports.

    Transports support the async context manager protocol:

        async with AsyncSerialTransport("/dev/ttyUSB0") as transport:
            await transport.write(b"uci\\n")
            chunk = await transport.read(4096)

    Attributes:
        is_open: Whether the transport connection is currently open.
        port_name: Identifier for the transport (e.g., serial port name).
    """

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True if connected and ready for I/O."""
        ...

    @property
    @abstractmethod
    def port_name(self) -> str:
        """Port name or identifier string (e.g., "/dev/ttyUSB0")."""
        ...

    @abstractmethod
    async def open(self) -> None:
        """
        Open the transport connection.

        Raises:
            TransportError: If the connection cannot be established.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        Close the transport connection.

        Safe to call multiple times. After closing, the transport can be
        reopened with open().
        """
        ...

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Send raw bytes to the engine.

        Raises:
            TransportError: If the transport is not open or write fails.
        """
        ...

    @abstractmethod
    async def read(self, max_size: int, timeout: float | None = None) -> bytes:
        """
        Read whatever bytes are available, up to ``max_size``.

        Waits until at least one byte arrives. Chunk boundaries carry no
        meaning; a line may be split across any number of reads.

        Args:
            max_size: Maximum number of bytes to return.
            timeout: Read timeout in seconds. None uses transport default.

        Returns:
            Between 1 and ``max_size`` bytes, or ``b""`` at end of stream.

        Raises:
            TimeoutError: If no data arrives before the timeout.
            TransportError: If the transport is not open or read fails.
        """
        ...

    @abstractmethod
    def discard_buffers(self) -> None:
        """Discard any pending data in input and output buffers."""
        ...

    async def __aenter__(self) -> AbstractTransport:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
