"""
Async serial transport using pyserial-asyncio.

For engines attached over a serial line (a dedicated analysis box, or a
board computer bridged through a USB-UART adapter).

Serial Configuration:
- Baud rate: 115200 (default)
- Data bits: 8
- Parity: None
- Stop bits: 1
- Flow control: None

Example:
    >>> transport = AsyncSerialTransport("/dev/ttyUSB0")
    >>> async with transport:
    ...     await transport.write(b"uci\\n")
    ...     chunk = await transport.read(4096)
"""

from __future__ import annotations

import asyncio
import logging

from ucicodec.exceptions import TimeoutError, TransportError
from ucicodec.protocol.constants import ProtocolConstants
from ucicodec.transport.abc import AbstractTransport

try:
    import serial
    import serial_asyncio

    SERIAL_AVAILABLE = True
except ImportError:
    SERIAL_AVAILABLE = False
    serial = None  # type: ignore[assignment]
    serial_asyncio = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class AsyncSerialTransport(AbstractTransport):
    """
    Async serial transport using pyserial-asyncio.

    Reads return as soon as any bytes are available; line framing is left to
    the line source on top.

    Attributes:
        port_name: Serial port path (e.g., "/dev/ttyUSB0", "COM3").
        is_open: Whether the port is currently open.

    Example:
        >>> transport = AsyncSerialTransport("/dev/ttyUSB0", baudrate=115200)
        >>> await transport.open()
        >>> try:
        ...     await transport.write(b"isready\\n")
        ...     chunk = await transport.read(4096, timeout=5.0)
        ... finally:
        ...     await transport.close()
    """

    def __init__(
        self,
        port: str,
        baudrate: int = ProtocolConstants.DEFAULT_BAUD_RATE,
        default_timeout: float = ProtocolConstants.DEFAULT_RECEIVE_TIMEOUT,
    ) -> None:
        """
        Initialize the async serial transport.

        Args:
            port: Serial port path (e.g., "/dev/ttyUSB0", "COM3").
            baudrate: Baud rate (default: 115200).
            default_timeout: Default read timeout in seconds (default: 5.0).

        Raises:
            ImportError: If pyserial-asyncio is not installed.
        """
        if not SERIAL_AVAILABLE:
            raise ImportError(
                "pyserial-asyncio is required for serial communication. "
                "Install with: pip install pyserial-asyncio"
            )

        self._port = port
        self._baudrate = baudrate
        self._default_timeout = default_timeout
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._serial_instance: serial.Serial | None = None

    @property
    def is_open(self) -> bool:
        return (
            self._writer is not None
            and not self._writer.is_closing()
            and self._reader is not None
        )

    @property
    def port_name(self) -> str:
        return self._port

    @property
    def baudrate(self) -> int:
        return self._baudrate

    async def open(self) -> None:
        """
        Open the serial port (8N1, no flow control).

        Raises:
            TransportError: If the port cannot be opened.
        """
        if self.is_open:
            return

        try:
            self._reader, self._writer = await serial_asyncio.open_serial_connection(
                url=self._port,
                baudrate=self._baudrate,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                bytesize=serial.EIGHTBITS,
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
            )
            # Underlying port, for buffer resets
            transport = self._writer.transport
            if hasattr(transport, "serial"):
                self._serial_instance = transport.serial

        except serial.SerialException as e:
            raise TransportError(f"Failed to open serial port {self._port}: {e}") from e
        except OSError as e:
            raise TransportError(f"OS error opening {self._port}: {e}") from e

        logger.info("Opened %s at %d baud", self._port, self._baudrate)

    async def close(self) -> None:
        """Close the port. Safe to call multiple times."""
        if self._writer is not None:
            try:
                self._writer.close()
                await self._writer.wait_closed()
            except (OSError, serial.SerialException) as e:
                logger.debug("Error while closing %s: %s", self._port, e)

        self._reader = None
        self._writer = None
        self._serial_instance = None

    async def write(self, data: bytes) -> None:
        """
        Write data to the serial port.

        Raises:
            TransportError: If the port is not open or write fails.
        """
        if not self.is_open:
            raise TransportError("Serial port is not open")

        try:
            self._writer.write(data)
            await self._writer.drain()
        except (OSError, serial.SerialException) as e:
            raise TransportError(f"Write failed: {e}") from e

    async def read(self, max_size: int, timeout: float | None = None) -> bytes:
        """
        Read up to ``max_size`` bytes, waiting for at least one.

        Returns:
            The bytes read, or ``b""`` if the port reached end of stream.

        Raises:
            TimeoutError: If no data arrives before the timeout.
            TransportError: If the port is not open or read fails.
        """
        if not self.is_open:
            raise TransportError("Serial port is not open")

        effective_timeout = timeout if timeout is not None else self._default_timeout

        try:
            return await asyncio.wait_for(
                self._reader.read(max_size),
                timeout=effective_timeout,
            )
        except asyncio.TimeoutError:
            raise TimeoutError(
                f"Timeout waiting for data on {self._port}",
                timeout_seconds=effective_timeout,
            ) from None
        except (OSError, serial.SerialException) as e:
            raise TransportError(f"Read failed: {e}") from e

    def discard_buffers(self) -> None:
        """
        Discard pending data in the serial port's input and output buffers.

        Data already buffered by the asyncio layer is not affected.
        """
        if self._serial_instance is not None:
            try:
                self._serial_instance.reset_input_buffer()
                self._serial_instance.reset_output_buffer()
            except (OSError, serial.SerialException) as e:
                logger.debug("Could not reset buffers on %s: %s", self._port, e)

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"AsyncSerialTransport({self._port!r}, baudrate={self._baudrate}, {status})"
