"""
Transport layer for engine communication.

Available transports:
- AsyncSerialTransport: Async serial port using pyserial-asyncio
- MockTransport: Mock transport for testing without an engine

Example:
    >>> from ucicodec.transport import AsyncSerialTransport
    >>> async with AsyncSerialTransport("/dev/ttyUSB0") as transport:
    ...     await transport.write(b"uci\\n")
    ...     chunk = await transport.read(4096)

Testing Example:
    >>> from ucicodec.transport import MockTransport
    >>> mock = MockTransport()
    >>> mock.add_lines("readyok")
"""

from ucicodec.transport.abc import AbstractTransport
from ucicodec.transport.mock import MockTransport, ScriptedMockTransport, encode_lines
from ucicodec.transport.serial_async import AsyncSerialTransport

__all__ = [
    "AbstractTransport",
    "AsyncSerialTransport",
    "MockTransport",
    "ScriptedMockTransport",
    "encode_lines",
]
