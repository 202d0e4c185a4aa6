"""
ucicodec - Python codec for the Universal Chess Interface (UCI) protocol.

This library decodes and encodes the line protocol spoken between a chess
controller (GUI) and an engine, assembling multi-line replies such as the
``uci`` handshake incrementally from byte streams that may deliver a line
in any number of chunks.

Example:
    >>> from ucicodec import ByteBufferLineSource, read_handshake
    >>>
    >>> async def main():
    ...     source = ByteBufferLineSource(engine_output, eof=True)
    ...     response = await read_handshake(source)
    ...     print(response.id_block.name, response.option_block.threads)
"""

from ucicodec.client import ClientState, EngineClient
from ucicodec.exceptions import (
    ConnectionError,
    DuplicateFieldError,
    HandshakeError,
    HandshakePhase,
    IncompleteBlockError,
    IncompleteResponseError,
    MissingSeparatorError,
    ParseError,
    ParseErrorKind,
    ProtocolError,
    TimeoutError,
    TransportError,
    TypeMismatchError,
    UciCodecError,
)
from ucicodec.models import (
    GoCommand,
    IdCommand,
    IsReadyCommand,
    NumaPolicy,
    OptionCommand,
    OptionKind,
    OptionType,
    PositionCommand,
    ReadyOkCommand,
    SetOptionCommand,
    Spin,
    UciCommand,
    UciOkCommand,
    UciOption,
    decode_engine_command,
    decode_gui_command,
)
from ucicodec.parsers import (
    HandshakeOptions,
    HandshakeResponse,
    HandshakeSequencer,
    IdBlock,
    OptionBlock,
    read_handshake,
    read_id_block,
    read_option_block,
)
from ucicodec.protocol import (
    ByteBufferLineSource,
    DispatchResult,
    LineOutcome,
    LineSource,
    MessageLineSource,
    handle_next_line,
    try_handle_next_line,
)
from ucicodec.transport import AbstractTransport, AsyncSerialTransport, MockTransport

__version__ = "0.1.0"
__all__ = [
    # Client
    "EngineClient",
    "ClientState",
    # Line Sources and Dispatch
    "LineSource",
    "ByteBufferLineSource",
    "MessageLineSource",
    "DispatchResult",
    "LineOutcome",
    "try_handle_next_line",
    "handle_next_line",
    # Commands
    "UciCommand",
    "IsReadyCommand",
    "PositionCommand",
    "GoCommand",
    "SetOptionCommand",
    "IdCommand",
    "OptionCommand",
    "UciOkCommand",
    "ReadyOkCommand",
    "decode_engine_command",
    "decode_gui_command",
    # Values
    "OptionKind",
    "OptionType",
    "Spin",
    "NumaPolicy",
    "UciOption",
    # Blocks
    "IdBlock",
    "OptionBlock",
    "HandshakeOptions",
    "HandshakeResponse",
    "HandshakeSequencer",
    "read_id_block",
    "read_option_block",
    "read_handshake",
    # Exceptions
    "UciCodecError",
    "TransportError",
    "TimeoutError",
    "ConnectionError",
    "ProtocolError",
    "ParseError",
    "ParseErrorKind",
    "DuplicateFieldError",
    "IncompleteBlockError",
    "TypeMismatchError",
    "HandshakeError",
    "HandshakePhase",
    "MissingSeparatorError",
    "IncompleteResponseError",
    # Transport
    "AbstractTransport",
    "AsyncSerialTransport",
    "MockTransport",
    # Version
    "__version__",
]
