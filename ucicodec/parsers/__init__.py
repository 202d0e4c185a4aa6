"""
Block assembly for multi-line engine replies.

The engine's reply to ``uci`` is a sequence of blocks, each made of
several lines:

1. **IdBlockAssembler**: ``id name`` / ``id author`` in either order
2. **OptionBlockAssembler**: any number of ``option`` lines, ended by
   peeking at the first line of another kind
3. **HandshakeSequencer**: both blocks, the blank separator and ``uciok``

Each reader has a non-blocking ``poll()`` that may report PENDING and an
async ``read()`` that waits for input.

Example:
    >>> from ucicodec.parsers import read_handshake
    >>> from ucicodec.protocol import ByteBufferLineSource
    >>>
    >>> response = await read_handshake(ByteBufferLineSource(data, eof=True))
    >>> response.option_block.threads.max
    1024
"""

from ucicodec.parsers.block_state import BlockState
from ucicodec.parsers.handshake import (
    HandshakeOptions,
    HandshakeResponse,
    HandshakeSequencer,
    poll_uciok,
    read_handshake,
    read_uciok,
)
from ucicodec.parsers.id_block import IdBlock, IdBlockAssembler, IdBlockBuilder, read_id_block
from ucicodec.parsers.option_block import OptionBlock, OptionBlockAssembler, read_option_block

__all__ = [
    "BlockState",
    # Identification
    "IdBlock",
    "IdBlockBuilder",
    "IdBlockAssembler",
    "read_id_block",
    # Options
    "OptionBlock",
    "OptionBlockAssembler",
    "read_option_block",
    # Handshake
    "HandshakeOptions",
    "HandshakeResponse",
    "HandshakeSequencer",
    "poll_uciok",
    "read_uciok",
    "read_handshake",
]
