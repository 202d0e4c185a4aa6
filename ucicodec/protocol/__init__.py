"""
Protocol layer for UCI communication.

This package contains the line-level machinery every codec builds on:
- Keywords and protocol constants
- Line sources framing LF-terminated lines out of byte streams and messages
- Line dispatch (read / error / peeked) over a line source
- The token cursor used by the command codecs
"""

from ucicodec.protocol.constants import (
    ECHOED_GUI_KEYWORDS,
    EngineKeyword,
    GuiKeyword,
    ProtocolConstants,
)
from ucicodec.protocol.dispatch import (
    DispatchResult,
    LineOutcome,
    OutcomeKind,
    decoding,
    handle_next_line,
    run_to_completion,
    try_handle_next_line,
)
from ucicodec.protocol.line_source import (
    ByteBufferLineSource,
    LinePoll,
    LinePollResult,
    LineSource,
    MessageLineSource,
    StreamReaderLineSource,
    TransportLineSource,
    is_echoed_command,
    split_message,
)
from ucicodec.protocol.token_reader import TokenReader

__all__ = [
    # Constants
    "EngineKeyword",
    "GuiKeyword",
    "ProtocolConstants",
    "ECHOED_GUI_KEYWORDS",
    # Line Sources
    "LineSource",
    "LinePoll",
    "LinePollResult",
    "ByteBufferLineSource",
    "StreamReaderLineSource",
    "TransportLineSource",
    "MessageLineSource",
    "split_message",
    "is_echoed_command",
    # Dispatch
    "DispatchResult",
    "LineOutcome",
    "OutcomeKind",
    "decoding",
    "try_handle_next_line",
    "handle_next_line",
    "run_to_completion",
    # Tokens
    "TokenReader",
]
