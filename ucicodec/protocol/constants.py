"""
UCI protocol keywords and constants.

Based on the Stockfish UCI command reference and the UCI protocol
description at https://backscattering.de/chess/uci/.
"""

from __future__ import annotations

from typing import Final


class EngineKeyword:
    """Leading keywords of lines sent by the engine."""

    ID: Final[str] = "id"
    OPTION: Final[str] = "option"
    UCIOK: Final[str] = "uciok"
    READYOK: Final[str] = "readyok"
    INFO: Final[str] = "info"


class GuiKeyword:
    """Leading keywords of lines sent by the controller."""

    UCI: Final[str] = "uci"
    ISREADY: Final[str] = "isready"
    UCINEWGAME: Final[str] = "ucinewgame"
    POSITION: Final[str] = "position"
    GO: Final[str] = "go"
    STOP: Final[str] = "stop"
    QUIT: Final[str] = "quit"
    SETOPTION: Final[str] = "setoption"


class ProtocolConstants:
    """Wire-level constants and defaults."""

    LINE_TERMINATOR: Final[str] = "\n"
    """Lines end with LF; a preceding CR is tolerated on input."""

    LINE_TERMINATOR_BYTE: Final[int] = 0x0A

    EMPTY_STRING: Final[str] = "<empty>"
    """Literal used on the wire for an empty string option value."""

    DEFAULT_RECEIVE_TIMEOUT: Final[float] = 5.0
    """Default time to wait for an engine reply, in seconds."""

    DEFAULT_CHUNK_SIZE: Final[int] = 4096
    """Maximum bytes requested from a stream per read."""

    DEFAULT_BAUD_RATE: Final[int] = 115200
    """Default baud rate for engines attached over a serial line."""


# Controller commands that a pseudo-terminal bridge may echo back.
ECHOED_GUI_KEYWORDS: Final[frozenset[str]] = frozenset(
    {
        GuiKeyword.UCI,
        GuiKeyword.ISREADY,
        GuiKeyword.QUIT,
        GuiKeyword.STOP,
        GuiKeyword.UCINEWGAME,
        GuiKeyword.POSITION,
        GuiKeyword.GO,
        GuiKeyword.SETOPTION,
    }
)
