"""
Exception hierarchy for ucicodec.

All exceptions inherit from UciCodecError, providing a clean hierarchy
for error handling. The design follows these principles:

1. Transport faults (I/O) are distinct from protocol errors and are never retried
2. Parse errors carry a kind from a closed taxonomy plus the offending line
3. Block and handshake errors wrap the lower-layer error via ``__cause__``
4. All exceptions provide meaningful error messages
"""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ucicodec.models.values import OptionKind, OptionType


class UciCodecError(Exception):
    """
    Base exception for all ucicodec errors.

    All library-specific exceptions inherit from this class, allowing
    callers to catch all ucicodec errors with a single except clause.
    """

    pass


class TransportError(UciCodecError):
    """
    Transport-level error.

    Raised for low-level byte stream faults:
    - Pipe, socket or serial port errors
    - Reads from a closed source
    - Connection closed by the engine

    These are fatal to the stream; the decoder never retries them.
    """

    pass


class TimeoutError(UciCodecError):  # noqa: A001 - intentionally shadows builtin
    """
    Communication timeout.

    Raised when the engine does not produce the expected reply in time.
    """

    def __init__(
        self,
        message: str = "Communication timeout",
        *,
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(message)
        self.timeout_seconds = timeout_seconds

    def __str__(self) -> str:
        base = super().__str__()
        if self.timeout_seconds is not None:
            return f"{base} (after {self.timeout_seconds:.1f}s)"
        return base


class ConnectionError(UciCodecError):  # noqa: A001 - intentionally shadows builtin
    """
    Engine connection error.

    Raised when the client is used in the wrong connection state or the
    engine never completes the handshake.
    """

    pass


class ProtocolError(UciCodecError):
    """
    Protocol-level error.

    Raised when the engine or controller violates the line protocol.
    """

    pass


class ParseErrorKind(Enum):
    """Closed set of structural decode failures."""

    UNEXPECTED_EOF = auto()
    """The stream or line ended where a value was required."""

    UNEXPECTED_END_OF_TOKENS = auto()
    """The line ended in the middle of a field."""

    UNEXPECTED_COMMAND = auto()
    """The leading keyword does not match the expected command."""

    UNEXPECTED_FORMAT = auto()
    """A field is structurally malformed (missing separator, bad number)."""

    DUPLICATE_FIELD = auto()
    """A block field or named option was seen twice."""

    INCOMPLETE_BLOCK = auto()
    """Mandatory block fields are missing at end of stream."""

    TYPE_MISMATCH = auto()
    """A well-known option was declared with a type other than its catalogue type."""

    UNKNOWN_FIELD = auto()
    """A field keyword outside the closed set for the command."""

    UNKNOWN_KEYWORD = auto()
    """A value keyword outside a closed set (option type, boolean)."""

    CUSTOM = auto()
    """A command-specific failure."""


class ParseError(ProtocolError):
    """
    Line decoding error.

    Raised when a protocol line cannot be decoded into a command, typically due to:
    - A leading keyword for a different command
    - Missing or unknown field keywords
    - Invalid field values
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ParseErrorKind = ParseErrorKind.CUSTOM,
        command: str | None = None,
        field: str | None = None,
        line: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.command = command
        self.field = field
        self.line = line

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.command:
            parts.append(f"command={self.command}")
        if self.field:
            parts.append(f"field={self.field}")
        if self.line is not None:
            # Truncate long lines for display
            display_line = self.line[:60] + "..." if len(self.line) > 60 else self.line
            parts.append(f"line={display_line!r}")
        return " ".join(parts) if len(parts) > 1 else parts[0]


class DuplicateFieldError(ParseError):
    """A block field or option name was seen a second time."""

    def __init__(self, field: str, *, block: str, line: str | None = None) -> None:
        super().__init__(
            f"Repeated field {field!r} in {block}",
            kind=ParseErrorKind.DUPLICATE_FIELD,
            command=block,
            field=field,
            line=line,
        )
        self.block = block


class IncompleteBlockError(ParseError):
    """
    A block ended before all mandatory fields were seen.

    The partially filled builder is kept on the exception for diagnostics.
    """

    def __init__(
        self,
        block: str,
        missing_fields: Sequence[str],
        *,
        builder: object | None = None,
    ) -> None:
        super().__init__(
            f"Incomplete {block}: missing {', '.join(missing_fields)}",
            kind=ParseErrorKind.INCOMPLETE_BLOCK,
            command=block,
        )
        self.block = block
        self.missing_fields = tuple(missing_fields)
        self.builder = builder


class TypeMismatchError(ParseError):
    """A well-known option was declared with the wrong type."""

    def __init__(
        self,
        option_kind: OptionKind,
        found: OptionType,
        *,
        line: str | None = None,
    ) -> None:
        super().__init__(
            f"Option {option_kind.value!r} must be of type "
            f"{option_kind.option_type.value}, found {found.value}",
            kind=ParseErrorKind.TYPE_MISMATCH,
            command="option",
            field=option_kind.value,
            line=line,
        )
        self.option_kind = option_kind
        self.expected = option_kind.option_type
        self.found = found


class HandshakePhase(Enum):
    """Phases of the ``uci`` handshake, in wire order."""

    IDENTIFICATION = auto()
    SEPARATOR = auto()
    OPTIONS = auto()
    READY = auto()


class HandshakeError(ProtocolError):
    """
    Handshake failure.

    Identifies the phase that failed; the lower-layer error (if any) is
    available as ``__cause__``.
    """

    def __init__(self, message: str, *, phase: HandshakePhase) -> None:
        super().__init__(message)
        self.phase = phase

    def __str__(self) -> str:
        return f"{super().__str__()} (phase={self.phase.name})"


class MissingSeparatorError(HandshakeError):
    """The identification block was not followed by a blank line."""

    def __init__(self, line: str) -> None:
        super().__init__(
            f"Expected empty line after id block, found {line.rstrip()!r}",
            phase=HandshakePhase.SEPARATOR,
        )
        self.line = line


class IncompleteResponseError(HandshakeError):
    """The stream ended after the handshake had started."""

    def __init__(self, phase: HandshakePhase) -> None:
        super().__init__("Incomplete uci response", phase=phase)
