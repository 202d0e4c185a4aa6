"""
Line dispatch: apply a decode function to the next framed line.

The decode function inspects one line and returns a ``LineOutcome``:

- **read**: the line was decoded into a value and is committed
- **error**: the line failed to decode; it is still committed so a caller
  that wants to resynchronize does not see it again
- **peeked**: the line was inspected but does not belong to the caller;
  nothing is committed and the next dispatch observes the same line

``try_handle_next_line`` never blocks and may report PENDING.
``handle_next_line`` drives it, awaiting the source between attempts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from ucicodec.exceptions import ParseError
from ucicodec.protocol.line_source import LinePollResult

if TYPE_CHECKING:
    from ucicodec.protocol.line_source import LineSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OutcomeKind(Enum):
    """What a decode function did with a line."""

    READ = auto()
    ERROR = auto()
    PEEKED = auto()


@dataclass(frozen=True)
class LineOutcome(Generic[T]):
    """
    Result of applying a decode function to one line.

    Attributes:
        kind: Whether the line was read, failed, or only peeked at.
        value: The decoded value (READ only).
        error: The decode failure (ERROR only).
    """

    kind: OutcomeKind
    value: T | None = None
    error: ParseError | None = None

    @classmethod
    def read(cls, value: T) -> LineOutcome[T]:
        return cls(OutcomeKind.READ, value=value)

    @classmethod
    def failed(cls, error: ParseError) -> LineOutcome[T]:
        return cls(OutcomeKind.ERROR, error=error)

    @classmethod
    def peeked(cls) -> LineOutcome[T]:
        return cls(OutcomeKind.PEEKED)

    @property
    def is_read(self) -> bool:
        return self.kind is OutcomeKind.READ

    @property
    def is_error(self) -> bool:
        return self.kind is OutcomeKind.ERROR

    @property
    def is_peeked(self) -> bool:
        return self.kind is OutcomeKind.PEEKED

    def unwrap(self) -> T:
        """
        Return the decoded value.

        Raises:
            ParseError: The decode failure, if this outcome is an error.
            ValueError: If the line was only peeked at.
        """
        if self.error is not None:
            raise self.error
        if self.kind is OutcomeKind.PEEKED:
            raise ValueError("Peeked outcome carries no value")
        return self.value  # type: ignore[return-value]


class DispatchResult(Enum):
    """Result codes for a dispatch attempt."""

    OUTCOME = auto()
    """A line was framed and the decode function produced an outcome."""

    PENDING = auto()
    """No complete line yet; nothing was committed."""

    END_OF_STREAM = auto()
    """The stream ended with no usable line."""


def decoding(parse: Callable[[str], T]) -> Callable[[str], LineOutcome[T]]:
    """
    Adapt a raising parser into a decode function.

    ``ParseError`` becomes an ERROR outcome; any other return value is READ.

    Example:
        >>> decode = decoding(IdCommand.decode)
        >>> result, outcome = try_handle_next_line(source, decode)
    """

    def decode(line: str) -> LineOutcome[T]:
        try:
            return LineOutcome.read(parse(line))
        except ParseError as e:
            return LineOutcome.failed(e)

    return decode


def try_handle_next_line(
    source: LineSource,
    decode: Callable[[str], LineOutcome[T]],
) -> tuple[DispatchResult, LineOutcome[T] | None]:
    """
    Apply ``decode`` to the next line of ``source`` without blocking.

    Args:
        source: Line source to pull from.
        decode: Function classifying the line as read, error or peeked.

    Returns:
        Tuple of (result, outcome):
        - (OUTCOME, LineOutcome) when a line was framed
        - (PENDING, None) when no full line is buffered yet
        - (END_OF_STREAM, None) when the stream is exhausted

    Raises:
        TransportError: If the source failed. Never retried here.
    """
    poll = source.poll_line()

    if poll.result is LinePollResult.PENDING:
        return DispatchResult.PENDING, None
    if poll.result is LinePollResult.EOF:
        return DispatchResult.END_OF_STREAM, None

    outcome = decode(poll.line)

    if outcome.kind is OutcomeKind.PEEKED:
        if source.auto_consume:
            source.restore(poll.line)
        logger.debug("Peeked %r", poll.line)
    else:
        source.consume(poll.length)
        if outcome.kind is OutcomeKind.ERROR:
            logger.debug("Failed to decode %r: %s", poll.line, outcome.error)

    return DispatchResult.OUTCOME, outcome


async def handle_next_line(
    source: LineSource,
    decode: Callable[[str], LineOutcome[T]],
) -> LineOutcome[T] | None:
    """
    Apply ``decode`` to the next line, waiting for one to arrive.

    Returns:
        The outcome, or None if the stream ended with no usable line.
    """
    while True:
        result, outcome = try_handle_next_line(source, decode)
        if result is DispatchResult.PENDING:
            await source.wait_readable()
            continue
        return outcome


async def run_to_completion(
    step: Callable[[LineSource], tuple[DispatchResult, T | None]],
    source: LineSource,
) -> T | None:
    """
    Drive a non-blocking ``step`` until it stops reporting PENDING.

    ``step`` is a "try to make progress" operation of a stateful reader
    (block assembler, handshake sequencer). Its state survives between
    attempts, so it is simply called again once the source is readable.
    """
    while True:
        result, value = step(source)
        if result is DispatchResult.PENDING:
            await source.wait_readable()
            continue
        return value
