"""
The ``uci`` handshake.

After the controller sends ``uci`` the engine replies with, in order:

1. The identification block (``id name``, ``id author``)
2. Exactly one blank line
3. The option declaration block (zero or more ``option`` lines)
4. ``uciok``, possibly preceded by further blank lines

Each phase gates the next. Lines already committed by an earlier phase
are not rolled back when a later phase fails.

Example:
    >>> source = ByteBufferLineSource(transcript, eof=True)
    >>> response = await read_handshake(source)
    >>> response.id_block.name
    'Stockfish 17.1'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from pydantic import BaseModel, ConfigDict

from ucicodec.exceptions import (
    HandshakeError,
    HandshakePhase,
    IncompleteResponseError,
    MissingSeparatorError,
    ParseError,
    ParseErrorKind,
)
from ucicodec.models.engine_commands import UciOkCommand
from ucicodec.parsers.id_block import IdBlock, IdBlockAssembler
from ucicodec.parsers.option_block import OptionBlock, OptionBlockAssembler
from ucicodec.protocol.dispatch import (
    DispatchResult,
    LineOutcome,
    run_to_completion,
    try_handle_next_line,
)

if TYPE_CHECKING:
    from ucicodec.protocol.line_source import LineSource

logger = logging.getLogger(__name__)


class HandshakeOptions(BaseModel):
    """
    Handshake behaviour.

    Attributes:
        allow_empty_option_block: Accept an engine that declares no options.
            When False, a reply without ``option`` lines fails in the
            OPTIONS phase.
    """

    model_config = ConfigDict(frozen=True)

    allow_empty_option_block: bool = True


@dataclass(frozen=True)
class HandshakeResponse:
    """The engine's complete reply to ``uci``."""

    id_block: IdBlock
    option_block: OptionBlock
    uciok: UciOkCommand

    def encode(self) -> str:
        """Render the reply as the engine sends it, without the final terminator."""
        parts = [self.id_block.encode(), ""]
        if not self.option_block.is_empty:
            parts.extend([self.option_block.encode(), ""])
        parts.append(self.uciok.encode())
        return "\n".join(parts)


def _decode_separator(line: str) -> LineOutcome[None]:
    if not line.strip():
        return LineOutcome.read(None)
    return LineOutcome.failed(
        ParseError(
            "Expected empty line after id block",
            kind=ParseErrorKind.UNEXPECTED_FORMAT,
            line=line.rstrip(),
        )
    )


def _decode_ready(line: str) -> LineOutcome[UciOkCommand | None]:
    # Blank lines before uciok are skipped
    if not line.strip():
        return LineOutcome.read(None)
    try:
        return LineOutcome.read(UciOkCommand.decode(line))
    except ParseError as e:
        return LineOutcome.failed(e)


def poll_uciok(source: LineSource) -> tuple[DispatchResult, UciOkCommand | None]:
    """
    Read ``uciok``, skipping blank lines.

    Returns:
        (OUTCOME, UciOkCommand), (PENDING, None) or (END_OF_STREAM, None).

    Raises:
        ParseError: If a non-blank line other than ``uciok`` is read.
    """
    while True:
        result, outcome = try_handle_next_line(source, _decode_ready)
        if result is not DispatchResult.OUTCOME:
            return result, None
        outcome = cast("LineOutcome[UciOkCommand | None]", outcome)
        value = outcome.unwrap()
        if value is not None:
            return result, value


async def read_uciok(source: LineSource) -> UciOkCommand | None:
    """Read ``uciok``, skipping blank lines; None if the stream ended first."""
    return await run_to_completion(poll_uciok, source)


class HandshakeSequencer:
    """
    Incremental reader for the full handshake reply.

    Attributes:
        phase: The phase currently being read.
    """

    def __init__(self, options: HandshakeOptions | None = None) -> None:
        self.options = options or HandshakeOptions()
        self.phase = HandshakePhase.IDENTIFICATION
        self._id_assembler = IdBlockAssembler()
        self._option_assembler = OptionBlockAssembler()
        self._id_block: IdBlock | None = None
        self._option_block: OptionBlock | None = None
        self._response: HandshakeResponse | None = None

    def poll(self, source: LineSource) -> tuple[DispatchResult, HandshakeResponse | None]:
        """
        Advance through the handshake phases as far as the input allows.

        Returns:
            Tuple of (result, response):
            - (OUTCOME, HandshakeResponse) once ``uciok`` was read
            - (PENDING, None) when more input is needed
            - (END_OF_STREAM, None) if the stream ended before any ``id`` line

        Raises:
            HandshakeError: Naming the failed phase; the cause is the
                underlying ParseError where there is one.
        """
        if self._response is not None:
            return DispatchResult.OUTCOME, self._response

        if self.phase is HandshakePhase.IDENTIFICATION:
            try:
                result, id_block = self._id_assembler.poll(source)
            except ParseError as e:
                logger.warning("Identification block failed: %s", e)
                raise HandshakeError("Invalid identification block", phase=self.phase) from e
            if result is not DispatchResult.OUTCOME:
                return result, None
            self._id_block = id_block
            self._advance(HandshakePhase.SEPARATOR)

        if self.phase is HandshakePhase.SEPARATOR:
            result, outcome = try_handle_next_line(source, _decode_separator)
            if result is DispatchResult.PENDING:
                return result, None
            if result is DispatchResult.END_OF_STREAM:
                raise IncompleteResponseError(self.phase)
            outcome = cast("LineOutcome[None]", outcome)
            if outcome.is_error:
                logger.warning("Missing separator after identification block")
                raise MissingSeparatorError(outcome.error.line or "") from outcome.error  # type: ignore[union-attr]
            self._advance(HandshakePhase.OPTIONS)

        if self.phase is HandshakePhase.OPTIONS:
            try:
                result, option_block = self._option_assembler.poll(source)
            except ParseError as e:
                logger.warning("Option block failed: %s", e)
                raise HandshakeError("Invalid option block", phase=self.phase) from e
            if result is DispatchResult.PENDING:
                return result, None
            if result is DispatchResult.END_OF_STREAM:
                raise IncompleteResponseError(self.phase)
            if option_block is None:
                if not self.options.allow_empty_option_block:
                    raise HandshakeError("Engine declared no options", phase=self.phase)
                option_block = OptionBlock()
            self._option_block = option_block
            self._advance(HandshakePhase.READY)

        try:
            result, uciok = poll_uciok(source)
        except ParseError as e:
            logger.warning("Expected uciok: %s", e)
            raise HandshakeError("Expected uciok", phase=self.phase) from e
        if result is DispatchResult.PENDING:
            return result, None
        if result is DispatchResult.END_OF_STREAM:
            raise IncompleteResponseError(self.phase)

        self._response = HandshakeResponse(
            id_block=cast(IdBlock, self._id_block),
            option_block=cast(OptionBlock, self._option_block),
            uciok=cast(UciOkCommand, uciok),
        )
        logger.debug("Handshake complete")
        return DispatchResult.OUTCOME, self._response

    def _advance(self, phase: HandshakePhase) -> None:
        logger.debug("Handshake phase %s -> %s", self.phase.name, phase.name)
        self.phase = phase

    async def read(self, source: LineSource) -> HandshakeResponse | None:
        """Read the full reply, waiting for input as needed."""
        return await run_to_completion(self.poll, source)


async def read_handshake(
    source: LineSource,
    options: HandshakeOptions | None = None,
) -> HandshakeResponse | None:
    """
    Read the engine's reply to ``uci``.

    Returns:
        The response, or None if the stream ended before any ``id`` line.

    Raises:
        HandshakeError: If any phase fails.
    """
    return await HandshakeSequencer(options).read(source)
