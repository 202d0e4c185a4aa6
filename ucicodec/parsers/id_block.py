"""
Identification block assembly.

The engine answers ``uci`` with ``id name <text>`` and ``id author <text>``
in either order. The block is complete as soon as both fields are seen; a
second line for the same field is a duplicate error, and an end of stream
after only one of them is an incomplete block.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from pydantic import BaseModel, ConfigDict

from ucicodec.exceptions import DuplicateFieldError, IncompleteBlockError, UciCodecError
from ucicodec.models.engine_commands import IdCommand, IdField
from ucicodec.parsers.block_state import BlockState
from ucicodec.protocol.dispatch import (
    DispatchResult,
    decoding,
    run_to_completion,
    try_handle_next_line,
)

if TYPE_CHECKING:
    from ucicodec.protocol.dispatch import LineOutcome
    from ucicodec.protocol.line_source import LineSource

logger = logging.getLogger(__name__)

BLOCK_NAME = "id block"

_decode_id = decoding(IdCommand.decode)


class IdBlock(BaseModel):
    """
    Engine identification.

    Example:
        >>> block = IdBlock(name="Stockfish 17.1", author="the Stockfish developers")
        >>> block.encode()
        'id name Stockfish 17.1\\nid author the Stockfish developers'
    """

    model_config = ConfigDict(frozen=True)

    name: str
    author: str

    def to_commands(self) -> list[IdCommand]:
        return [IdCommand.name(self.name), IdCommand.author(self.author)]

    def encode(self) -> str:
        return "\n".join(command.encode() for command in self.to_commands())


@dataclass
class IdBlockBuilder:
    """Partially read identification block, one slot per field."""

    name: str | None = None
    author: str | None = None

    def set(self, command: IdCommand, line: str | None = None) -> None:
        """
        Fill the slot for ``command``'s field.

        Raises:
            DuplicateFieldError: If the slot is already filled.
        """
        slot = command.field.value
        if getattr(self, slot) is not None:
            raise DuplicateFieldError(slot, block=BLOCK_NAME, line=line)
        setattr(self, slot, command.value)

    def missing_fields(self) -> list[str]:
        return [field.value for field in IdField if getattr(self, field.value) is None]

    def try_build(self) -> IdBlock | None:
        """Return the finished block, or None while fields are missing."""
        if self.name is None or self.author is None:
            return None
        return IdBlock(name=self.name, author=self.author)

    def build(self) -> IdBlock:
        """
        Convert to a finished block.

        Raises:
            IncompleteBlockError: Listing the missing fields; carries this builder.
        """
        block = self.try_build()
        if block is None:
            raise IncompleteBlockError(BLOCK_NAME, self.missing_fields(), builder=self)
        return block


class IdBlockAssembler:
    """
    Incremental reader for the identification block.

    ``poll()`` makes as much progress as the buffered lines allow and
    reports PENDING when it needs more; its state survives between calls.

    Example:
        >>> assembler = IdBlockAssembler()
        >>> result, block = assembler.poll(source)
        >>> if result is DispatchResult.PENDING:
        ...     await source.wait_readable()
    """

    def __init__(self) -> None:
        self.builder = IdBlockBuilder()
        self.state = BlockState.EMPTY
        self._block: IdBlock | None = None

    def poll(self, source: LineSource) -> tuple[DispatchResult, IdBlock | None]:
        """
        Read identification lines until the block completes.

        Returns:
            Tuple of (result, block):
            - (OUTCOME, IdBlock) once both fields were read
            - (PENDING, None) when more input is needed
            - (END_OF_STREAM, None) if the stream ended before any field

        Raises:
            ParseError: A malformed line, a duplicate field, or an
                incomplete block at end of stream.
        """
        if self.state is BlockState.COMPLETE:
            return DispatchResult.OUTCOME, self._block
        if self.state is BlockState.ERRORED:
            raise UciCodecError("Identification block assembler already failed")

        while True:
            result, outcome = try_handle_next_line(source, _decode_id)

            if result is DispatchResult.PENDING:
                return result, None

            if result is DispatchResult.END_OF_STREAM:
                if self.state is BlockState.EMPTY:
                    logger.debug("Stream ended before identification block")
                    return result, None
                self.state = BlockState.ERRORED
                raise IncompleteBlockError(BLOCK_NAME, self.builder.missing_fields(), builder=self.builder)

            outcome = cast("LineOutcome[IdCommand]", outcome)
            if outcome.is_error:
                self.state = BlockState.ERRORED
                raise outcome.error  # type: ignore[misc]

            command: IdCommand = outcome.value  # type: ignore[assignment]
            try:
                self.builder.set(command, command.encode())
            except DuplicateFieldError:
                self.state = BlockState.ERRORED
                raise
            self.state = BlockState.ACCUMULATING
            logger.debug("Read id %s", command.field.value)

            block = self.builder.try_build()
            if block is not None:
                self.state = BlockState.COMPLETE
                self._block = block
                logger.debug("Identification block complete: %s by %s", block.name, block.author)
                return DispatchResult.OUTCOME, block

    async def read(self, source: LineSource) -> IdBlock | None:
        """Read the block, waiting for input as needed."""
        return await run_to_completion(self.poll, source)


async def read_id_block(source: LineSource) -> IdBlock | None:
    """
    Read an identification block from ``source``.

    Returns:
        The block, or None if the stream ended before any ``id`` line.

    Raises:
        ParseError: On malformed lines, duplicates, or an incomplete block.
    """
    return await IdBlockAssembler().read(source)
