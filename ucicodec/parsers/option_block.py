"""
Option declaration block assembly.

After the identification block the engine declares its options, one
``option`` line each. Every option is optional, so the block has no
"complete" condition of its own: it ends when the next line is not an
option declaration. That line is only peeked at and stays in the source
for whoever reads next.

Well-known options fill a named slot; any other name goes into ``custom``.
Declaring the same name twice is a duplicate error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

from ucicodec.exceptions import DuplicateFieldError, ParseError, ParseErrorKind, UciCodecError
from ucicodec.models.engine_commands import OptionCommand
from ucicodec.models.options import (
    ButtonOption,
    CheckOption,
    OptionData,
    StringOption,
    UciOption,
)
from ucicodec.models.values import NumaPolicy, OptionKind, Spin
from ucicodec.parsers.block_state import BlockState
from ucicodec.protocol.constants import EngineKeyword
from ucicodec.protocol.dispatch import (
    DispatchResult,
    LineOutcome,
    run_to_completion,
    try_handle_next_line,
)

if TYPE_CHECKING:
    from ucicodec.protocol.line_source import LineSource

logger = logging.getLogger(__name__)

BLOCK_NAME = "option block"


@dataclass
class OptionBlock:
    """
    Declared engine options.

    Every slot is optional, so a partially filled block is already a valid
    result. Slots hold the declared typed data, except ``numa_policy`` which
    holds the parsed policy.

    Example:
        >>> block = OptionBlock()
        >>> block.add(UciOption.from_parts("Threads", Spin(default=1, min=1, max=1024)))
        >>> block.threads.max
        1024
    """

    debug_log_file: StringOption | None = None
    numa_policy: NumaPolicy | None = None
    threads: Spin | None = None
    hash: Spin | None = None
    clear_hash: ButtonOption | None = None
    ponder: CheckOption | None = None
    multi_pv: Spin | None = None
    skill_level: Spin | None = None
    move_overhead: Spin | None = None
    nodestime: Spin | None = None
    uci_chess960: CheckOption | None = None
    uci_limit_strength: CheckOption | None = None
    uci_elo: Spin | None = None
    uci_show_wdl: CheckOption | None = None
    syzygy_path: StringOption | None = None
    syzygy_probe_depth: Spin | None = None
    syzygy_50_move_rule: CheckOption | None = None
    syzygy_probe_limit: Spin | None = None
    eval_file: StringOption | None = None
    eval_file_small: StringOption | None = None
    custom: dict[str, OptionData] = field(default_factory=dict)

    def add(self, option: UciOption, line: str | None = None) -> None:
        """
        Store a declaration in its slot.

        Raises:
            DuplicateFieldError: If the option was already declared.
        """
        kind = option.kind
        if kind is None:
            if option.name in self.custom:
                raise DuplicateFieldError(option.name, block=BLOCK_NAME, line=line)
            self.custom[option.name] = option.data
            return

        if getattr(self, kind.slot) is not None:
            raise DuplicateFieldError(kind.value, block=BLOCK_NAME, line=line)
        if kind is OptionKind.NUMA_POLICY:
            setattr(self, kind.slot, option.numa_policy)
        else:
            setattr(self, kind.slot, option.data)

    def get(self, kind: OptionKind) -> UciOption | None:
        """Return the declaration of a well-known option, if present."""
        value = getattr(self, kind.slot)
        if value is None:
            return None
        if isinstance(value, NumaPolicy):
            value = StringOption(default=value.encode())
        return UciOption(name=kind.value, data=value)

    def options(self) -> list[UciOption]:
        """All declarations: well-known ones in catalogue order, then custom ones."""
        declared = [option for kind in OptionKind if (option := self.get(kind)) is not None]
        declared.extend(UciOption(name=name, data=data) for name, data in self.custom.items())
        return declared

    def __len__(self) -> int:
        return sum(getattr(self, kind.slot) is not None for kind in OptionKind) + len(self.custom)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def to_commands(self) -> list[OptionCommand]:
        return [OptionCommand(option=option) for option in self.options()]

    def encode(self) -> str:
        return "\n".join(command.encode() for command in self.to_commands())


def _is_option_line(line: str) -> bool:
    tokens = line.split(maxsplit=1)
    return bool(tokens) and tokens[0] == EngineKeyword.OPTION


def _decode_option_line(line: str) -> LineOutcome[OptionCommand]:
    if not _is_option_line(line):
        return LineOutcome.peeked()
    try:
        return LineOutcome.read(OptionCommand.decode(line))
    except ParseError as e:
        return LineOutcome.failed(e)


class OptionBlockAssembler:
    """
    Incremental reader for the option declaration block.

    Reads ``option`` lines until a line of any other kind is peeked. That
    line is left unconsumed.
    """

    def __init__(self) -> None:
        self.block = OptionBlock()
        self.state = BlockState.EMPTY

    def poll(self, source: LineSource) -> tuple[DispatchResult, OptionBlock | None]:
        """
        Read option lines until the block ends.

        Returns:
            Tuple of (result, block):
            - (OUTCOME, OptionBlock) when a non-option line ended the block
            - (OUTCOME, None) when the first line was not an option
            - (PENDING, None) when more input is needed
            - (END_OF_STREAM, None) if the stream ended before any option

        Raises:
            ParseError: A malformed declaration, a duplicate option, or an end
                of stream before the block was terminated.
        """
        if self.state is BlockState.COMPLETE:
            return DispatchResult.OUTCOME, None if self.block.is_empty else self.block
        if self.state is BlockState.ERRORED:
            raise UciCodecError("Option block assembler already failed")

        while True:
            result, outcome = try_handle_next_line(source, _decode_option_line)

            if result is DispatchResult.PENDING:
                return result, None

            if result is DispatchResult.END_OF_STREAM:
                if self.state is BlockState.EMPTY:
                    logger.debug("Stream ended before option block")
                    return result, None
                self.state = BlockState.ERRORED
                raise ParseError(
                    f"Stream ended after {len(self.block)} options without a terminating line",
                    kind=ParseErrorKind.UNEXPECTED_EOF,
                    command=BLOCK_NAME,
                )

            outcome = cast("LineOutcome[OptionCommand]", outcome)
            if outcome.is_peeked:
                self.state = BlockState.COMPLETE
                if self.block.is_empty:
                    logger.debug("No option declarations")
                    return DispatchResult.OUTCOME, None
                logger.debug("Option block complete: %d options", len(self.block))
                return DispatchResult.OUTCOME, self.block

            if outcome.is_error:
                self.state = BlockState.ERRORED
                raise outcome.error  # type: ignore[misc]

            command: OptionCommand = outcome.value  # type: ignore[assignment]
            try:
                self.block.add(command.option, command.encode())
            except DuplicateFieldError:
                self.state = BlockState.ERRORED
                raise
            self.state = BlockState.ACCUMULATING
            logger.debug("Read option %r", command.option.name)

    async def read(self, source: LineSource) -> OptionBlock | None:
        """Read the block, waiting for input as needed."""
        return await run_to_completion(self.poll, source)


async def read_option_block(source: LineSource) -> OptionBlock | None:
    """
    Read an option declaration block from ``source``.

    Returns:
        The block, or None if no option line came before the first other
        line (or the end of stream).

    Raises:
        ParseError: On malformed declarations, duplicates, or an
            unterminated block.
    """
    return await OptionBlockAssembler().read(source)
