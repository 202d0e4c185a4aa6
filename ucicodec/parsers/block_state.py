"""States shared by the block assemblers."""

from __future__ import annotations

from enum import Enum, auto


class BlockState(Enum):
    """
    Progress of a block assembler.

    EMPTY -> ACCUMULATING -> COMPLETE, with ERRORED reachable from either
    non-terminal state. COMPLETE and ERRORED are terminal.
    """

    EMPTY = auto()
    """No field read yet."""

    ACCUMULATING = auto()
    """At least one field read, block not yet complete."""

    COMPLETE = auto()
    """The block was produced."""

    ERRORED = auto()
    """A duplicate, a malformed line, or a premature end of stream."""

    @property
    def is_terminal(self) -> bool:
        return self in (BlockState.COMPLETE, BlockState.ERRORED)
