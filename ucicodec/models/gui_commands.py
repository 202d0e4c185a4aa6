"""
Controller-to-engine command codecs.

Wire forms:

- ``uci``, ``isready``, ``ucinewgame``, ``stop``, ``quit``: keyword only
- ``position startpos|fen <fen> [moves <m1> <m2> ...]``
- ``go [searchmoves ...] [ponder] [wtime N] ... [infinite] [perft N]``
- ``setoption name <name> [value <value>]``

Positions and moves are opaque strings here; only their token structure is
checked.
"""

from __future__ import annotations

from typing import ClassVar, Union

from pydantic import field_validator

from ucicodec.exceptions import DuplicateFieldError, ParseError, ParseErrorKind
from ucicodec.models.command import Command, KeywordCommand
from ucicodec.models.values import (
    NumaPolicy,
    OptionKind,
    OptionType,
    encode_check,
    encode_uci_string,
)
from ucicodec.protocol.constants import GuiKeyword


def _check_token(value: str, what: str) -> str:
    if not value or any(c.isspace() for c in value):
        raise ValueError(f"Invalid {what} {value!r}")
    return value


class UciCommand(KeywordCommand):
    """Start the handshake."""

    KEYWORD = GuiKeyword.UCI


class IsReadyCommand(KeywordCommand):
    """Readiness probe, answered by ``readyok``."""

    KEYWORD = GuiKeyword.ISREADY


class UciNewGameCommand(KeywordCommand):
    KEYWORD = GuiKeyword.UCINEWGAME


class StopCommand(KeywordCommand):
    KEYWORD = GuiKeyword.STOP


class QuitCommand(KeywordCommand):
    KEYWORD = GuiKeyword.QUIT


class PositionCommand(Command):
    """
    Set up a position.

    Attributes:
        fen: FEN string, or None for the standard start position.
        moves: Moves played from that position, in long algebraic notation.

    Example:
        >>> PositionCommand(moves=("e2e4", "e7e5")).encode()
        'position startpos moves e2e4 e7e5'
    """

    KEYWORD = GuiKeyword.POSITION

    fen: str | None = None
    moves: tuple[str, ...] = ()

    @field_validator("fen")
    @classmethod
    def validate_fen(cls, v: str | None) -> str | None:
        if v is not None and (not v or v != " ".join(v.split()) or "moves" in v.split()):
            raise ValueError(f"Invalid FEN {v!r}")
        return v

    @field_validator("moves")
    @classmethod
    def validate_moves(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for move in v:
            _check_token(move, "move")
        return v

    @classmethod
    def from_fen(cls, fen: str, moves: tuple[str, ...] = ()) -> PositionCommand:
        return cls(fen=fen, moves=moves)

    def encode(self) -> str:
        position = "startpos" if self.fen is None else f"fen {self.fen}"
        line = f"{self.KEYWORD} {position}"
        if self.moves:
            line += " moves " + " ".join(self.moves)
        return line

    @classmethod
    def decode(cls, line: str) -> PositionCommand:
        reader = cls.reader(line)
        reader.expect_command(cls.KEYWORD, has_fields=True)

        token = reader.read("position")
        if token == "startpos":
            fen = None
        elif token == "fen":
            fen_tokens = reader.read_tokens_until({"moves"})
            if not fen_tokens:
                raise reader.error("Missing FEN", ParseErrorKind.UNEXPECTED_END_OF_TOKENS, "fen")
            fen = " ".join(fen_tokens)
        else:
            raise reader.error(f"Expected 'startpos' or 'fen', got {token!r}", ParseErrorKind.UNKNOWN_FIELD, token)

        moves: tuple[str, ...] = ()
        if reader.accept("moves"):
            moves = tuple(reader.read_tokens_until(set()))
        reader.expect_end()
        return cls(fen=fen, moves=moves)


class GoCommand(Command):
    """
    Start searching.

    Only the fields that are set are emitted, in canonical order.

    Example:
        >>> GoCommand(wtime=60000, btime=60000, winc=1000).encode()
        'go wtime 60000 btime 60000 winc 1000'
    """

    KEYWORD = GuiKeyword.GO

    INT_FIELDS: ClassVar[tuple[str, ...]] = (
        "wtime",
        "btime",
        "winc",
        "binc",
        "movestogo",
        "depth",
        "nodes",
        "mate",
        "movetime",
    )
    FLAGS: ClassVar[tuple[str, ...]] = ("ponder", "infinite")

    searchmoves: tuple[str, ...] = ()
    ponder: bool = False
    wtime: int | None = None
    btime: int | None = None
    winc: int | None = None
    binc: int | None = None
    movestogo: int | None = None
    depth: int | None = None
    nodes: int | None = None
    mate: int | None = None
    movetime: int | None = None
    infinite: bool = False
    perft: int | None = None

    @field_validator("searchmoves")
    @classmethod
    def validate_searchmoves(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        keywords = cls.keywords()
        for move in v:
            _check_token(move, "move")
            if move in keywords:
                raise ValueError(f"Move {move!r} collides with a go keyword")
        return v

    @classmethod
    def keywords(cls) -> frozenset[str]:
        return frozenset((*cls.INT_FIELDS, *cls.FLAGS, "searchmoves", "perft"))

    def encode(self) -> str:
        parts = [self.KEYWORD]
        if self.searchmoves:
            parts.append("searchmoves")
            parts.extend(self.searchmoves)
        if self.ponder:
            parts.append("ponder")
        for name in self.INT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                parts.append(f"{name} {value}")
        if self.infinite:
            parts.append("infinite")
        if self.perft is not None:
            parts.append(f"perft {self.perft}")
        return " ".join(parts)

    @classmethod
    def decode(cls, line: str) -> GoCommand:
        reader = cls.reader(line)
        reader.expect_command(cls.KEYWORD)

        keywords = cls.keywords()
        fields: dict[str, object] = {}
        while not reader.is_at_end():
            token = reader.read()
            if token not in keywords:
                raise reader.error(f"Unknown go field {token!r}", ParseErrorKind.UNKNOWN_FIELD, token)
            if token in fields:
                raise DuplicateFieldError(token, block=cls.KEYWORD, line=reader.line)
            if token == "searchmoves":
                moves = reader.read_tokens_until(keywords)
                if not moves:
                    raise reader.error(
                        "Missing moves after 'searchmoves'",
                        ParseErrorKind.UNEXPECTED_END_OF_TOKENS,
                        token,
                    )
                fields[token] = tuple(moves)
            elif token in cls.FLAGS:
                fields[token] = True
            else:
                fields[token] = reader.read_int(token)
        return cls(**fields)


class SetOptionCommand(Command):
    """
    Change an engine option.

    ``value`` is the raw wire text; None means a button (no ``value`` clause).
    Use the typed constructors to render values the way the engine expects.

    Example:
        >>> SetOptionCommand.check("Ponder", True).encode()
        'setoption name Ponder value true'
        >>> SetOptionCommand.button("Clear Hash").encode()
        'setoption name Clear Hash'
    """

    KEYWORD = GuiKeyword.SETOPTION

    name: str
    value: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or v != " ".join(v.split()) or "value" in v.split():
            raise ValueError(f"Invalid option name {v!r}")
        return v

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: str | None) -> str | None:
        if v is not None and (v != v.strip() or "\n" in v or "\r" in v):
            raise ValueError(f"Option value must be single-line text: {v!r}")
        return v

    # ===== Typed constructors =====

    @classmethod
    def spin(cls, name: str | OptionKind, value: int) -> SetOptionCommand:
        return cls(name=str(name), value=str(value))

    @classmethod
    def check(cls, name: str | OptionKind, value: bool) -> SetOptionCommand:
        return cls(name=str(name), value=encode_check(value))

    @classmethod
    def string(cls, name: str | OptionKind, value: str) -> SetOptionCommand:
        return cls(name=str(name), value=encode_uci_string(value))

    @classmethod
    def button(cls, name: str | OptionKind) -> SetOptionCommand:
        return cls(name=str(name))

    @classmethod
    def numa_policy(cls, policy: NumaPolicy) -> SetOptionCommand:
        return cls(name=OptionKind.NUMA_POLICY.value, value=policy.encode())

    @classmethod
    def for_option(
        cls,
        kind: OptionKind,
        value: int | bool | str | NumaPolicy | None = None,
    ) -> SetOptionCommand:
        """
        Build a setoption for a well-known option, checking the value type.

        Raises:
            TypeError: If ``value`` does not fit the option's catalogue type.
        """
        option_type = kind.option_type
        if kind is OptionKind.NUMA_POLICY and isinstance(value, NumaPolicy):
            return cls.numa_policy(value)
        if option_type is OptionType.BUTTON and value is None:
            return cls.button(kind)
        if option_type is OptionType.CHECK and isinstance(value, bool):
            return cls.check(kind, value)
        if option_type is OptionType.SPIN and isinstance(value, int) and not isinstance(value, bool):
            return cls.spin(kind, value)
        if option_type is OptionType.STRING and isinstance(value, str):
            return cls.string(kind, value)
        raise TypeError(f"Value {value!r} does not fit {option_type.value} option {kind.value!r}")

    def encode(self) -> str:
        line = f"{self.KEYWORD} name {self.name}"
        if self.value is None:
            return line
        return f"{line} value {self.value}" if self.value else f"{line} value"

    @classmethod
    def decode(cls, line: str) -> SetOptionCommand:
        reader = cls.reader(line)
        reader.expect_command(cls.KEYWORD, has_fields=True)
        reader.expect("name")
        if not reader.has_ahead("value"):
            name = reader.rest_of_line()
            if not name:
                raise reader.error("Missing option name", ParseErrorKind.UNEXPECTED_END_OF_TOKENS, "name")
            return cls(name=" ".join(name.split()))
        name = reader.read_text_until("value")
        return cls(name=" ".join(name.split()), value=reader.rest_of_line())


GuiCommand = Union[
    UciCommand,
    IsReadyCommand,
    UciNewGameCommand,
    StopCommand,
    QuitCommand,
    PositionCommand,
    GoCommand,
    SetOptionCommand,
]

_GUI_COMMANDS: dict[str, type[Command]] = {
    command.KEYWORD: command
    for command in (
        UciCommand,
        IsReadyCommand,
        UciNewGameCommand,
        StopCommand,
        QuitCommand,
        PositionCommand,
        GoCommand,
        SetOptionCommand,
    )
}


def decode_gui_command(line: str) -> GuiCommand:
    """
    Decode any line sent by the controller.

    Raises:
        ParseError: UNEXPECTED_EOF for a blank line, UNEXPECTED_COMMAND for
            an unknown keyword, or the command's own decode error.
    """
    tokens = line.split(maxsplit=1)
    if not tokens:
        raise ParseError("Empty line", kind=ParseErrorKind.UNEXPECTED_EOF, line=line)
    command_type = _GUI_COMMANDS.get(tokens[0])
    if command_type is None:
        raise ParseError(
            f"Unknown controller command {tokens[0]!r}",
            kind=ParseErrorKind.UNEXPECTED_COMMAND,
            line=line.rstrip(),
        )
    return command_type.decode(line)  # type: ignore[return-value]
